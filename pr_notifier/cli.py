"""
命令行入口
"""

import click

from pr_notifier.adapters.bitbucket_adapter import BitbucketClient, FetchError
from pr_notifier.adapters.notifier import create_notifier
from pr_notifier.core.workflow import PollLoop
from pr_notifier.utils.concurrency_manager import DeliveryGuard
from pr_notifier.utils.config import ConfigError, load_config
from pr_notifier.utils.thread_safe_logger import get_logger, log_info, set_log_level


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-c", "--config", "config_path", default="config.toml", show_default=True,
              help="config file name (.toml, .yaml or .yml)")
@click.option("-d", "--debug", is_flag=True, default=False,
              help="print messages to console instead of slack")
def main(config_path: str, debug: bool):
    """Poll Bitbucket for open pull requests and announce their review state."""
    if debug:
        set_log_level("DEBUG")

    try:
        cfg = load_config(config_path)
        notifier = create_notifier(cfg, debug=debug)
    except ConfigError as e:
        raise click.ClickException(f"can't parse config '{config_path}': {e}")

    get_logger().print_section("PR通知机器人")
    log_info(f"[配置] {cfg.describe()}")

    source = BitbucketClient(
        cfg.bitbucket.uri,
        cfg.bitbucket.username,
        cfg.bitbucket.password,
        timeout=cfg.request_timeout,
    )
    delivery = DeliveryGuard(cfg.delivery_timeout)
    loop = PollLoop(source, notifier, cfg, delivery=delivery)

    try:
        loop.run_forever()
    except FetchError as e:
        raise click.ClickException(f"can't get PRs: {e}")
    except KeyboardInterrupt:
        log_info("[轮询] 收到中断信号，退出")
    finally:
        delivery.shutdown(wait=False)


if __name__ == "__main__":
    main()
