"""
通知适配器
功能：把分类结果渲染成消息并投递到控制台或聊天频道（Slack兼容的Webhook）
"""

from abc import ABC, abstractmethod

import requests

from pr_notifier.core.models import Verdict, VerdictKind
from pr_notifier.utils.config import AppConfig, ConfigError
from pr_notifier.utils.helpers import format_timestamp
from pr_notifier.utils.thread_safe_logger import log_error, log_info


def render_message(verdict: Verdict) -> str:
    """把分类结果渲染为通知文本"""
    title = verdict.pull_request.title
    created = format_timestamp(verdict.created_at)

    if verdict.kind is VerdictKind.TOO_OLD:
        return f"pull request {title} is too old (created: {created})"

    if verdict.kind is VerdictKind.NEEDS_REVIEW:
        return (f"pull request {title} needs to be reviewed "
                f"(approved: {verdict.approved_count} created: {created})")

    return (f"pull request {title} has been reviewed "
            f"(approved: {verdict.approved_count} created: {created})")


class Notifier(ABC):
    """通知投递基类，notify 不向调用方抛出异常"""

    name = "notifier"

    def notify(self, verdict: Verdict):
        message = render_message(verdict)
        try:
            self.send(message)
        except Exception as e:
            log_error(f"[通知] {self.name} 投递失败 (PR {verdict.pull_request.id}): {str(e)}")

    @abstractmethod
    def send(self, message: str):
        """投递一条已渲染的消息"""


class ConsoleNotifier(Notifier):
    name = "console"

    def send(self, message: str):
        print(message, flush=True)


class ChatWebhookNotifier(Notifier):
    """Webhook通知：POST {"text", "channel", "username"} 到配置的地址，不重试"""

    name = "chat"

    def __init__(self, uri: str, channel: str, username: str, timeout: float = 10.0):
        if not uri:
            raise ConfigError("Webhook地址不能为空")
        self.uri = uri
        self.channel = channel
        self.username = username
        self.timeout = timeout

    def build_payload(self, message: str) -> dict:
        return {
            "text": message,
            "channel": self.channel,
            "username": self.username,
        }

    def send(self, message: str):
        try:
            response = requests.post(self.uri, json=self.build_payload(message), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            log_error(f"[通知] 发送Webhook消息失败: {str(e)}")
            return

        if not response.ok:
            log_error(f"[通知] 发送Webhook消息失败: {response.status_code} - {response.text[:200]}")


def create_notifier(config: AppConfig, debug: bool = False) -> Notifier:
    """
    启动时选择通知方式（整个进程生命周期内不变）

    Args:
        config: 运行配置
        debug: True 时输出到控制台，否则投递到聊天频道

    Raises:
        ConfigError: 非调试模式下缺少 [slack] 配置
    """
    if debug:
        log_info("[通知] 调试模式：消息输出到控制台")
        return ConsoleNotifier()

    if config.slack is None:
        raise ConfigError("缺少配置段: [slack]（或使用 --debug 输出到控制台）")

    log_info(f"[通知] 消息投递到频道 {config.slack.channel}（用户名: {config.slack.username}）")
    return ChatWebhookNotifier(
        uri=config.slack.uri,
        channel=config.slack.channel,
        username=config.slack.username,
        timeout=config.request_timeout,
    )
