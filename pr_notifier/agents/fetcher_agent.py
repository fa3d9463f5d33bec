from langchain_core.runnables import RunnableConfig

from pr_notifier.adapters.bitbucket_adapter import FetchError
from pr_notifier.core.state import PollCycleState
from pr_notifier.utils.thread_safe_logger import log_info, log_error


def fetch_node(state: PollCycleState, config: RunnableConfig) -> PollCycleState:
    """拉取节点 - 获取PR快照，并确定本轮统一时刻"""
    configurable = config["configurable"]
    source = configurable["source"]
    clock = configurable["clock"]

    try:
        pull_requests = source.fetch_pull_requests()
    except FetchError as e:
        log_error(f"[拉取] 获取PR列表失败: {str(e)}")
        return {
            "current_stage": "fetch_failed",
            "error": str(e),
        }

    log_info(f"[拉取] 获取到 {len(pull_requests)} 个PR")

    return {
        "current_stage": "dispatch",
        "pull_requests": pull_requests,
        "now": clock(),
    }
