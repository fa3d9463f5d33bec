from langchain_core.runnables import RunnableConfig

from pr_notifier.core.classifier import classify
from pr_notifier.core.state import PollCycleState
from pr_notifier.utils.thread_safe_logger import log_info, log_debug


def dispatch_node(state: PollCycleState, config: RunnableConfig) -> PollCycleState:
    """通知分发节点

    职责：
    1. 跳过已关闭的PR（不创建历史记录）
    2. 查询通知历史，节流窗口内的PR直接跳过（不分类、不通知）
    3. 对需要通知的PR分类并投递
    4. 清理已不在快照中的历史记录
    """
    configurable = config["configurable"]
    settings = configurable["settings"]
    history = configurable["history"]
    notifier = configurable["notifier"]
    delivery = configurable["delivery"]

    now = state["now"]
    notified = suppressed = skipped_closed = 0
    open_ids = []

    for pull_request in state.get("pull_requests", []):
        if not pull_request.open:
            skipped_closed += 1
            continue

        open_ids.append(pull_request.id)

        if not history.should_notify(pull_request.id, now, settings.throttle_interval):
            suppressed += 1
            continue

        verdict = classify(pull_request, now, settings.max_age, settings.min_reviewers_approved)
        log_debug(f"[分发] PR {pull_request.id} -> {verdict.kind.value}")

        delivery.deliver(notifier.notify, verdict, task_name=f"PR_{pull_request.id}")
        notified += 1

    evicted = history.evict_missing(open_ids)

    log_info(f"[分发] 通知 {notified} 个，节流 {suppressed} 个，已关闭 {skipped_closed} 个")

    return {
        "current_stage": "completed",
        "notified": notified,
        "suppressed": suppressed,
        "skipped_closed": skipped_closed,
        "evicted": evicted,
    }
