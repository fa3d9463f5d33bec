import time
from typing import Callable, Optional

from langgraph.graph import StateGraph, START, END

from .history import NotificationHistory
from .state import PollCycleState
from pr_notifier.adapters.bitbucket_adapter import FetchError
from pr_notifier.adapters.notifier import Notifier
from pr_notifier.agents.fetcher_agent import fetch_node
from pr_notifier.agents.dispatcher_agent import dispatch_node
from pr_notifier.utils.concurrency_manager import DeliveryGuard
from pr_notifier.utils.config import AppConfig
from pr_notifier.utils.helpers import Clock, local_now
from pr_notifier.utils.thread_safe_logger import (
    log_info, log_warning, set_task_context, clear_task_context
)

# ============================================================================
# 单轮轮询图
# ============================================================================

# 全局图单例
_POLL_CYCLE_GRAPH = None


def routing_func(state: PollCycleState) -> str:
    """拉取完成后的路由"""
    routing_map = {
        "dispatch": "dispatch",
        "fetch_failed": END,
    }
    return routing_map.get(state.get("current_stage", ""), END)


def build_poll_cycle_graph():
    """
    构建单轮轮询图：fetch -> dispatch -> END
    拉取失败时直接结束本轮
    """
    builder = StateGraph(PollCycleState)

    builder.add_node("fetch", fetch_node)
    builder.add_node("dispatch", dispatch_node)

    builder.add_edge(START, "fetch")
    builder.add_conditional_edges("fetch", routing_func, ["dispatch", END])
    builder.add_edge("dispatch", END)

    return builder.compile()


def get_poll_cycle_graph():
    """获取轮询图单例（首次调用时编译，后续复用）"""
    global _POLL_CYCLE_GRAPH

    if _POLL_CYCLE_GRAPH is None:
        _POLL_CYCLE_GRAPH = build_poll_cycle_graph()

    return _POLL_CYCLE_GRAPH


# ============================================================================
# 轮询循环
# ============================================================================

class PollLoop:
    """
    轮询循环：空闲(sleep) <-> 轮询(执行一次轮询图)

    通知历史由循环持有，生命周期等于进程生命周期；
    各协作方通过 configurable 传入图中的节点。
    """

    def __init__(
        self,
        source,
        notifier: Notifier,
        settings: AppConfig,
        history: Optional[NotificationHistory] = None,
        clock: Clock = local_now,
        sleep: Callable[[float], None] = time.sleep,
        delivery: Optional[DeliveryGuard] = None,
    ):
        self.source = source
        self.notifier = notifier
        self.settings = settings
        self.history = history if history is not None else NotificationHistory()
        self.clock = clock
        self.sleep = sleep
        self.delivery = delivery if delivery is not None else DeliveryGuard(settings.delivery_timeout)
        self.graph = get_poll_cycle_graph()
        self.cycle = 0

    def _run_config(self) -> dict:
        return {
            "configurable": {
                "source": self.source,
                "notifier": self.notifier,
                "settings": self.settings,
                "history": self.history,
                "clock": self.clock,
                "delivery": self.delivery,
            }
        }

    def run_cycle(self) -> PollCycleState:
        """
        执行一轮：拉取 -> 分类 -> 通知

        Raises:
            FetchError: 拉取失败且配置了 exit_on_fetch_error
        """
        self.cycle += 1
        set_task_context(f"cycle#{self.cycle}")
        try:
            initial_state = {
                "cycle": self.cycle,
                "current_stage": "fetch",
            }
            final_state = self.graph.invoke(initial_state, self._run_config())

            if final_state.get("current_stage") == "fetch_failed":
                if self.settings.exit_on_fetch_error:
                    raise FetchError(final_state.get("error", "未知错误"))
                log_warning(f"[轮询] 本轮跳过，{self.settings.sleep_interval}秒后重试")

            return final_state
        finally:
            clear_task_context()

    def run_forever(self, max_cycles: Optional[int] = None):
        """
        持续轮询，直到进程被外部终止

        Args:
            max_cycles: 最多执行的轮数（None 表示不限）
        """
        log_info(f"[轮询] 开始轮询，间隔 {self.settings.sleep_interval}秒")
        completed = 0
        while max_cycles is None or completed < max_cycles:
            self.run_cycle()
            completed += 1
            self.sleep(self.settings.sleep_interval)
