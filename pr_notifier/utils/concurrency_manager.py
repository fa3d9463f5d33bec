"""
投递超时控制
用线程池执行通知投递，单次投递最多等待 timeout 秒，避免一个慢请求拖住整轮轮询
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from threading import Lock
from typing import Callable, Optional

from .thread_safe_logger import log_error, log_info, log_warning


class DeliveryGuard:
    """通知投递的超时守卫"""

    def __init__(self, timeout: Optional[float] = 10.0, max_workers: int = 4):
        """
        Args:
            timeout: 单次投递最长等待秒数；为 None 或 0 时在当前线程直接执行
            max_workers: 投递线程数
        """
        self.timeout = timeout or None
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = Lock()

        self.stats_lock = Lock()
        self.stats = {
            'total_delivered': 0,
            'total_timed_out': 0,
            'total_failed': 0,
        }

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="Notify_Worker"
                )
            return self._executor

    def _bump(self, key: str):
        with self.stats_lock:
            self.stats[key] += 1

    def deliver(self, task_func: Callable, *args, task_name: str = "notify") -> bool:
        """
        执行一次投递

        Returns:
            True 表示投递在时限内完成，False 表示超时或异常（均已记录日志）
        """
        if self.timeout is None:
            try:
                task_func(*args)
            except Exception as e:
                log_error(f"[投递] {task_name} 执行异常: {str(e)}")
                self._bump('total_failed')
                return False
            self._bump('total_delivered')
            return True

        future = self._get_executor().submit(task_func, *args)
        try:
            future.result(timeout=self.timeout)
        except FutureTimeout:
            log_warning(f"[投递] {task_name} 超过 {self.timeout:g}秒未完成，继续处理下一个PR")
            self._bump('total_timed_out')
            return False
        except Exception as e:
            log_error(f"[投递] {task_name} 执行异常: {str(e)}")
            self._bump('total_failed')
            return False

        self._bump('total_delivered')
        return True

    def get_stats(self) -> dict:
        with self.stats_lock:
            return self.stats.copy()

    def shutdown(self, wait: bool = False):
        """关闭投递线程池"""
        with self._executor_lock:
            if self._executor is not None:
                log_info("[投递] 正在关闭投递线程池...")
                self._executor.shutdown(wait=wait)
                self._executor = None
