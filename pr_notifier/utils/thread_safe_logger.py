"""
线程安全的日志工具
轮询循环与通知投递线程共用同一个输出，避免日志交错
"""

import threading
from typing import Optional
from datetime import datetime
import sys


LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


class ThreadSafeLogger:
    """线程安全的日志记录器"""

    def __init__(self, level: str = "INFO"):
        self._lock = threading.Lock()
        self._task_contexts = {}  # {thread_id: task_name}
        self._threshold = LEVELS[level]

    def set_level(self, level: str):
        """设置最低输出级别（DEBUG/INFO/WARNING/ERROR）"""
        if level not in LEVELS:
            raise ValueError(f"未知日志级别: {level}")
        self._threshold = LEVELS[level]

    def is_enabled_for(self, level: str) -> bool:
        return LEVELS[level] >= self._threshold

    def set_task_context(self, task_name: str):
        """
        为当前线程设置任务上下文（如轮询周期编号）

        Args:
            task_name: 任务名称，会作为日志前缀输出
        """
        self._task_contexts[threading.get_ident()] = task_name

    def clear_task_context(self):
        """清除当前线程的任务上下文"""
        self._task_contexts.pop(threading.get_ident(), None)

    def _get_task_prefix(self) -> str:
        task_name = self._task_contexts.get(threading.get_ident())
        return f"[{task_name}]" if task_name else ""

    def log(self, *args, level: str = "INFO", sep: str = " ", end: str = "\n"):
        """
        线程安全的日志输出

        Args:
            *args: 要打印的内容
            level: 日志级别
            sep: 分隔符
            end: 结束符
        """
        if not self.is_enabled_for(level):
            return

        with self._lock:
            timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
            thread_name = threading.current_thread().name
            task_prefix = self._get_task_prefix()

            prefix_parts = [f"[{timestamp}]", f"[{level}]", f"[{thread_name}]"]
            if task_prefix:
                prefix_parts.append(task_prefix)
            prefix = " ".join(prefix_parts) + " "

            message = sep.join(str(arg) for arg in args)
            print(prefix + message, end=end)
            sys.stdout.flush()

    def info(self, *args, **kwargs):
        self.log(*args, level="INFO", **kwargs)

    def warning(self, *args, **kwargs):
        self.log(*args, level="WARNING", **kwargs)

    def error(self, *args, **kwargs):
        self.log(*args, level="ERROR", **kwargs)

    def debug(self, *args, **kwargs):
        self.log(*args, level="DEBUG", **kwargs)

    def print_section(self, title: str, width: int = 60):
        """打印分隔线和标题"""
        with self._lock:
            print("=" * width)
            if title:
                print(title.center(width))
                print("=" * width)
            sys.stdout.flush()


# 全局单例
_logger: Optional[ThreadSafeLogger] = None


def get_logger() -> ThreadSafeLogger:
    """获取线程安全日志记录器单例"""
    global _logger
    if _logger is None:
        _logger = ThreadSafeLogger()
    return _logger


def set_log_level(level: str):
    get_logger().set_level(level)


def log_info(*args, **kwargs):
    get_logger().info(*args, **kwargs)


def log_warning(*args, **kwargs):
    get_logger().warning(*args, **kwargs)


def log_error(*args, **kwargs):
    get_logger().error(*args, **kwargs)


def log_debug(*args, **kwargs):
    get_logger().debug(*args, **kwargs)


def set_task_context(task_name: str):
    """为当前线程设置任务上下文"""
    get_logger().set_task_context(task_name)


def clear_task_context():
    """清除当前线程的任务上下文"""
    get_logger().clear_task_context()
