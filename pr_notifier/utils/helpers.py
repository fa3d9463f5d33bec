"""
辅助函数
时间源与时间格式化
"""

from datetime import datetime, timezone
from typing import Callable


# 时间源：返回带时区的当前时刻，测试中可替换为固定时刻
Clock = Callable[[], datetime]

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def local_now() -> datetime:
    """默认时间源：本地时区的当前时刻"""
    return datetime.now().astimezone()


def from_unix_millis(ts: int) -> datetime:
    """把毫秒级Unix时间戳转换为本地时区的datetime"""
    seconds, millis = divmod(int(ts), 1000)
    dt = datetime.fromtimestamp(seconds, tz=timezone.utc).replace(microsecond=millis * 1000)
    return dt.astimezone()


def format_timestamp(dt: datetime) -> str:
    """格式化为 YYYY-MM-DD HH:MM:SS（本地时区）"""
    return dt.astimezone().strftime(TIMESTAMP_FORMAT)
