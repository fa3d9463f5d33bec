"""
通知历史 - 防止同一PR在节流窗口内被重复通知
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock
from typing import Dict, Iterable, Optional

from pr_notifier.utils.thread_safe_logger import log_debug, log_info


@dataclass
class NotificationHistoryEntry:
    last_notified_at: datetime
    notification_count: int = 0


class NotificationHistory:
    """
    通知历史记录：{PR ID: NotificationHistoryEntry}

    只存在于进程生命周期内，不做持久化。
    检查与更新在同一把锁内完成，保证每个PR在节流窗口内最多通知一次。
    """

    def __init__(self):
        self._entries: Dict[int, NotificationHistoryEntry] = {}
        self._lock = Lock()

    def should_notify(self, pr_id: int, now: datetime, throttle_interval: timedelta) -> bool:
        """
        判断本轮是否应该通知该PR，若应该则同时记录本次通知

        首次出现的PR总是通知（计数从0开始，节流条件不成立）。

        Args:
            pr_id: PR ID
            now: 本轮轮询时刻
            throttle_interval: 节流窗口

        Returns:
            True 表示应通知（已记录），False 表示被节流
        """
        with self._lock:
            entry = self._entries.get(pr_id)
            if entry is None:
                entry = NotificationHistoryEntry(last_notified_at=now)
                self._entries[pr_id] = entry

            elapsed = now - entry.last_notified_at
            if elapsed < throttle_interval and entry.notification_count > 0:
                log_debug(f"[节流] PR {pr_id} 距上次通知 {elapsed.total_seconds():.0f}秒，跳过")
                return False

            entry.notification_count += 1
            entry.last_notified_at = now
            return True

    def record_notification(self, pr_id: int, now: datetime):
        """无条件记录一次通知"""
        with self._lock:
            entry = self._entries.setdefault(pr_id, NotificationHistoryEntry(last_notified_at=now))
            entry.notification_count += 1
            entry.last_notified_at = now

    def get(self, pr_id: int) -> Optional[NotificationHistoryEntry]:
        with self._lock:
            return self._entries.get(pr_id)

    def evict_missing(self, live_ids: Iterable[int]) -> int:
        """
        清理不在最新快照中的PR记录（已关闭或已删除）

        Returns:
            清理的记录数
        """
        live = set(live_ids)
        with self._lock:
            expired = [pr_id for pr_id in self._entries if pr_id not in live]
            for pr_id in expired:
                del self._entries[pr_id]

        if expired:
            log_info(f"[历史清理] 清理了 {len(expired)} 条已不在快照中的PR记录")
        return len(expired)

    def __contains__(self, pr_id: int) -> bool:
        with self._lock:
            return pr_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
