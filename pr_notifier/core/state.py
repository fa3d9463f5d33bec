"""
轮询周期状态定义
"""

from datetime import datetime
from typing import TypedDict, List

from .models import PullRequest


class PollCycleState(TypedDict):
    """单轮轮询（拉取 -> 分类 -> 通知）的流程状态"""
    cycle: int  # 轮询周期编号
    now: datetime  # 本轮统一时刻，整轮分类均以此为准

    # 快照
    pull_requests: List[PullRequest]

    # 流程控制
    current_stage: str
    error: str  # 拉取失败原因

    # 本轮统计
    notified: int
    suppressed: int  # 被节流跳过
    skipped_closed: int  # 已关闭，跳过
    evicted: int  # 清理的历史记录数
