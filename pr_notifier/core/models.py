"""
PR通知系统数据模型
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class Reviewer:
    approved: bool
    name: str = ""


@dataclass(frozen=True)
class PullRequest:
    """审查服务器上的一个PR（每轮拉取的只读快照）"""
    id: int
    title: str
    open: bool
    created_at: datetime
    updated_at: datetime
    reviewers: List[Reviewer] = field(default_factory=list)

    @property
    def approved_count(self) -> int:
        return sum(1 for reviewer in self.reviewers if reviewer.approved)


class VerdictKind(str, Enum):
    TOO_OLD = "too_old"
    NEEDS_REVIEW = "needs_review"
    REVIEWED = "reviewed"


@dataclass(frozen=True)
class Verdict:
    """单个PR在单轮轮询中的分类结果"""
    kind: VerdictKind
    pull_request: PullRequest
    created_at: datetime
    approved_count: Optional[int] = None
