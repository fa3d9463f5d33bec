from datetime import datetime, timedelta

from .models import PullRequest, Verdict, VerdictKind


def classify(
    pull_request: PullRequest,
    now: datetime,
    max_age: timedelta,
    min_reviewers_approved: int,
) -> Verdict:
    """
    对单个已打开的PR进行分类（按顺序匹配，先中先得）

    1. 创建时间距今超过 max_age -> TOO_OLD（不看审批数）
    2. 审批数不足 min_reviewers_approved -> NEEDS_REVIEW
    3. 否则 -> REVIEWED

    Args:
        pull_request: 已打开的PR
        now: 本轮轮询的统一时刻
        max_age: 最大存活时长
        min_reviewers_approved: 最少审批人数

    Returns:
        Verdict
    """
    created = pull_request.created_at

    if now - created > max_age:
        return Verdict(VerdictKind.TOO_OLD, pull_request, created)

    approved = pull_request.approved_count

    if approved < min_reviewers_approved:
        return Verdict(VerdictKind.NEEDS_REVIEW, pull_request, created, approved)

    return Verdict(VerdictKind.REVIEWED, pull_request, created, approved)
