"""
Bitbucket适配器
功能：通过REST接口拉取仓库的PR列表，解析为 PullRequest 快照
"""

from typing import Any, Dict, List

import requests

from pr_notifier.core.models import PullRequest, Reviewer
from pr_notifier.utils.helpers import from_unix_millis
from pr_notifier.utils.thread_safe_logger import log_debug


class FetchError(Exception):
    """拉取PR列表失败（网络错误、响应状态异常或响应格式错误）"""


def _require_bool(raw: Dict[str, Any], key: str) -> bool:
    value = raw[key]
    if not isinstance(value, bool):
        raise FetchError(f"响应格式错误: 字段 {key} 必须是布尔值，当前值: {value!r}")
    return value


def _parse_reviewer(raw: Dict[str, Any]) -> Reviewer:
    user = raw.get("user") or {}
    name = user.get("displayName") or user.get("name") or ""
    return Reviewer(approved=_require_bool(raw, "approved"), name=name)


def _parse_pull_request(raw: Dict[str, Any]) -> PullRequest:
    return PullRequest(
        id=int(raw["id"]),
        title=str(raw["title"]),
        open=_require_bool(raw, "open"),
        created_at=from_unix_millis(raw["createdDate"]),
        updated_at=from_unix_millis(raw["updatedDate"]),
        reviewers=[_parse_reviewer(r) for r in raw.get("reviewers", [])],
    )


def parse_pull_requests(payload: Any) -> List[PullRequest]:
    """
    解析 Bitbucket PR列表响应

    响应格式: {"size": n, "values": [{id, title, open, createdDate, updatedDate, reviewers}, ...]}

    Raises:
        FetchError: 响应结构不符合预期
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("values"), list):
        raise FetchError("响应格式错误: 缺少 values 列表")

    try:
        pull_requests = [_parse_pull_request(raw) for raw in payload["values"]]
    except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
        raise FetchError(f"响应格式错误: PR字段缺失或非法 ({e!r})")

    log_debug(f"[Bitbucket] 响应 size={payload.get('size')}, 解析出 {len(pull_requests)} 个PR")
    return pull_requests


class BitbucketClient:
    """Bitbucket REST 客户端（Basic认证）"""

    def __init__(self, uri: str, username: str, password: str, timeout: float = 30.0):
        """
        Args:
            uri: PR列表接口地址
            username: 用户名
            password: 密码
            timeout: 请求超时（秒）
        """
        self.uri = uri
        self.timeout = timeout
        self.session = requests.Session()
        self.session.auth = (username, password)

    def fetch_pull_requests(self) -> List[PullRequest]:
        """
        拉取当前PR快照

        Raises:
            FetchError: 网络错误、非2xx状态或响应格式错误
        """
        try:
            response = self.session.get(self.uri, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            raise FetchError(f"请求 {self.uri} 失败: {e}")
        except ValueError as e:
            raise FetchError(f"响应不是合法JSON: {e}")

        return parse_pull_requests(payload)
