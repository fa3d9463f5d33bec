"""
PR通知系统
轮询Bitbucket中打开的PR，按审查状态发送通知（带节流）
"""

__version__ = "0.1.0"

# 核心模块
from .core.models import PullRequest, Reviewer, Verdict, VerdictKind
from .core.classifier import classify
from .core.history import NotificationHistory, NotificationHistoryEntry
from .core.workflow import PollLoop, build_poll_cycle_graph

# 适配器
from .adapters.bitbucket_adapter import BitbucketClient, FetchError, parse_pull_requests
from .adapters.notifier import (
    Notifier, ConsoleNotifier, ChatWebhookNotifier, create_notifier, render_message
)

# 工具
from .utils.config import AppConfig, ConfigError, load_config

__all__ = [
    # 核心
    'PullRequest',
    'Reviewer',
    'Verdict',
    'VerdictKind',
    'classify',
    'NotificationHistory',
    'NotificationHistoryEntry',
    'PollLoop',
    'build_poll_cycle_graph',
    # 适配器
    'BitbucketClient',
    'FetchError',
    'parse_pull_requests',
    'Notifier',
    'ConsoleNotifier',
    'ChatWebhookNotifier',
    'create_notifier',
    'render_message',
    # 配置
    'AppConfig',
    'ConfigError',
    'load_config',
]
