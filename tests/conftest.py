"""
Shared fixtures for pr_notifier tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from pr_notifier.adapters.bitbucket_adapter import FetchError
from pr_notifier.adapters.notifier import Notifier
from pr_notifier.core.models import PullRequest, Reviewer
from pr_notifier.utils.config import AppConfig, BitbucketConfig
from pr_notifier.utils.thread_safe_logger import set_log_level

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_pr(pr_id, created_days_ago=1, approvals=(), is_open=True, title=None, now=NOW):
    created = now - timedelta(days=created_days_ago)
    return PullRequest(
        id=pr_id,
        title=title or f"PR-{pr_id}",
        open=is_open,
        created_at=created,
        updated_at=created,
        reviewers=[Reviewer(approved=a) for a in approvals],
    )


class FakeClock:
    def __init__(self, now=NOW):
        self.now = now
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


class FakeSource:
    def __init__(self, pull_requests=None, error=None):
        self.pull_requests = list(pull_requests or [])
        self.error = error
        self.fetches = 0

    def fetch_pull_requests(self):
        self.fetches += 1
        if self.error is not None:
            raise FetchError(self.error)
        return list(self.pull_requests)


class RecordingNotifier(Notifier):
    name = "recording"

    def __init__(self):
        self.verdicts = []
        self.messages = []

    def notify(self, verdict):
        self.verdicts.append(verdict)
        super().notify(verdict)

    def send(self, message):
        self.messages.append(message)


def make_settings(**overrides):
    values = dict(
        min_reviewers_approved=2,
        pr_max_age=30,
        notification_timeout=60,
        sleep_interval=5,
        bitbucket=BitbucketConfig(uri="https://bitbucket.test/prs", username="bot", password="pw"),
        delivery_timeout=None,
    )
    values.update(overrides)
    return AppConfig(**values)


@pytest.fixture(autouse=True)
def reset_log_level():
    set_log_level("INFO")
    yield
    set_log_level("INFO")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def settings():
    return make_settings()
