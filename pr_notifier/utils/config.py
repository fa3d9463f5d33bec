"""
配置加载工具
支持 TOML（默认 config.toml）和 YAML 两种格式
"""

import os
import tomllib
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

import yaml


class ConfigError(Exception):
    """配置文件缺失、格式错误或取值非法"""


@dataclass
class BitbucketConfig:
    uri: str
    username: str
    password: str


@dataclass
class SlackConfig:
    uri: str
    username: str
    channel: str


@dataclass
class AppConfig:
    """运行期配置（启动时加载一次）"""
    min_reviewers_approved: int
    pr_max_age: int  # 天
    notification_timeout: int  # 秒，同一PR两次通知的最小间隔
    sleep_interval: int  # 秒，轮询周期
    bitbucket: BitbucketConfig
    slack: Optional[SlackConfig] = None
    request_timeout: float = 30.0
    delivery_timeout: Optional[float] = 10.0
    exit_on_fetch_error: bool = False

    @property
    def max_age(self) -> timedelta:
        return timedelta(days=self.pr_max_age)

    @property
    def throttle_interval(self) -> timedelta:
        return timedelta(seconds=self.notification_timeout)

    def describe(self) -> Dict[str, Any]:
        """返回用于日志输出的配置摘要（隐藏密码）"""
        return {
            "min_reviewers_approved": self.min_reviewers_approved,
            "pr_max_age": self.pr_max_age,
            "notification_timeout": self.notification_timeout,
            "sleep_interval": self.sleep_interval,
            "bitbucket": {"uri": self.bitbucket.uri, "username": self.bitbucket.username, "password": "***"},
            "slack": None if self.slack is None else {
                "uri": self.slack.uri,
                "username": self.slack.username,
                "channel": self.slack.channel,
            },
            "request_timeout": self.request_timeout,
            "delivery_timeout": self.delivery_timeout,
            "exit_on_fetch_error": self.exit_on_fetch_error,
        }


def _read_raw_config(path: str) -> Dict[str, Any]:
    ext = os.path.splitext(path)[1].lower()
    try:
        if ext in (".yaml", ".yml"):
            with open(path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f)
        else:
            with open(path, 'rb') as f:
                raw = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"配置文件未找到: {path}")
    except OSError as e:
        raise ConfigError(f"无法读取配置文件 {path}: {e}")
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"配置文件格式错误 {path}: {e}")

    if not isinstance(raw, dict):
        raise ConfigError(f"配置文件内容必须是键值表: {path}")
    return raw


def _require_uint(raw: Dict[str, Any], key: str) -> int:
    if key not in raw:
        raise ConfigError(f"缺少配置项: {key}")
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"配置项 {key} 必须是非负整数，当前值: {value!r}")
    return value


def _optional_seconds(raw: Dict[str, Any], key: str, default: Optional[float]) -> Optional[float]:
    value = raw.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ConfigError(f"配置项 {key} 必须是非负数，当前值: {value!r}")
    return float(value)


def _require_section(raw: Dict[str, Any], name: str, fields) -> Dict[str, str]:
    section = raw.get(name)
    if not isinstance(section, dict):
        raise ConfigError(f"缺少配置段: [{name}]")
    values = {}
    for field in fields:
        value = section.get(field)
        if not isinstance(value, str):
            raise ConfigError(f"配置项 {name}.{field} 缺失或不是字符串")
        values[field] = value
    return values


def parse_config(raw: Dict[str, Any]) -> AppConfig:
    """把原始键值表校验并转换为 AppConfig"""
    bitbucket = BitbucketConfig(**_require_section(raw, "bitbucket", ("uri", "username", "password")))

    slack = None
    if "slack" in raw:
        slack = SlackConfig(**_require_section(raw, "slack", ("uri", "username", "channel")))

    exit_on_fetch_error = raw.get("exit_on_fetch_error", False)
    if not isinstance(exit_on_fetch_error, bool):
        raise ConfigError(f"配置项 exit_on_fetch_error 必须是布尔值，当前值: {exit_on_fetch_error!r}")

    pr_max_age = _require_uint(raw, "pr_max_age")
    notification_timeout = _require_uint(raw, "notification_timeout")
    try:
        timedelta(days=pr_max_age)
    except OverflowError:
        raise ConfigError(f"配置项 pr_max_age 超出范围，当前值: {pr_max_age}")
    try:
        timedelta(seconds=notification_timeout)
    except OverflowError:
        raise ConfigError(f"配置项 notification_timeout 超出范围，当前值: {notification_timeout}")

    return AppConfig(
        min_reviewers_approved=_require_uint(raw, "min_reviewers_approved"),
        pr_max_age=pr_max_age,
        notification_timeout=notification_timeout,
        sleep_interval=_require_uint(raw, "sleep_interval"),
        bitbucket=bitbucket,
        slack=slack,
        request_timeout=_optional_seconds(raw, "request_timeout", 30.0),
        delivery_timeout=_optional_seconds(raw, "delivery_timeout", 10.0),
        exit_on_fetch_error=exit_on_fetch_error,
    )


def load_config(path: str = "config.toml") -> AppConfig:
    """从配置文件加载配置（扩展名为 .yaml/.yml 时按 YAML 解析，其余按 TOML）"""
    return parse_config(_read_raw_config(path))
