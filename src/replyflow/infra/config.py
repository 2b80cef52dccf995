"""
配置管理
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..core.delivery.thread_plan import ReplyToMode
from ..core.delivery.tokens import SILENT_REPLY_TOKEN

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.replyflow/config.yaml"


def _resolve_path(config_path: Optional[str]) -> Path:
    return Path(config_path or DEFAULT_CONFIG_PATH).expanduser()


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    加载配置文件

    Args:
        config_path: 配置文件路径，如果为 None 则使用默认路径

    Returns:
        配置字典
    """
    path = _resolve_path(config_path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return get_default_config()

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        logger.info("Config loaded: %s", path)
        return config
    except Exception as e:
        logger.error("Failed to load config %s: %s", path, e)
        return get_default_config()


def get_default_config() -> Dict[str, Any]:
    """
    获取默认配置

    Returns:
        默认配置字典
    """
    return {
        "slack": {
            "bot_token": "",
            "streaming": False,
            "reply_to_mode": ReplyToMode.OFF.value,
            "history_limit": 50,
            "silent_reply_token": SILENT_REPLY_TOKEN,
            "block_streaming": None,
            "text_limit": 4000,
            "remove_ack_after_reply": False,
            "stream_buffer_size": None,
        },
        "logging": {
            "level": "INFO",
        },
    }


def save_config(config: Dict[str, Any], config_path: Optional[str] = None):
    """
    保存配置文件

    Args:
        config: 配置字典
        config_path: 配置文件路径，如果为 None 则使用默认路径
    """
    path = _resolve_path(config_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config, f, default_flow_style=False, allow_unicode=True)
        logger.info("Config saved: %s", path)
    except Exception as e:
        logger.error("Failed to save config %s: %s", path, e)
        raise


# ---------------------------------------------------------------------------
# Typed view of the ``slack`` section
# ---------------------------------------------------------------------------

def _optional_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    return bool(value)


def _int_option(section: Dict[str, Any], key: str, default: Optional[int]) -> Optional[int]:
    value = section.get(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid slack.%s: %r, using %r", key, value, default)
        return default


@dataclass(frozen=True)
class DeliveryConfig:
    """Options the delivery core reads for one Slack account."""

    bot_token: str = ""
    streaming: bool = False
    reply_to_mode: ReplyToMode = ReplyToMode.OFF
    history_limit: int = 50
    silent_reply_token: str = SILENT_REPLY_TOKEN
    block_streaming: Optional[bool] = None
    text_limit: int = 4000
    remove_ack_after_reply: bool = False
    stream_buffer_size: Optional[int] = None

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]]) -> "DeliveryConfig":
        """Build from a full config dict (reads its ``slack`` section)."""
        section = (config or {}).get("slack") or {}
        if not isinstance(section, dict):
            logger.warning("Ignoring malformed 'slack' config section: %r", section)
            section = {}
        defaults = cls()
        token = str(section.get("bot_token") or "") or os.environ.get("SLACK_BOT_TOKEN", "")
        return cls(
            bot_token=token,
            streaming=section.get("streaming") is True,
            reply_to_mode=ReplyToMode.parse(section.get("reply_to_mode")),
            history_limit=_int_option(section, "history_limit", defaults.history_limit),
            silent_reply_token=str(
                section.get("silent_reply_token") or defaults.silent_reply_token
            ),
            block_streaming=_optional_bool(section.get("block_streaming")),
            text_limit=_int_option(section, "text_limit", defaults.text_limit) or defaults.text_limit,
            remove_ack_after_reply=bool(section.get("remove_ack_after_reply", False)),
            stream_buffer_size=_int_option(section, "stream_buffer_size", None),
        )


# ---------------------------------------------------------------------------
# Module-level cached config
# ---------------------------------------------------------------------------

_cached_config: Optional[Dict[str, Any]] = None
_cached_config_path: Optional[str] = None


def get_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Return a cached config dict, loading from disk on first call.

    If *config_path* differs from the previously cached path the config is
    reloaded automatically.
    """
    global _cached_config, _cached_config_path
    if _cached_config is None or config_path != _cached_config_path:
        _cached_config = load_config(config_path)
        _cached_config_path = config_path
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Force-reload config from disk and update the cache."""
    global _cached_config, _cached_config_path
    _cached_config = load_config(config_path)
    _cached_config_path = config_path
    return _cached_config


def reset_config_cache() -> None:
    """Clear the cached config (mainly for tests)."""
    global _cached_config, _cached_config_path
    _cached_config = None
    _cached_config_path = None


def get_delivery_config(config_path: Optional[str] = None) -> DeliveryConfig:
    """Typed delivery options from the cached config."""
    return DeliveryConfig.from_dict(get_config(config_path))
