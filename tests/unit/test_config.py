"""Tests for YAML config loading and the typed delivery view."""

import yaml

from src.replyflow.core.delivery.thread_plan import ReplyToMode
from src.replyflow.infra.config import (
    DeliveryConfig,
    get_config,
    get_default_config,
    get_delivery_config,
    load_config,
    reload_config,
    save_config,
)


def _write(path, data):
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return str(path)


class TestLoadConfig:
    def test_missing_file_returns_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "nope.yaml"))
        assert config == get_default_config()

    def test_invalid_yaml_returns_defaults(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("slack: [unclosed", encoding="utf-8")
        assert load_config(str(path)) == get_default_config()

    def test_empty_file_is_empty_dict(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(str(path)) == {}

    def test_save_then_load(self, tmp_path):
        path = str(tmp_path / "nested" / "config.yaml")
        save_config({"slack": {"streaming": True}}, path)
        assert load_config(path) == {"slack": {"streaming": True}}


class TestCachedConfig:
    def test_get_config_caches_until_reload(self, tmp_path):
        path = _write(tmp_path / "c.yaml", {"slack": {"history_limit": 5}})
        first = get_config(path)
        _write(tmp_path / "c.yaml", {"slack": {"history_limit": 9}})
        assert get_config(path) is first
        assert reload_config(path)["slack"]["history_limit"] == 9

    def test_get_delivery_config(self, tmp_path):
        path = _write(tmp_path / "c.yaml", {"slack": {"reply_to_mode": "first"}})
        assert get_delivery_config(path).reply_to_mode == ReplyToMode.FIRST


class TestDeliveryConfig:
    def test_defaults(self):
        cfg = DeliveryConfig.from_dict(get_default_config())
        assert cfg.streaming is False
        assert cfg.reply_to_mode == ReplyToMode.OFF
        assert cfg.history_limit == 50
        assert cfg.silent_reply_token == "NO_REPLY"
        assert cfg.block_streaming is None
        assert cfg.text_limit == 4000
        assert cfg.remove_ack_after_reply is False
        assert cfg.stream_buffer_size is None

    def test_reads_slack_section(self):
        cfg = DeliveryConfig.from_dict({
            "slack": {
                "bot_token": "xoxb-1",
                "streaming": True,
                "reply_to_mode": "all",
                "history_limit": 0,
                "silent_reply_token": "SKIP",
                "block_streaming": False,
                "text_limit": 3000,
                "remove_ack_after_reply": True,
                "stream_buffer_size": 256,
            },
        })
        assert cfg.bot_token == "xoxb-1"
        assert cfg.streaming is True
        assert cfg.reply_to_mode == ReplyToMode.ALL
        assert cfg.history_limit == 0
        assert cfg.silent_reply_token == "SKIP"
        assert cfg.block_streaming is False
        assert cfg.text_limit == 3000
        assert cfg.remove_ack_after_reply is True
        assert cfg.stream_buffer_size == 256

    def test_streaming_requires_literal_true(self):
        assert DeliveryConfig.from_dict({"slack": {"streaming": "yes"}}).streaming is False

    def test_missing_section(self):
        assert DeliveryConfig.from_dict({}) == DeliveryConfig()
        assert DeliveryConfig.from_dict(None) == DeliveryConfig()

    def test_malformed_section_ignored(self):
        assert DeliveryConfig.from_dict({"slack": "oops"}) == DeliveryConfig()

    def test_null_history_limit_uses_default(self):
        cfg = DeliveryConfig.from_dict({"slack": {"history_limit": None}})
        assert cfg.history_limit == 50

    def test_invalid_text_limit_uses_default(self, caplog):
        cfg = DeliveryConfig.from_dict({"slack": {"text_limit": "lots"}})
        assert cfg.text_limit == 4000
        assert "slack.text_limit" in caplog.text

    def test_invalid_stream_buffer_size_disables_buffering(self):
        cfg = DeliveryConfig.from_dict({"slack": {"stream_buffer_size": "big"}})
        assert cfg.stream_buffer_size is None

    def test_null_values_from_yaml(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("slack:\n  history_limit: ~\n  text_limit: ~\n", encoding="utf-8")
        cfg = get_delivery_config(str(path))
        assert cfg.history_limit == 50
        assert cfg.text_limit == 4000

    def test_token_from_env(self, monkeypatch):
        monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-env")
        assert DeliveryConfig.from_dict({}).bot_token == "xoxb-env"
        assert DeliveryConfig.from_dict({"slack": {"bot_token": "xoxb-cfg"}}).bot_token == "xoxb-cfg"
