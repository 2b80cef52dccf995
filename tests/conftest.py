"""Root test conftest: isolate config state between tests."""

import pytest

from src.replyflow.infra import config as config_module


@pytest.fixture(autouse=True)
def _reset_config(monkeypatch):
    """Drop cached config and any ambient Slack token."""
    monkeypatch.delenv("SLACK_BOT_TOKEN", raising=False)
    config_module.reset_config_cache()
    yield
    config_module.reset_config_cache()
