"""
Configuration Tests
===================

Tests for YAML loading and environment variable overrides.
"""

import pytest
from pydantic import ValidationError

from nfc_stream.config import Settings, load_config


ENV_VARS = [
    "NFC_CONFIG_PATH",
    "NFC_STREAM_SOURCE",
    "NFC_STREAM_URL",
    "NFC_RECONNECT_BACKOFF_MS",
    "NFC_MAX_QUEUE_SIZE",
    "NFC_REFRESH_INTERVAL_MS",
    "NFC_REPLAY_PATH",
    "NFC_TIME_FORMAT",
    "NFC_AGENT_PORT",
    "NFC_LOG_LEVEL",
    "PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "stream:\n"
        "  source: replay\n"
        "  replay_path: capture.jsonl\n"
        "  max_queue_size: 5000\n"
        "display:\n"
        "  time_format: datetime\n",
        encoding="utf-8",
    )
    return path


class TestLoadConfig:
    """Configuration sources and precedence."""

    def test_defaults(self):
        """Verify default values."""
        settings = Settings()
        assert settings.stream.source == "websocket"
        assert settings.stream.max_queue_size == 0
        assert settings.stream.refresh_interval_ms == 250
        assert settings.display.time_format == "elapsed"

    def test_yaml_file(self, config_file):
        """Verify values from the YAML file."""
        settings = load_config(str(config_file))
        assert settings.stream.source == "replay"
        assert settings.stream.replay_path == "capture.jsonl"
        assert settings.stream.max_queue_size == 5000
        assert settings.display.time_format == "datetime"
        assert settings.server.port == 8002

    def test_env_overrides_file(self, config_file, monkeypatch):
        """Verify environment variables take precedence."""
        monkeypatch.setenv("NFC_MAX_QUEUE_SIZE", "10")
        monkeypatch.setenv("NFC_TIME_FORMAT", "elapsed")
        monkeypatch.setenv("NFC_AGENT_PORT", "9000")

        settings = load_config(str(config_file))
        assert settings.stream.max_queue_size == 10
        assert settings.display.time_format == "elapsed"
        assert settings.server.port == 9000

    def test_port_wins_over_agent_port(self, config_file, monkeypatch):
        """Verify PORT overrides NFC_AGENT_PORT."""
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("NFC_AGENT_PORT", "9000")
        assert load_config(str(config_file)).server.port == 8080

    def test_config_path_env(self, config_file, monkeypatch):
        """Verify NFC_CONFIG_PATH selects the file."""
        monkeypatch.setenv("NFC_CONFIG_PATH", str(config_file))
        assert load_config().stream.source == "replay"

    def test_missing_file_uses_defaults(self, tmp_path):
        """Verify a missing file falls back to defaults."""
        settings = load_config(str(tmp_path / "absent.yaml"))
        assert settings.stream.source == "websocket"

    def test_invalid_value(self, config_file, monkeypatch):
        """Verify invalid values are rejected."""
        monkeypatch.setenv("NFC_STREAM_SOURCE", "serial")
        with pytest.raises(ValidationError):
            load_config(str(config_file))
