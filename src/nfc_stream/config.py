"""
NFC Stream Configuration
========================

This module handles configuration loading for the NFC stream service.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    NFC_STREAM_SOURCE        -> stream.source
    NFC_STREAM_URL           -> stream.url
    NFC_RECONNECT_BACKOFF_MS -> stream.reconnect_backoff_ms
    NFC_MAX_QUEUE_SIZE       -> stream.max_queue_size
    NFC_REFRESH_INTERVAL_MS  -> stream.refresh_interval_ms
    NFC_REPLAY_PATH          -> stream.replay_path
    NFC_TIME_FORMAT          -> display.time_format
    NFC_AGENT_PORT           -> server.port
    NFC_LOG_LEVEL            -> logging.level
    PORT                     -> server.port (container platforms)

Example:
    from nfc_stream.config import settings

    print(settings.stream.url)
    print(settings.stream.refresh_interval_ms)
"""

import os
import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="nfc-stream", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class StreamConfig(BaseModel):
    """Frame ingestion configuration."""

    source: Literal["websocket", "replay", "none"] = Field(
        default="websocket",
        description="Frame source: decoder WebSocket feed, trace replay, or none",
    )
    url: str = Field(
        default="ws://localhost:8765/frames",
        description="WebSocket URL of the decoder feed",
    )
    reconnect_backoff_ms: int = Field(
        default=500,
        ge=100,
        description="Backoff in milliseconds between reconnect attempts",
    )
    max_reconnect_attempts: int = Field(
        default=0,
        ge=0,
        description="Maximum reconnection attempts (0 = unlimited)",
    )
    max_queue_size: int = Field(
        default=0,
        ge=0,
        description="Maximum queued frames before dropping oldest (0 = unbounded)",
    )
    refresh_interval_ms: int = Field(
        default=250,
        gt=0,
        description="Period of the buffer drain into the frame store",
    )
    replay_path: Optional[str] = Field(
        default=None,
        description="JSON Lines trace file for the replay source",
    )
    replay_realtime: bool = Field(
        default=False,
        description="Pace replayed frames by their capture time",
    )


class DisplayConfig(BaseModel):
    """Presentation formatting configuration."""

    time_format: Literal["elapsed", "datetime"] = Field(
        default="elapsed",
        description="Time column format: elapsed seconds or absolute date/time",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the NFC stream service.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        if env_config := os.environ.get("NFC_CONFIG_PATH"):
            config_path = env_config
        else:
            search_paths = [
                Path("config.yaml"),
                Path("config.yml"),
                Path(__file__).parent.parent.parent / "config.yaml",
            ]
            for path in search_paths:
                if path.exists():
                    config_path = str(path)
                    break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Stream settings
    if env_source := os.environ.get("NFC_STREAM_SOURCE"):
        config_data.setdefault("stream", {})["source"] = env_source
    if env_url := os.environ.get("NFC_STREAM_URL"):
        config_data.setdefault("stream", {})["url"] = env_url
    if env_backoff := os.environ.get("NFC_RECONNECT_BACKOFF_MS"):
        config_data.setdefault("stream", {})["reconnect_backoff_ms"] = int(env_backoff)
    if env_queue := os.environ.get("NFC_MAX_QUEUE_SIZE"):
        config_data.setdefault("stream", {})["max_queue_size"] = int(env_queue)
    if env_refresh := os.environ.get("NFC_REFRESH_INTERVAL_MS"):
        config_data.setdefault("stream", {})["refresh_interval_ms"] = int(env_refresh)
    if env_replay := os.environ.get("NFC_REPLAY_PATH"):
        config_data.setdefault("stream", {})["replay_path"] = env_replay

    # Display settings
    if env_time := os.environ.get("NFC_TIME_FORMAT"):
        config_data.setdefault("display", {})["time_format"] = env_time

    # Server settings
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("NFC_AGENT_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("NFC_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
