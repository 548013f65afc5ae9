"""Application settings using Pydantic V2 style configuration."""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rtrvr_core.common.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_CLOUD_BASE_URL,
    DEFAULT_CONTROL_BASE_URL,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY_MS,
    DEFAULT_MCP_BASE_URL,
    DEFAULT_RETRIABLE_STATUS_CODES,
    DEFAULT_STREAM_RETRY_INTERVAL,
    DEFAULT_STREAM_STARTUP_GRACE,
    DEFAULT_TIMEOUT,
)
from rtrvr_core.contracts import RunMode


class Settings(BaseSettings):
    """Client settings read from ``RTRVR_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="RTRVR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Auth
    api_key: Optional[str] = None

    # Endpoints
    cloud_base_url: str = DEFAULT_CLOUD_BASE_URL
    mcp_base_url: str = DEFAULT_MCP_BASE_URL
    control_base_url: str = DEFAULT_CONTROL_BASE_URL

    # Transport
    timeout_seconds: float = DEFAULT_TIMEOUT
    retry_max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_base_delay_ms: int = DEFAULT_BASE_DELAY_MS
    retry_max_delay_ms: int = DEFAULT_MAX_DELAY_MS
    retry_status_codes: List[int] = Field(
        default_factory=lambda: sorted(DEFAULT_RETRIABLE_STATUS_CODES)
    )

    # Routing
    default_target: RunMode = RunMode.AUTO
    prefer_extension_by_default: bool = False

    # Event stream
    event_stream_startup_grace_seconds: float = DEFAULT_STREAM_STARTUP_GRACE
    event_stream_retry_interval_seconds: float = DEFAULT_STREAM_RETRY_INTERVAL

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"
    log_file_path: Optional[str] = None
