"""Configuration module for rtrvr-core."""

from rtrvr_core.config.client_config import ClientConfig
from rtrvr_core.config.logging import get_logger, setup_logging, setup_logging_from_settings
from rtrvr_core.config.routing_config import RoutingConfig
from rtrvr_core.config.settings import Settings

__all__ = [
    "Settings",
    "ClientConfig",
    "RoutingConfig",
    "setup_logging",
    "setup_logging_from_settings",
    "get_logger",
]
