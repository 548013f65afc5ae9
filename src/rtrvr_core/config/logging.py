"""Logging configuration for rtrvr-core.

Library modules log through the standard ``logging`` module with ``extra``
context. ``setup_logging`` routes those records and structlog loggers through
one ``ProcessorFormatter`` so both render the same way.
"""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog


REDACTED = "***"
_SECRET_KEYS = frozenset({"authorization", "api_key", "token", "auth_token"})


def redact_secrets(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask bearer tokens wherever they appear in the event context."""
    for key, value in event_dict.items():
        if key == "event" or not isinstance(value, str):
            continue
        if key.lower() in _SECRET_KEYS or "Bearer " in value:
            event_dict[key] = REDACTED
    return event_dict


def _shared_processors() -> List[Any]:
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        redact_secrets,
    ]


def _formatter(renderer: Any) -> Dict[str, Any]:
    return {
        "()": structlog.stdlib.ProcessorFormatter,
        "processors": [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        # stdlib records: lift ``extra={...}`` into the event dict first
        "foreign_pre_chain": [structlog.stdlib.ExtraAdder(), *_shared_processors()],
    }


def setup_logging(
    level: str = "INFO", log_format: str = "json", log_file_path: Optional[str] = None
) -> None:
    """Setup structured logging for the client and its host application.

    Args:
        level: Root log level name
        log_format: ``json`` or ``console``
        log_file_path: Optional rotating log file, always written as JSON
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers = ["console"]
    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": _formatter(structlog.processors.JSONRenderer()),
            "console": _formatter(structlog.dev.ConsoleRenderer(colors=False)),
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "json" if log_format == "json" else "console",
                "stream": sys.stderr,
            }
        },
        "root": {"level": level, "handlers": handlers},
    }

    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        logging_config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "json",
            "filename": log_file_path,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "encoding": "utf-8",
        }
        handlers.append("file")

    logging.config.dictConfig(logging_config)


def setup_logging_from_settings(settings) -> None:
    """Apply the logging fields of a ``Settings`` instance."""
    setup_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        log_file_path=settings.log_file_path,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
