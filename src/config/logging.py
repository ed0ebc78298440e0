"""
structlog setup for the ledger service.

Development gets coloured console lines; every other environment gets one
JSON object per line. Credentials never reach a log line: values under
password, token and authorization keys are masked before rendering.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from src.config.settings import get_settings

REDACTED = "***"

_SECRET_MARKERS = ("password", "token", "secret", "authorization", "api_key")

_QUIET_LOGGERS = ("aiosqlite", "httpx", "httpcore", "uvicorn.access", "passlib")


def _is_secret(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


def redact_secrets(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask credential-looking fields, including one level of nested dicts."""
    for key, value in list(event_dict.items()):
        if key == "event":
            continue
        if _is_secret(key) and value is not None:
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if _is_secret(str(k)) and v is not None else v
                for k, v in value.items()
            }
    return event_dict


def add_service_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    event_dict.setdefault("env", settings.environment)
    return event_dict


def build_processors(environment: str) -> list[Processor]:
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_service_fields,
        redact_secrets,
    ]
    if environment == "development":
        chain.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        chain.extend([structlog.processors.format_exc_info, structlog.processors.JSONRenderer()])
    return chain


def configure_logging() -> None:
    """Route structlog through stdlib logging at the configured level."""
    settings = get_settings()

    structlog.configure(
        processors=build_processors(settings.environment),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=settings.log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_request_context(**values: Any) -> None:
    """Attach values (request id, acting user) to every later line of this request."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
