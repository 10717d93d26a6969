"""Structured logging for the integration backend.

JSON lines in production, colored console output in development. Every entry
carries the service name plus whatever is bound in contextvars (the HTTP
middleware binds ``correlation_id``, ``method`` and ``path``).

Usage:
    from marketplace_integration.logging_config import get_logger, setup_logging

    setup_logging(service_name="marketplace-integration", log_format="json")
    logger = get_logger(__name__)
    logger.info("resource_provisioned", installation_id=installation_id)
"""

import logging
import os
import sys
from typing import Any, Literal, TextIO

import structlog
from structlog.types import EventDict, Processor

REDACTED = "[redacted]"

# Event keys that may carry Vercel tokens or integration secrets.
SENSITIVE_KEYS = frozenset(
    {
        "access_token",
        "refresh_token",
        "authorization",
        "client_secret",
        "integration_secret",
        "api_key",
        "token",
    }
)

# Libraries that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")


def redact_secrets(_logger: Any, _method: str, event_dict: EventDict) -> EventDict:
    for key in SENSITIVE_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def _add_service(service_name: str) -> Processor:
    def processor(_logger: Any, _method: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def _processors(service_name: str, log_format: str) -> list[Processor]:
    processors: list[Processor] = [
        _add_service(service_name),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=False),
        structlog.contextvars.merge_contextvars,
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer(sort_keys=False))
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def setup_logging(
    service_name: str | None = None,
    log_format: Literal["json", "console"] | None = None,
    log_level: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog over the standard library.

    Args:
        service_name: Added to every entry. Falls back to SERVICE_NAME.
        log_format: "json" or "console". Falls back to LOG_FORMAT, then "console".
        log_level: Falls back to LOG_LEVEL, then "INFO".
        stream: Output stream, stdout by default. The CLI passes stderr.
    """
    service_name = service_name or os.getenv("SERVICE_NAME", "marketplace-integration")
    log_format = log_format or os.getenv("LOG_FORMAT", "console")
    log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=numeric_level,
        force=True,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.configure(
        processors=_processors(service_name, log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    get_logger(__name__).info("logging_initialized", log_format=log_format, log_level=log_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def get_correlation_id() -> str | None:
    return structlog.contextvars.get_contextvars().get("correlation_id")


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
