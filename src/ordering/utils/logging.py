"""Logging configuration shared by the Ordering and Payments domains.

Domain modules log through ``structlog.get_logger(__name__)``. The web app
calls ``configure_logging()`` once at start-up to route structlog through the
standard library and to scrub payment secrets and buyer emails from every
event before it is rendered.
"""

import logging
import os
import sys
from typing import Any

import structlog

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)

_LEVELS_BY_ENVIRONMENT = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_JSON_ENVIRONMENTS = {"production", "staging"}

# Never rendered, whatever the level
SECRET_KEYS = frozenset({"api_key", "client_secret", "webhook_secret", "stripe_signature", "card_number"})

# Rendered with the local part masked
EMAIL_KEYS = frozenset({"email", "guest_email", "customer_email", "receipt_email"})

REDACTED = "[redacted]"


def current_environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """LOG_LEVEL wins; otherwise the level follows the environment."""
    return os.getenv("LOG_LEVEL", _LEVELS_BY_ENVIRONMENT.get(current_environment(), "INFO")).upper()


def mask_email(address: str) -> str:
    local, sep, domain = str(address).partition("@")
    if not sep:
        return REDACTED
    return f"{local[:1]}***@{domain}"


def scrub_sensitive_fields(_logger, _method_name, event_dict: dict) -> dict:
    """structlog processor hiding secrets and masking email addresses."""
    for key, value in event_dict.items():
        if key in SECRET_KEYS and value is not None:
            event_dict[key] = REDACTED
        elif key in EMAIL_KEYS and value:
            event_dict[key] = mask_email(value)
    return event_dict


def setup_stdlib_logging() -> None:
    log_level = get_log_level()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    for name in ("urllib3", "stripe", "protean"):
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_structlog() -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        scrub_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if current_environment() in _JSON_ENVIRONMENTS:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    setup_stdlib_logging()
    setup_structlog()


def add_context(**kwargs: Any) -> None:
    """Bind request-scoped values included in every subsequent log line."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
