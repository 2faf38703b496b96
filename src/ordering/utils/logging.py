"""Logging configuration for the Ordering domain.

Stdlib logging carries the handlers (console plus rotating files under
``logs/``); structlog renders the events. Card data bound to a log event is
scrubbed before rendering, whatever the environment.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LEVELS_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

JSON_ENVS = ("production", "staging")

# Event keys that must never reach a log sink
CARD_KEYS = ("card_number", "cvc", "expiry")

_MAX_BYTES = 10 * 1024 * 1024
_BACKUPS = 5

# Suppress noisy library loggers
for _name in ("protean", "uvicorn.access", "asyncio"):
    logging.getLogger(_name).setLevel(logging.WARNING)


def current_env() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """Log level for the current environment. ``LOG_LEVEL`` wins if set."""
    return os.getenv("LOG_LEVEL", LEVELS_BY_ENV.get(current_env(), "INFO"))


def scrub_card_data(logger, method_name: str, event_dict: dict) -> dict:
    """structlog processor: drop card secrets, keep at most the last 4 digits."""
    for key in CARD_KEYS:
        value = event_dict.pop(key, None)
        if key == "card_number" and isinstance(value, str) and len(value) >= 4:
            event_dict["card_last4"] = value[-4:]
    return event_dict


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: Path | str = "logs") -> None:
    """Route stdlib logging to stdout, ``ordering.log`` and ``ordering_error.log``."""
    log_level = get_log_level()
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(log_level)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers = [
        console,
        _rotating_handler(log_dir / "ordering.log", log_level),
        _rotating_handler(log_dir / "ordering_error.log", logging.ERROR),
    ]


def build_processors(env: str) -> list:
    """structlog processor chain: JSON lines in production/staging, rich console elsewhere."""
    processors = [
        structlog.contextvars.merge_contextvars,
        scrub_card_data,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
    ]

    if env in JSON_ENVS:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        # Locals are hidden: a checkout frame holds the card input
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
        )
        processors.append(renderer)
    return processors


def setup_structlog(env: str | None = None) -> None:
    structlog.configure(
        processors=build_processors(env or current_env()),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: Path | str = "logs") -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging(log_dir)
    setup_structlog()


def add_context(**kwargs: Any) -> None:
    """Bind values that every later log event in this context will carry."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
