"""Structured logging for the console, built on structlog.

Events go through the stdlib logging module to stderr, so CLI tables on
stdout stay clean. Development gets colored key/value lines and production
gets one JSON object per event. Async envelopes bind the token and
resource they work on with `log_context`, and every event logged inside
carries them.
"""

import logging
import sys
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from permissions_console.config import Settings, get_settings

NOISY_LOGGERS = ("httpcore", "httpx", "asyncio")


def _add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Stamp JSON events with the app name, version and environment."""
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment.value
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def build_processors(log_format: str) -> list[Processor]:
    """Processor chain for `log_format` ("json" or "console")."""
    processors = _shared_processors()
    if log_format == "json":
        processors += [
            _add_app_context,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger from settings.

    Safe to call more than once; the CLI calls it for every command.
    """
    if settings is None:
        settings = get_settings()
    level = getattr(logging, settings.log_level.value)

    structlog.configure(
        processors=build_processors(settings.log_format or "console"),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    if settings.log_file:
        _add_file_handler(settings.log_file, level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def _add_file_handler(log_file: Path, level: int) -> None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.getLogger().addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, e.g. `get_logger(__name__)`."""
    return structlog.stdlib.get_logger(name)


def log_context(
    token: str | None = None, resource: str | None = None, **extra: Any
) -> AbstractContextManager[None]:
    """Bind the token and resource an operation works on for its duration.

    None values are left out, so a deselected token does not show up as
    `token=None` on every event.

        with log_context(token="acme", resource="delegates"):
            logger.info("loader_started")
    """
    values = {"token": token, "resource": resource, **extra}
    return structlog.contextvars.bound_contextvars(
        **{key: value for key, value in values.items() if value is not None}
    )
