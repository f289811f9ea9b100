"""Logging configuration for Rule Guardian.

structlog renders both our own events and the stdlib records emitted by
discord.py, so every line carries the same timestamp, level and logger name.
Per-message context (message, user and channel IDs) is bound through
:func:`message_context` and merged into each event logged while it is active.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from rule_guardian.config import Settings
    from rule_guardian.moderation.models import MessageEvent

APP_NAME = "rule_guardian"

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("discord", "discord.gateway", "discord.http")


def _app_context(environment: str) -> structlog.types.Processor:
    """Build a processor that stamps the app name and environment on every event."""

    def add_app_context(
        _logger: Any, _method: str, event_dict: structlog.types.EventDict
    ) -> structlog.types.EventDict:
        event_dict.setdefault("app", APP_NAME)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_app_context


def _file_handler(settings: Settings, level: int) -> tuple[RotatingFileHandler | None, str]:
    """Open the rotating log file, returning ``(None, reason)`` if that fails."""
    try:
        Path(settings.log_directory).mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=settings.log_file_path,
            maxBytes=settings.log_file_max_bytes,
            backupCount=settings.log_file_backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        return None, str(e)
    handler.setLevel(level)
    return handler, ""


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structured logging with console and optional file output."""
    if settings is None:
        from rule_guardian.config import get_settings

        settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        _app_context(settings.environment),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    logging.basicConfig(format="%(message)s", level=log_level, handlers=[])
    logging.root.setLevel(log_level)

    # Console: colored in dev, JSON in prod
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                (
                    structlog.dev.ConsoleRenderer(colors=True)  # type: ignore[list-item]
                    if settings.is_development
                    else structlog.processors.JSONRenderer()
                ),
            ],
        )
    )
    logging.root.addHandler(console_handler)

    file_error = ""
    if settings.log_to_file:
        file_handler, file_error = _file_handler(settings, log_level)
        if file_handler is not None:
            file_handler.setFormatter(
                structlog.stdlib.ProcessorFormatter(
                    foreign_pre_chain=shared_processors,
                    processors=[
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        structlog.processors.JSONRenderer(),
                    ],
                )
            )
            logging.root.addHandler(file_handler)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    if file_error:
        # Continue with console-only logging
        get_logger(__name__).warning(
            "log_file_unavailable", path=settings.log_file_path, error=file_error
        )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]


@contextmanager
def message_context(event: MessageEvent) -> Iterator[None]:
    """Bind the IDs of *event* to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(
        message_id=event.message_id,
        user_id=event.author_id,
        channel_id=event.channel_id,
        guild_id=event.guild_id,
    ):
        yield
