"""Logging configuration using structlog."""

import logging
import sys
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import structlog

from .config import settings


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None):
    """Configure structured logging on stderr, JSON unless fmt is "console"."""
    level = (level or settings.LOG_LEVEL).upper()
    fmt = (fmt or settings.LOG_FORMAT).lower()

    # stdout carries command output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
        force=True,
    )

    renderer = (
        structlog.dev.ConsoleRenderer()
        if fmt == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Get a configured logger instance."""
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name)


@contextmanager
def detection_scope(**fields: Any) -> Iterator[str]:
    """
    Tag every record logged inside the block with a fresh detection_id.

    Extraction, resolution and scoring all log through their own loggers;
    the shared id ties one card's records together. Yields the id.
    """
    detection_id = uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(detection_id=detection_id, **fields):
        yield detection_id


def _elapsed_ms(context: Dict[str, Any]) -> Dict[str, int]:
    if "start_time" not in context:
        return {}
    return {"duration_ms": int((time.time() - context["start_time"]) * 1000)}


class LoggerMixin:
    """Mixin class to add logging capability to any class."""

    @property
    def logger(self) -> structlog.BoundLogger:
        """Logger named after the class."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger

    def log_start(self, event: str, **kwargs: Any) -> Dict[str, Any]:
        """Log "<event> started" and return the context for log_success/log_error."""
        context = {"event": event, "start_time": time.time(), **kwargs}
        self.logger.info(f"{event} started", **kwargs)
        return context

    def log_success(self, context: Dict[str, Any], **kwargs: Any):
        fields = {k: v for k, v in context.items() if k != "event"}
        self.logger.info(
            f"{context.get('event', 'operation')} completed", **fields, **_elapsed_ms(context), **kwargs
        )

    def log_error(self, context: Dict[str, Any], error: Exception, **kwargs: Any):
        fields = {k: v for k, v in context.items() if k != "event"}
        self.logger.error(
            f"{context.get('event', 'operation')} failed",
            **fields,
            **_elapsed_ms(context),
            error=str(error),
            error_type=type(error).__name__,
            **kwargs,
        )
