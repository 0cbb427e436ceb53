"""Structured logging configuration using structlog.

Provides correlation IDs for tracing crop sessions and batch items that
run concurrently, and configurable output formats (JSON for production,
colored console for dev).

Correlation IDs are scoped: ``correlation_context`` binds them for one
block and restores the previous values when the block exits.
"""

import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, cast

import structlog
from structlog.types import Processor

from cropline.config import settings

# Context variables for correlation IDs, keyed by their log field name
_CORRELATION_IDS: dict[str, ContextVar[Any]] = {
    "session_id": ContextVar("session_id", default=None),
    "item_index": ContextVar("item_index", default=None),
    "generation": ContextVar("generation", default=None),
}

# Root handler installed by configure_logging
_handler: logging.Handler | None = None


@contextmanager
def correlation_context(
    *,
    session_id: str | None = None,
    item_index: int | None = None,
    generation: int | None = None,
) -> Iterator[None]:
    """Bind correlation IDs for the duration of a ``with`` block.

    Only the IDs passed (not None) are bound; the others keep their current
    values. Every bound ID is reset to its previous value on exit, including
    when the block raises.

    Args:
        session_id: Unique identifier for the crop session or batch run
        item_index: Position of the item within a batch
        generation: Load generation of the crop session

    Example:
        >>> with correlation_context(item_index=3):
        ...     current_correlation_ids()
        {'item_index': 3}
    """
    values = {
        "session_id": session_id,
        "item_index": item_index,
        "generation": generation,
    }
    tokens: list[tuple[ContextVar[Any], Token[Any]]] = []
    for key, value in values.items():
        if value is not None:
            var = _CORRELATION_IDS[key]
            tokens.append((var, var.set(value)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def current_correlation_ids() -> dict[str, Any]:
    """Return the correlation IDs bound in the current context."""
    ids = {key: var.get() for key, var in _CORRELATION_IDS.items()}
    return {key: value for key, value in ids.items() if value is not None}


def clear_correlation_context() -> None:
    """Clear all correlation context variables."""
    for var in _CORRELATION_IDS.values():
        var.set(None)


def _add_correlation_ids(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor to add correlation IDs to log events."""
    _ = logger, method_name  # Required by structlog processor signature
    event_dict.update(current_correlation_ids())
    return event_dict


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Configure structlog with the specified settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings.LOG_LEVEL.
        log_format: Output format ("console" or "json").
                    Defaults to settings.LOG_FORMAT.
    """
    level = level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_correlation_ids,
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure stdlib logging to match; a later call replaces this handler
    global _handler  # noqa: PLW0603
    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(_handler)
    root.setLevel(getattr(logging, level.upper()))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        A bound structlog logger instance.
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
