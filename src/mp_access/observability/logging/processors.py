"""Observability – get_logger helper and run-context binding."""
from __future__ import annotations

import contextlib
from typing import Any, Iterator

import structlog


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


@contextlib.contextmanager
def bound_context(**values: Any) -> Iterator[None]:
    """Bind *values* (e.g. ``run_id``) onto every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(**values):
        yield


__all__ = ["bound_context", "get_logger"]
