"""Observability – JsonLoggerFactory."""
from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from mp_access.observability.logging.filters import SensitiveFieldsFilter


class JsonLoggerFactory:
    """Configure structlog on top of the stdlib :mod:`logging` tree.

    Records from plain ``logging`` loggers (kernel, resilience) and from
    structlog loggers (application layer) go through the same
    :class:`structlog.stdlib.ProcessorFormatter`, rendered as JSON or as
    console key-value lines.
    """

    @staticmethod
    def configure(
        level: int = logging.INFO,
        *,
        json: bool = True,
        sensitive_fields: frozenset[str] | None = None,
        stream: Any = None,
    ) -> None:
        shared_processors: list[Any] = [
            SensitiveFieldsFilter(sensitive_fields),
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
        ]

        structlog.configure(
            processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        renderer: Any = (
            structlog.processors.JSONRenderer()
            if json
            else structlog.dev.ConsoleRenderer(colors=False)
        )
        formatter = structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(formatter)
        root = logging.getLogger()
        root.handlers.clear()
        root.addHandler(handler)
        root.setLevel(level)


__all__ = ["JsonLoggerFactory"]
