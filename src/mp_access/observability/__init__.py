"""Observability – logging and audit."""
from mp_access.observability.logging import AuditLogger, JsonLoggerFactory, get_logger

__all__ = ["AuditLogger", "JsonLoggerFactory", "get_logger"]
