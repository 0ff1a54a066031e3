"""Observability – structured logging helpers."""
from mp_access.observability.logging.audit import AuditLogger
from mp_access.observability.logging.factory import JsonLoggerFactory
from mp_access.observability.logging.filters import DEFAULT_SENSITIVE_FIELDS, SensitiveFieldsFilter
from mp_access.observability.logging.processors import bound_context, get_logger

__all__ = [
    "AuditLogger",
    "DEFAULT_SENSITIVE_FIELDS",
    "JsonLoggerFactory",
    "SensitiveFieldsFilter",
    "bound_context",
    "get_logger",
]
