"""Logging module with structured formatters, location masking, and context management."""

from .context import ContextFilter, LogContext, log_context, log_search_context
from .filters import DefaultCorrelationFilter, LocationMaskingFilter
from .formatters import DevFormatter, JSONFormatter
from .setup import setup_logging

__all__ = [
    "setup_logging",
    "log_context",
    "log_search_context",
    "JSONFormatter",
    "DevFormatter",
    "LocationMaskingFilter",
    "DefaultCorrelationFilter",
    "LogContext",
    "ContextFilter",
]
