"""
Core module for cross-cutting concerns.

This module provides:
- Structured logging configuration
- Error taxonomy and response envelopes
- Request tracing middleware
- Response cache
- Common utilities
"""

from core.errors import AppError, NotFoundError, RateOrQuotaError, StoreError, ValidationError
from core.logging import configure_logging, get_logger
from core.utils import clean_tags, is_valid_uuid, parse_csv

__all__ = [
    "configure_logging",
    "get_logger",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "StoreError",
    "RateOrQuotaError",
    "is_valid_uuid",
    "parse_csv",
    "clean_tags",
]
