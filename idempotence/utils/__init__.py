"""Utility helpers for logging and time operations."""

from .logging import SecretRedactor, get_logger, setup_logging
from .time import issued_marker, utc_now

__all__ = ["SecretRedactor", "get_logger", "setup_logging", "issued_marker", "utc_now"]
