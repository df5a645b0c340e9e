"""
Core module - Configuration and cross-cutting concerns.

This module provides:
- config.py         : Environment-based configuration management
- logging_config.py : Centralized logging setup
- exceptions.py     : Error taxonomy mapped to HTTP status codes
- middleware.py     : Audit logging and CORS headers
"""
from src.core.config import get_settings, Settings
from src.core.logging_config import setup_logging, get_logger
from src.core.exceptions import (
    ServiceException,
    ValidationError,
    StorageError,
    UpstreamError,
    StreamAbortedError,
)

__all__ = [
    "get_settings",
    "Settings",
    "setup_logging",
    "get_logger",
    "ServiceException",
    "ValidationError",
    "StorageError",
    "UpstreamError",
    "StreamAbortedError",
]
