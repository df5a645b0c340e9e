"""
Custom Exceptions - Application-specific error classes.

This module defines a hierarchy of exceptions for clean error handling:
- Each exception has a status code and a client-facing message
- Used by the API layer for consistent error responses
- Internal details stay in the server log, never in the response body
"""
from typing import Optional


GENERIC_ERROR_MESSAGE = "Internal server error"


class ServiceException(Exception):
    """
    Base exception for all service errors.
    
    Subclass this for specific error types. ``message`` is what the
    caller sees; ``details`` is only ever logged.
    """
    status_code: int = 500
    error_code: str = "internal_error"
    
    def __init__(self, message: str = GENERIC_ERROR_MESSAGE, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
    
    def to_dict(self) -> dict:
        """Convert to error response dict."""
        return {"error": self.message}


class ValidationError(ServiceException):
    """Raised when caller input is malformed. Nothing is stored or sent upstream."""
    status_code = 400
    error_code = "validation_error"
    
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details=f"field={field}" if field else None)
        self.field = field


class StorageError(ServiceException):
    """Raised when the key-value store is unavailable or an operation fails."""
    status_code = 500
    error_code = "storage_error"
    
    def __init__(self, details: Optional[str] = None):
        super().__init__(GENERIC_ERROR_MESSAGE, details=details)


class UpstreamError(ServiceException):
    """
    Raised when the remote completion API fails.
    
    Only raised before streaming starts, where it becomes a 500.
    Failures after that point raise StreamAbortedError instead.
    """
    status_code = 500
    error_code = "upstream_error"
    
    def __init__(self, details: Optional[str] = None):
        super().__init__(GENERIC_ERROR_MESSAGE, details=details)


class StreamAbortedError(Exception):
    """
    Raised when the upstream stream fails after the 200 and the first
    frames are already on the wire.

    Not a ServiceException: no error body can follow a started response,
    so the server drops the connection.
    """

    def __init__(self, frames_sent: int, details: Optional[str] = None):
        super().__init__(f"stream aborted after {frames_sent} frame(s): {details}")
        self.frames_sent = frames_sent
        self.details = details
