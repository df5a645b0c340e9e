"""
API module - FastAPI routes and HTTP handling.

This module handles:
- Request decoding and response formatting
- Error handling at the request boundary
- Route definitions
"""
from src.api.main import app

__all__ = ["app"]
