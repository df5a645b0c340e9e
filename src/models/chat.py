"""
Request and Response models for the Chat and Health APIs.

These Pydantic models define the contract between client and server.
They provide:
- Type validation
- Automatic documentation
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """
    Shape check for one conversation turn.

    The relay forwards the caller's dict unchanged, so extra fields (such
    as ``name``) and a null ``content`` pass through to the completion API.
    """
    model_config = ConfigDict(extra="allow")

    role: str = Field(..., min_length=1, examples=["user"])
    content: Optional[str] = Field(..., examples=["What is a synthetic student?"])


class ChatRequest(BaseModel):
    """
    Request model for the /chat endpoint.

    Attributes:
        messages: The full conversation so far, oldest first.
    """
    messages: List[ChatMessage] = Field(..., min_length=1)


class HealthResponse(BaseModel):
    """Response model for the /health endpoints."""
    status: str = Field(default="healthy")
    version: str
    store: Optional[bool] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
