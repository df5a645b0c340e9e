"""
API Routes module - Endpoint definitions.

Each file in this module defines routes for a specific domain:
- responses.py : Survey response storage and queries
- chat.py      : Streaming chat relay
- health.py    : Health check endpoints
"""
from src.api.routes.responses import router as responses_router
from src.api.routes.chat import router as chat_router
from src.api.routes.health import router as health_router

__all__ = [
    "responses_router",
    "chat_router",
    "health_router",
]
