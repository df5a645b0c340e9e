"""
Services module - Business logic layer.

This module contains:
- SurveyRepository : survey writes, filtered listing, stats and deletion
- ChatRelay        : upstream completion streaming as SSE frames
"""
from src.services.survey_repository import SurveyRepository
from src.services.chat_relay import ChatRelay, RelaySession, RelayState

__all__ = [
    "SurveyRepository",
    "ChatRelay",
    "RelaySession",
    "RelayState",
]
