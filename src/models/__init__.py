"""
Models module - Pydantic schemas for data validation.

This module defines:
- Survey models: records, answers, list filters, pages and stats
- Chat models: conversation turns and the /chat request body
- Shared response models: health and error bodies
"""
from src.models.chat import (
    ChatMessage,
    ChatRequest,
    HealthResponse,
    ErrorResponse,
)
from src.models.survey import (
    RESPONSES_NAMESPACE,
    SurveyAnswers,
    SurveyRecord,
    ListFilter,
    SurveyEntry,
    SurveyPage,
    SurveyStats,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "HealthResponse",
    "ErrorResponse",
    "RESPONSES_NAMESPACE",
    "SurveyAnswers",
    "SurveyRecord",
    "ListFilter",
    "SurveyEntry",
    "SurveyPage",
    "SurveyStats",
]
