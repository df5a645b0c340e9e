"""
FastAPI dependencies.

Long-lived collaborators are created by the application lifespan and kept
on ``app.state``; routes receive them through these providers, which
tests replace with ``app.dependency_overrides``.
"""
import json
from typing import Any

from fastapi import Request

from src.database.connection import StoreConnection
from src.services.chat_relay import ChatRelay
from src.services.survey_repository import SurveyRepository


def get_store_connection(request: Request) -> StoreConnection:
    return request.app.state.store_connection


def get_survey_repository(request: Request) -> SurveyRepository:
    return request.app.state.survey_repository


def get_chat_relay(request: Request) -> ChatRelay:
    return request.app.state.chat_relay


async def read_json_body(request: Request) -> Any:
    """Decoded JSON body, or None when the body is empty or not JSON."""
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
