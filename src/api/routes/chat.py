"""
Chat Routes - streaming relay to the completion API.

POST /chat takes ``{messages: [{role, content}, ...]}`` and answers with a
``text/event-stream`` of ``data: <fragment>`` frames ending in
``data: [DONE]``. Validation and upstream setup both happen before the
response starts, so they can still produce a 400 or a 500; anything that
goes wrong later ends the stream abruptly.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from src.api.dependencies import get_chat_relay, read_json_body
from src.core.logging_config import get_logger
from src.models.chat import ErrorResponse
from src.services.chat_relay import SSE_HEADERS, ChatRelay

logger = get_logger(__name__)

router = APIRouter(
    prefix="/chat",
    tags=["Chat"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid messages format"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


@router.post(
    "",
    summary="Stream a chat completion as server-sent events",
    response_class=StreamingResponse,
)
async def chat_stream(
    request: Request,
    relay: ChatRelay = Depends(get_chat_relay),
) -> StreamingResponse:
    session = relay.session()
    messages = session.validate(await read_json_body(request))
    await session.open(messages)

    return StreamingResponse(
        session.frames(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
