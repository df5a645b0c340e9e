"""
Chat Relay - streams upstream completions to the caller as SSE frames.

Each request gets its own RelaySession which moves through:

    VALIDATING -> STREAMING -> COMPLETED
         |            |
         +------------+-----> FAILED

Validation failures never reach the upstream API. Once frames() has
started, the HTTP response is already committed to 200, so an upstream
failure can only abort the stream: the error is logged and re-raised as
StreamAbortedError, no further frame (and no DONE) is produced, and the
server drops the connection.
"""
import inspect
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from src.core.exceptions import StreamAbortedError, UpstreamError, ValidationError
from src.core.logging_config import get_logger
from src.llm.client import LLMClient
from src.models.chat import ChatRequest

logger = get_logger(__name__)

INVALID_MESSAGES_FORMAT = "Invalid messages format"
DONE_SENTINEL = "[DONE]"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class RelayState(str, Enum):
    VALIDATING = "validating"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


def format_frame(text: str) -> str:
    """
    Encode text as one SSE event frame.

    Each line becomes its own ``data:`` field so embedded newlines
    cannot split the event.
    """
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return "".join(f"data: {line}\n" for line in lines) + "\n"


class RelaySession:
    """State and stream for a single /chat request."""

    def __init__(self, client: LLMClient):
        self.client = client
        self.state = RelayState.VALIDATING
        self.frames_sent = 0
        self._upstream: Optional[AsyncIterator[Any]] = None

    def validate(self, body: Any) -> List[Dict[str, Any]]:
        """
        Check the request body carries a non-empty list of role/content turns.

        Returns the turns exactly as the caller sent them, extra fields
        included; the models are only used to check their shape.

        Raises:
            ValidationError: On any other shape; the session becomes FAILED
        """
        if not isinstance(body, dict) or not isinstance(body.get("messages"), list):
            self.state = RelayState.FAILED
            raise ValidationError(INVALID_MESSAGES_FORMAT, field="messages")
        try:
            ChatRequest.model_validate(body)
        except PydanticValidationError as e:
            self.state = RelayState.FAILED
            raise ValidationError(INVALID_MESSAGES_FORMAT, field="messages") from e
        return body["messages"]

    async def open(self, messages: List[Dict[str, Any]]) -> None:
        """
        Open the upstream completion. Called before any response header
        is sent, so a failure here still becomes a 500.
        """
        try:
            self._upstream = await self.client.stream_chat(messages)
        except UpstreamError:
            self.state = RelayState.FAILED
            raise
        except Exception as e:
            self.state = RelayState.FAILED
            logger.error(f"Unexpected error opening completion stream: {e}")
            raise UpstreamError(str(e)) from e

        self.state = RelayState.STREAMING
        logger.info(f"Relay opened: turns={len(messages)}")

    async def frames(self) -> AsyncIterator[str]:
        """
        Yield one frame per non-empty upstream fragment, then the DONE frame.

        The upstream stream is closed on every exit, including when the
        caller disconnects and the generator is cancelled.
        """
        if self.state is not RelayState.STREAMING or self._upstream is None:
            raise RuntimeError(f"relay is not streaming (state={self.state.value})")

        try:
            async for chunk in self._upstream:
                text = self.client.fragment_text(chunk)
                if text:
                    self.frames_sent += 1
                    yield format_frame(text)
            yield format_frame(DONE_SENTINEL)
            self.state = RelayState.COMPLETED
            logger.info(f"Relay completed: frames={self.frames_sent}")
        except Exception as e:
            self.state = RelayState.FAILED
            logger.error(f"Upstream stream failed after {self.frames_sent} frame(s): {e}")
            raise StreamAbortedError(self.frames_sent, str(e)) from e
        finally:
            await self._release()

    async def _release(self) -> None:
        upstream, self._upstream = self._upstream, None
        close = getattr(upstream, "aclose", None) or getattr(upstream, "close", None)
        if close is None:
            return
        try:
            result = close()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"Error closing upstream stream: {e}")


class ChatRelay:
    """
    Long-lived relay bound to one LLM client.

    Example:
        >>> session = relay.session()
        >>> messages = session.validate({"messages": [{"role": "user", "content": "hi"}]})
        >>> await session.open(messages)
        >>> async for frame in session.frames():
        ...     print(frame, end="")
        data: Hello

        data: [DONE]
    """

    def __init__(self, client: LLMClient):
        self.client = client

    def session(self) -> RelaySession:
        return RelaySession(self.client)
