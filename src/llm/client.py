"""
LLM Client for streaming chat completions.

This module provides a thin async interface to the Groq API.
It handles:
- API client initialization
- Opening one streaming completion per call
- Extracting text fragments from streamed chunks
- Wrapping API failures in UpstreamError

Why a separate client class:
1. Encapsulation - Provider details hidden from the relay
2. Testability - Easy to replace with a fake in tests
"""
from typing import Any, AsyncIterator, Dict, List, Optional

from groq import AsyncGroq, GroqError

from src.core.config import Settings, get_settings
from src.core.exceptions import UpstreamError
from src.core.logging_config import get_logger

logger = get_logger(__name__)


class LLMClient:
    """
    Async client for streaming completions.

    No retries: each call makes exactly one upstream request.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[Any] = None):
        """
        Args:
            settings: Application settings; read from the environment if omitted
            client: Pre-built AsyncGroq-compatible client, mainly for tests
        """
        self.settings = settings or get_settings()
        self.model = self.settings.llm_model

        if client is None:
            if not self.settings.groq_api_key:
                logger.warning("GROQ_API_KEY is not set; chat requests will fail upstream")
            client_kwargs: Dict[str, Any] = {"api_key": self.settings.groq_api_key}
            if self.settings.llm_base_url:
                client_kwargs["base_url"] = self.settings.llm_base_url
            client = AsyncGroq(**client_kwargs)
        self.client = client

        logger.info(f"LLM client initialized: model={self.model}")

    async def stream_chat(self, messages: List[Dict[str, Any]]) -> AsyncIterator[Any]:
        """
        Open a streaming chat completion.

        Args:
            messages: Conversation turns as {role, content} dicts

        Returns:
            Async iterator of completion chunks

        Raises:
            UpstreamError: If the request cannot be opened
        """
        request: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": True,
        }
        if self.settings.llm_temperature is not None:
            request["temperature"] = self.settings.llm_temperature
        if self.settings.llm_max_tokens is not None:
            request["max_tokens"] = self.settings.llm_max_tokens

        try:
            return await self.client.chat.completions.create(**request)
        except GroqError as e:
            logger.error(f"Failed to open completion stream ({self.model}): {e}")
            raise UpstreamError(str(e)) from e

    @staticmethod
    def fragment_text(chunk: Any) -> Optional[str]:
        """Text carried by one streamed chunk, or None."""
        choices = getattr(chunk, "choices", None)
        if not choices:
            return None
        delta = getattr(choices[0], "delta", None)
        return getattr(delta, "content", None)

    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()
