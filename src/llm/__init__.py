"""
LLM module - Language model integration.

This module handles all upstream completion calls:
- Opening streaming chat completions
- Extracting text fragments from streamed chunks
- Error handling for upstream failures
"""
from src.llm.client import LLMClient

__all__ = [
    "LLMClient",
]
