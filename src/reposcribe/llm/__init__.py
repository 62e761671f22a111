"""Completion service integration for summary generation.

This module provides:
- LLMClient: Unified client for multiple providers via LiteLLM
- LLMResponse / LLMError: Completion result and failure
- Prompt content for the summary prompt

The summary composer lives in ``reposcribe.llm.composer``.
"""

from reposcribe.llm.client import LLMClient, LLMError, LLMResponse, create_client
from reposcribe.llm.prompts import COMMON_RULES, RESPONSE_HEADINGS, SYSTEM_PROMPT

__all__ = [
    "COMMON_RULES",
    "LLMClient",
    "LLMError",
    "LLMResponse",
    "RESPONSE_HEADINGS",
    "SYSTEM_PROMPT",
    "create_client",
]
