"""Unified completion client using LiteLLM.

Provides a consistent interface for multiple LLM providers. Temperature is
fixed at 0 so the same prompt yields reproducible summaries. There are no
retries and no streaming here; callers decide what a failure means.
"""

import logging
from dataclasses import dataclass
from typing import Any

import litellm

from reposcribe.models.llm_config import LLMConfig

logger = logging.getLogger(__name__)

# Attribution headers OpenRouter uses to identify the calling application
OPENROUTER_HEADERS = {
    "HTTP-Referer": "https://github.com/reposcribe/reposcribe",
    "X-Title": "Reposcribe",
}


@dataclass
class LLMResponse:
    """Response from LLM completion.

    Attributes:
        content: Generated text content
        model: Model that generated the response
        usage: Token usage statistics
        finish_reason: Reason for completion (stop, length, etc.)
    """

    content: str
    model: str
    usage: dict[str, int]
    finish_reason: str | None = None


class LLMError(Exception):
    """Exception raised for LLM-related errors."""

    pass


class LLMClient:
    """Unified LLM client using LiteLLM.

    Supports multiple providers through a single interface:
    - Claude (Anthropic)
    - Gemini (Google)
    - Ollama (local)
    - Bedrock (AWS)
    - OpenRouter
    - OpenAI
    """

    def __init__(self, config: LLMConfig) -> None:
        """Initialize LLM client with configuration.

        Args:
            config: LLM configuration with provider, model, and credentials
        """
        self.config = config

    def _completion_kwargs(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.config.get_litellm_model_name(),
            "messages": messages,
            "temperature": 0,
            "max_tokens": max_tokens or self.config.max_tokens,
        }

        if self.config.api_key:
            kwargs["api_key"] = self.config.api_key
        if self.config.api_base:
            kwargs["api_base"] = self.config.api_base

        if self.config.provider in {"ollama", "claude", "gemini"}:
            kwargs["top_k"] = 1
        elif self.config.provider == "openrouter":
            kwargs["extra_headers"] = dict(OPENROUTER_HEADERS)

        return kwargs

    def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a completion from the LLM.

        Args:
            prompt: User prompt for the LLM
            system_prompt: Optional system prompt
            max_tokens: Override max_tokens from config

        Returns:
            LLMResponse with generated content

        Raises:
            LLMError: If the completion fails
        """
        messages: list[dict[str, str]] = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        try:
            response = litellm.completion(**self._completion_kwargs(messages, max_tokens))

            choice = response.choices[0]
            content = choice.message.content or ""

            usage = {}
            if response.usage:
                usage = {
                    "prompt_tokens": response.usage.prompt_tokens or 0,
                    "completion_tokens": response.usage.completion_tokens or 0,
                    "total_tokens": response.usage.total_tokens or 0,
                }

            logger.debug(
                "Completion from %s: %d chars, %d tokens",
                self.config.provider,
                len(content),
                usage.get("total_tokens", 0),
            )

            return LLMResponse(
                content=content,
                model=response.model or self.config.model,
                usage=usage,
                finish_reason=choice.finish_reason,
            )

        except litellm.exceptions.AuthenticationError as e:
            raise LLMError(f"Authentication failed for {self.config.provider}: {e}") from e
        except litellm.exceptions.RateLimitError as e:
            raise LLMError(f"Rate limit exceeded for {self.config.provider}: {e}") from e
        except litellm.exceptions.APIConnectionError as e:
            raise LLMError(f"Connection failed to {self.config.provider}: {e}") from e
        except Exception as e:
            raise LLMError(f"LLM completion failed: {e}") from e


def create_client(config: LLMConfig) -> LLMClient:
    """Create an LLM client from configuration.

    Args:
        config: LLM configuration

    Returns:
        Configured LLMClient instance

    Raises:
        ValueError: If LLM is disabled in config
    """
    if not config.enabled:
        raise ValueError("LLM is disabled in configuration")

    return LLMClient(config)
