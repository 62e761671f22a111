"""LLM configuration entity for Reposcribe.

Defines the completion-service configuration used for summary generation.
Supports multiple providers: Claude, Gemini, Ollama, Bedrock, OpenRouter
and OpenAI.
"""

from dataclasses import dataclass, field

# Valid LLM providers
VALID_PROVIDERS = frozenset({"claude", "gemini", "ollama", "bedrock", "openrouter", "openai"})

# Providers that authenticate with an API key
KEYED_PROVIDERS = frozenset({"claude", "gemini", "openrouter", "openai"})

# LiteLLM model prefixes by provider
LITELLM_PREFIXES = {
    "claude": "anthropic",
    "gemini": "gemini",
    "ollama": "ollama",
    "bedrock": "bedrock",
    "openrouter": "openrouter",
    "openai": "openai",
}


@dataclass
class LLMConfig:
    """Configuration for the completion service.

    Attributes:
        provider: LLM provider (claude, gemini, ollama, bedrock, openrouter, openai)
        model: Model identifier (e.g., "gpt-4o-mini", "llama3.2")
        api_key: API key (not required for Ollama or Bedrock)
        api_base: API base URL (defaults to local server for Ollama)
        temperature: Temperature setting (must be 0 for reproducibility)
        max_tokens: Maximum response tokens for a summary
        enabled: Whether summary generation is enabled
    """

    provider: str = "ollama"
    model: str = "llama3.2"
    api_key: str | None = None
    api_base: str | None = None
    temperature: float = field(default=0.0)
    max_tokens: int = field(default=2000)
    enabled: bool = field(default=True)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.provider = self.provider.lower().strip()

        if self.provider not in VALID_PROVIDERS:
            raise ValueError(
                f"Invalid provider '{self.provider}'. "
                f"Must be one of: {sorted(VALID_PROVIDERS)}"
            )

        if not self.model or not self.model.strip():
            raise ValueError("Model identifier cannot be empty")
        self.model = self.model.strip()

        # Summaries must be reproducible for the same repository content
        if self.temperature != 0.0:
            raise ValueError(
                f"Temperature must be 0 for reproducibility. Got: {self.temperature}"
            )

        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive. Got: {self.max_tokens}")

        if self.provider == "ollama":
            if not self.api_base:
                self.api_base = "http://localhost:11434"
        elif self.provider in KEYED_PROVIDERS and not self.api_key:
            # Bedrock uses AWS credentials from the environment instead
            raise ValueError(f"api_key is required for {self.provider} provider")

    @property
    def is_local(self) -> bool:
        """Return True if using a local LLM (no data leaves machine)."""
        return self.provider == "ollama"

    def validate(self) -> list[str]:
        """Validate configuration and return warnings.

        Returns:
            List of warning messages (empty if no warnings)
        """
        warnings: list[str] = []

        if self.max_tokens < 500:
            warnings.append(
                f"max_tokens is set to {self.max_tokens}, which may truncate summaries"
            )

        if self.api_base and not self.api_base.startswith(("http://", "https://")):
            warnings.append(f"api_base '{self.api_base}' does not start with http:// or https://")

        return warnings

    def to_dict(self) -> dict[str, str | int | float | bool | None]:
        """Convert to dictionary for serialization.

        The API key is masked so the result is safe to log.
        """
        return {
            "provider": self.provider,
            "model": self.model,
            "api_key": "***" if self.api_key else None,
            "api_base": self.api_base,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "enabled": self.enabled,
        }

    def get_litellm_model_name(self) -> str:
        """Get the model name in LiteLLM ``provider/model`` format."""
        return f"{LITELLM_PREFIXES[self.provider]}/{self.model}"
