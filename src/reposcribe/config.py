"""Reposcribe configuration system.

Configuration is YAML-based with environment variable substitution (${VAR}),
so credentials never have to be written into config files.

Configuration file discovery (in priority order):
1. Explicit path passed to load_config()
2. ./.reposcribe/config.yaml
3. ./reposcribe.yaml

Invalid values and missing credentials raise ConfigurationError at load time,
before any analysis run starts.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from reposcribe.errors import ConfigurationError
from reposcribe.models.llm_config import LLMConfig

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class FetchConfig:
    """Batched content fetching limits.

    Attributes:
        batch_size: Files fetched concurrently per batch (the concurrency limit)
        batch_delay: Seconds to sleep between batches
        max_file_size: Per-file size ceiling in bytes
        max_files: Maximum number of files fetched per run
    """

    batch_size: int = 15
    batch_delay: float = 0.05
    max_file_size: int = 200_000
    max_files: int = 100

    def __post_init__(self) -> None:
        """Validate fetch limits."""
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive (got {self.batch_size})")
        if self.batch_delay < 0:
            raise ValueError(f"batch_delay cannot be negative (got {self.batch_delay})")
        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be positive (got {self.max_file_size})")
        if self.max_files <= 0:
            raise ValueError(f"max_files must be positive (got {self.max_files})")


@dataclass
class AnalysisConfig:
    """Analysis and prompt limits.

    Attributes:
        commit_limit: Commit messages included in the prompt
        pr_limit: Pull requests included in the prompt
        important_file_limit: Configuration files used for tech detection
        source_file_limit: Source files whose excerpts go into the prompt
        source_excerpt_chars: Characters kept from each source file
        readme_chars: README characters included in the prompt
        default_branch: Branch name that may fall back to alternate_branch
        alternate_branch: Single well-known fallback branch name
    """

    commit_limit: int = 20
    pr_limit: int = 10
    important_file_limit: int = 10
    source_file_limit: int = 30
    source_excerpt_chars: int = 600
    readme_chars: int = 4000
    default_branch: str = "main"
    alternate_branch: str = "master"

    def __post_init__(self) -> None:
        """Validate analysis limits."""
        for name in (
            "commit_limit",
            "pr_limit",
            "important_file_limit",
            "source_file_limit",
            "source_excerpt_chars",
            "readme_chars",
        ):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} cannot be negative (got {value})")
        if self.default_branch == self.alternate_branch:
            raise ValueError("default_branch and alternate_branch must differ")


@dataclass
class StoreConfig:
    """Summary persistence configuration.

    Attributes:
        backend: Sink backend ("memory" or "json")
        path: JSON file path (json backend only)
    """

    backend: str = "memory"
    path: str = ".reposcribe/summaries.json"

    def __post_init__(self) -> None:
        """Validate store backend."""
        valid_backends = {"memory", "json"}
        if self.backend not in valid_backends:
            raise ValueError(f"Invalid store backend: {self.backend}. Valid: {valid_backends}")


@dataclass
class LoggingConfig:
    """Logging configuration.

    Attributes:
        mode: Output mode (human, verbose, json)
        level: Minimum level name
    """

    mode: str = "human"
    level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate logging settings."""
        valid_modes = {"human", "verbose", "json"}
        if self.mode not in valid_modes:
            raise ValueError(f"Invalid logging mode: {self.mode}. Valid: {valid_modes}")
        self.level = self.level.upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level not in valid_levels:
            raise ValueError(f"Invalid logging level: {self.level}. Valid: {valid_levels}")


@dataclass
class ReposcribeConfig:
    """Top-level Reposcribe configuration.

    Attributes:
        llm: Completion service settings (Ollama default, local processing)
        fetch: Batched fetch limits
        analysis: Prompt and branch settings
        store: Summary persistence settings
        logging: Logging settings
    """

    llm: LLMConfig = field(default_factory=LLMConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax, e.g. ${OPENROUTER_API_KEY}.

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ConfigurationError: If a referenced variable is not set
    """
    if isinstance(value, str):

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ConfigurationError(f"Environment variable not set: {var_name}")
            return env_value

        return _ENV_PATTERN.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".reposcribe" / "config.yaml",
        start_path / "reposcribe.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping")
    return section


def _flag(section: dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"'{key}' must be true or false (got {value!r})")
    return value


def load_config_from_dict(data: dict[str, Any]) -> ReposcribeConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        ReposcribeConfig instance

    Raises:
        ConfigurationError: If any value is invalid or a credential is missing
    """
    data = substitute_env_vars(data)

    try:
        llm_data = _section(data, "llm")
        llm = LLMConfig(
            provider=llm_data.get("provider", "ollama"),
            model=llm_data.get("model", "llama3.2"),
            api_key=llm_data.get("api_key") or None,
            api_base=llm_data.get("api_base") or None,
            temperature=float(llm_data.get("temperature", 0)),
            max_tokens=int(llm_data.get("max_tokens", 2000)),
            enabled=_flag(llm_data, "enabled", True),
        )

        fetch_data = _section(data, "fetch")
        fetch = FetchConfig(
            batch_size=int(fetch_data.get("batch_size", 15)),
            batch_delay=float(fetch_data.get("batch_delay", 0.05)),
            max_file_size=int(fetch_data.get("max_file_size", 200_000)),
            max_files=int(fetch_data.get("max_files", 100)),
        )

        analysis_data = _section(data, "analysis")
        analysis = AnalysisConfig(
            commit_limit=int(analysis_data.get("commit_limit", 20)),
            pr_limit=int(analysis_data.get("pr_limit", 10)),
            important_file_limit=int(analysis_data.get("important_file_limit", 10)),
            source_file_limit=int(analysis_data.get("source_file_limit", 30)),
            source_excerpt_chars=int(analysis_data.get("source_excerpt_chars", 600)),
            readme_chars=int(analysis_data.get("readme_chars", 4000)),
            default_branch=str(analysis_data.get("default_branch", "main")),
            alternate_branch=str(analysis_data.get("alternate_branch", "master")),
        )

        store_data = _section(data, "store")
        store = StoreConfig(
            backend=store_data.get("backend", "memory"),
            path=store_data.get("path", ".reposcribe/summaries.json"),
        )

        logging_data = _section(data, "logging")
        logging_config = LoggingConfig(
            mode=logging_data.get("mode", "human"),
            level=str(logging_data.get("level", "INFO")),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    return ReposcribeConfig(
        llm=llm,
        fetch=fetch,
        analysis=analysis,
        store=store,
        logging=logging_config,
    )


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> ReposcribeConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        ReposcribeConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
        ConfigurationError: If the file content is invalid
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is None:
        return load_config_from_dict({})

    try:
        with open(found_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {found_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {found_path}")

    config = load_config_from_dict(data)
    config._config_path = found_path
    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return """# Reposcribe Configuration

# Completion service (LiteLLM). Default: Ollama, no data leaves the machine.
llm:
  provider: "ollama"     # ollama, claude, gemini, bedrock, openrouter, openai
  model: "llama3.2"
  # api_key: "${OPENROUTER_API_KEY}"  # Required for claude/gemini/openrouter/openai
  api_base: "http://localhost:11434"
  temperature: 0         # MUST be 0 for reproducibility
  max_tokens: 2000

# Batched file fetching from the VCS host
fetch:
  batch_size: 15         # Concurrent fetches per batch
  batch_delay: 0.05      # Seconds between batches
  max_file_size: 200000  # Bytes; larger files are skipped
  max_files: 100

# Prompt limits and branch fallback
analysis:
  commit_limit: 20
  pr_limit: 10
  important_file_limit: 10
  source_file_limit: 30       # Source files excerpted into the prompt
  source_excerpt_chars: 600
  readme_chars: 4000
  default_branch: "main"
  alternate_branch: "master"

# Summary persistence
store:
  backend: "memory"      # memory, json
  path: ".reposcribe/summaries.json"

logging:
  mode: "human"          # human, verbose, json
  level: "INFO"
"""
