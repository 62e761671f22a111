"""Unit tests for YAML configuration loading."""

from pathlib import Path

import pytest
import yaml

from reposcribe.config import (
    AnalysisConfig,
    FetchConfig,
    LoggingConfig,
    ReposcribeConfig,
    StoreConfig,
    create_default_config,
    find_config_file,
    load_config,
    load_config_from_dict,
    substitute_env_vars,
)
from reposcribe.errors import ConfigurationError


class TestConfigDefaults:
    """Tests for configuration defaults."""

    def test_defaults(self) -> None:
        """Test the default configuration values."""
        config = ReposcribeConfig()

        assert config.llm.provider == "ollama"
        assert config.llm.max_tokens == 2000
        assert config.fetch.batch_size == 15
        assert config.fetch.batch_delay == 0.05
        assert config.fetch.max_file_size == 200_000
        assert config.fetch.max_files == 100
        assert config.analysis.commit_limit == 20
        assert config.analysis.pr_limit == 10
        assert config.analysis.important_file_limit == 10
        assert config.analysis.source_file_limit == 30
        assert config.analysis.source_excerpt_chars == 600
        assert config.analysis.default_branch == "main"
        assert config.analysis.alternate_branch == "master"
        assert config.store.backend == "memory"
        assert config.config_path is None

    def test_empty_dict_gives_defaults(self) -> None:
        """Test an empty mapping loads the default configuration."""
        config = load_config_from_dict({})

        assert config.fetch == FetchConfig()
        assert config.analysis == AnalysisConfig()


class TestSectionValidation:
    """Tests for per-section validation."""

    @pytest.mark.parametrize(
        "kwargs",
        [{"batch_size": 0}, {"batch_delay": -1}, {"max_file_size": 0}, {"max_files": -5}],
    )
    def test_fetch_limits(self, kwargs: dict) -> None:
        """Test fetch limits must be positive."""
        with pytest.raises(ValueError):
            FetchConfig(**kwargs)

    def test_branch_names_must_differ(self) -> None:
        """Test the fallback branch cannot equal the default branch."""
        with pytest.raises(ValueError, match="must differ"):
            AnalysisConfig(default_branch="main", alternate_branch="main")

    def test_negative_limit(self) -> None:
        """Test prompt limits cannot be negative."""
        with pytest.raises(ValueError, match="commit_limit"):
            AnalysisConfig(commit_limit=-1)

    def test_store_backend(self) -> None:
        """Test unknown store backends are rejected."""
        with pytest.raises(ValueError, match="Invalid store backend"):
            StoreConfig(backend="redis")

    def test_logging_level_normalized(self) -> None:
        """Test logging level names are upper-cased."""
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_logging_mode(self) -> None:
        """Test unknown logging modes are rejected."""
        with pytest.raises(ValueError, match="Invalid logging mode"):
            LoggingConfig(mode="xml")


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict."""

    def test_sections_loaded(self) -> None:
        """Test every section is read from the mapping."""
        config = load_config_from_dict(
            {
                "llm": {"provider": "openai", "model": "gpt-4o-mini", "api_key": "sk-test"},
                "fetch": {"batch_size": 4},
                "analysis": {"default_branch": "trunk", "alternate_branch": "main"},
                "store": {"backend": "json", "path": "out.json"},
                "logging": {"mode": "verbose"},
            }
        )

        assert config.llm.provider == "openai"
        assert config.fetch.batch_size == 4
        assert config.analysis.default_branch == "trunk"
        assert config.store.path == "out.json"
        assert config.logging.mode == "verbose"

    def test_missing_credentials_fail_at_load(self) -> None:
        """Test keyed providers without a key fail as configuration errors."""
        with pytest.raises(ConfigurationError, match="api_key is required"):
            load_config_from_dict({"llm": {"provider": "claude", "model": "claude-3-haiku"}})

    def test_nonzero_temperature_rejected(self) -> None:
        """Test temperature must stay 0."""
        with pytest.raises(ConfigurationError, match="Temperature"):
            load_config_from_dict({"llm": {"temperature": 0.7}})

    @pytest.mark.parametrize("value", ["false", "no", 0, None])
    def test_enabled_must_be_boolean(self, value: object) -> None:
        """Test a non-boolean enabled flag is rejected instead of coerced."""
        with pytest.raises(ConfigurationError, match="true or false"):
            load_config_from_dict({"llm": {"enabled": value}})

    def test_enabled_false(self) -> None:
        """Test a boolean false disables completions."""
        assert load_config_from_dict({"llm": {"enabled": False}}).llm.enabled is False

    def test_bad_number(self) -> None:
        """Test non-numeric limits become configuration errors."""
        with pytest.raises(ConfigurationError):
            load_config_from_dict({"fetch": {"batch_size": "many"}})

    def test_section_must_be_mapping(self) -> None:
        """Test a scalar section is rejected."""
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            load_config_from_dict({"fetch": 5})

    def test_env_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test ${VAR} references are substituted."""
        monkeypatch.setenv("TEST_OPENROUTER_KEY", "or-secret")

        config = load_config_from_dict(
            {
                "llm": {
                    "provider": "openrouter",
                    "model": "meta-llama/llama-3-70b",
                    "api_key": "${TEST_OPENROUTER_KEY}",
                }
            }
        )

        assert config.llm.api_key == "or-secret"


class TestSubstituteEnvVars:
    """Tests for substitute_env_vars."""

    def test_nested_structures(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substitution reaches nested dicts and lists."""
        monkeypatch.setenv("TEST_HOST", "example.org")

        result = substitute_env_vars({"a": ["http://${TEST_HOST}/x", 3], "b": {"c": "${TEST_HOST}"}})

        assert result == {"a": ["http://example.org/x", 3], "b": {"c": "example.org"}}

    def test_unset_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an unset variable is a configuration error."""
        monkeypatch.delenv("TEST_UNSET_VAR", raising=False)

        with pytest.raises(ConfigurationError, match="TEST_UNSET_VAR"):
            substitute_env_vars("${TEST_UNSET_VAR}")


class TestLoadConfig:
    """Tests for file discovery and loading."""

    def test_load_explicit_path(self, config_yaml: Path) -> None:
        """Test loading a config file by path."""
        config = load_config(config_yaml)

        assert config.fetch.batch_size == 5
        assert config.fetch.batch_delay == 0
        assert config.analysis.commit_limit == 5
        assert config.store.backend == "json"
        assert config.logging.level == "DEBUG"
        assert config.config_path == config_yaml

    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        """Test a missing explicit path raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test unparseable YAML is a configuration error."""
        path = tmp_path / "bad.yaml"
        path.write_text("llm: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        """Test a YAML list is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(path)

    def test_discovery_order(self, tmp_path: Path) -> None:
        """Test .reposcribe/config.yaml is preferred over reposcribe.yaml."""
        (tmp_path / "reposcribe.yaml").write_text("{}", encoding="utf-8")
        assert find_config_file(tmp_path) == (tmp_path / "reposcribe.yaml").resolve()

        (tmp_path / ".reposcribe").mkdir()
        (tmp_path / ".reposcribe" / "config.yaml").write_text("{}", encoding="utf-8")
        assert find_config_file(tmp_path) == (tmp_path / ".reposcribe" / "config.yaml").resolve()

    def test_no_file_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test defaults are used when no file is discovered."""
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config.config_path is None
        assert config.llm.provider == "ollama"

    def test_default_config_is_loadable(self) -> None:
        """Test the generated default config parses to the defaults."""
        data = yaml.safe_load(create_default_config())

        config = load_config_from_dict(data)

        assert config.fetch == FetchConfig()
        assert config.analysis == AnalysisConfig()
        assert config.llm.model == "llama3.2"
