"""
Tests for configuration management.

Tests config loading from:
1. Environment variables
2. YAML files
3. Combined (env overrides YAML)
"""

import os

import pytest
import yaml

from scholarsync.config import Config, ContextConfig, DatabaseConfig, LLMConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the developer's environment and .env file."""
    monkeypatch.chdir(tmp_path)
    for key in [
        "SCHOLAR_LLM_PROVIDER",
        "SCHOLAR_LLM_MODEL",
        "SCHOLAR_LLM_BASE_URL",
        "SCHOLAR_LLM_API_KEY",
        "SCHOLAR_LLM_TEMPERATURE",
        "SCHOLAR_LLM_MAX_TOKENS",
        "SCHOLAR_LLM_TIMEOUT",
        "SCHOLAR_LLM_SEARCH_GROUNDING",
        "SCHOLAR_DB_PATH",
        "SCHOLAR_CONTEXT_NOTE_PREVIEW",
        "SCHOLAR_CONTEXT_ABSTRACT_PREVIEW",
        "SCHOLAR_CONTEXT_MAX_ITEMS",
        "SCHOLAR_DEFAULT_AGENT_MODE",
        "SCHOLAR_LOG_LEVEL",
        "SCHOLAR_LOG_TO_FILE",
    ]:
        monkeypatch.delenv(key, raising=False)


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_creation(self):
        """Test creating config with defaults."""
        config = Config()

        assert config.llm.provider == "ollama"
        assert config.llm.model == "llama3.1:8b"
        assert config.llm.base_url == "http://localhost:11434"
        assert config.llm.api_key is None
        assert config.llm.search_grounding is True

        assert config.database.path == "data/research.db"

        assert config.context.note_preview_chars == 200
        assert config.context.abstract_preview_chars == 500
        assert config.context.max_items == 50

        assert config.default_agent_mode == "librarian"

    def test_context_config_rejects_zero_preview(self):
        """Preview lengths must be positive."""
        with pytest.raises(ValueError):
            ContextConfig(note_preview_chars=0)


class TestConfigFromEnv:
    """Test loading configuration from environment variables."""

    def test_from_env_basic(self, monkeypatch):
        monkeypatch.setenv("SCHOLAR_LLM_PROVIDER", "openai")
        monkeypatch.setenv("SCHOLAR_LLM_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("SCHOLAR_LLM_API_KEY", "sk-test")
        monkeypatch.setenv("SCHOLAR_DB_PATH", "/tmp/research-test.db")

        config = Config.from_env()

        assert config.llm.provider == "openai"
        assert config.llm.model == "gpt-4o-mini"
        assert config.llm.api_key == "sk-test"
        assert config.database.path == "/tmp/research-test.db"

    def test_from_env_type_conversion(self, monkeypatch):
        monkeypatch.setenv("SCHOLAR_LLM_TEMPERATURE", "0.2")
        monkeypatch.setenv("SCHOLAR_LLM_MAX_TOKENS", "512")
        monkeypatch.setenv("SCHOLAR_LLM_SEARCH_GROUNDING", "false")
        monkeypatch.setenv("SCHOLAR_CONTEXT_NOTE_PREVIEW", "80")
        monkeypatch.setenv("SCHOLAR_LOG_TO_FILE", "0")

        config = Config.from_env()

        assert config.llm.temperature == 0.2
        assert config.llm.max_tokens == 512
        assert config.llm.search_grounding is False
        assert config.context.note_preview_chars == 80
        assert config.logging.log_to_file is False

    def test_empty_env_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("SCHOLAR_LLM_MODEL", "")

        config = Config.from_env()

        assert config.llm.model == "llama3.1:8b"

    def test_from_env_file(self, tmp_path):
        env_file = tmp_path / ".env.test"
        env_file.write_text("SCHOLAR_DEFAULT_AGENT_MODE=reviewer\n")

        try:
            config = Config.from_env(env_file=env_file)
        finally:
            # load_dotenv writes straight into os.environ
            os.environ.pop("SCHOLAR_DEFAULT_AGENT_MODE", None)

        assert config.default_agent_mode == "reviewer"


class TestConfigFromYaml:
    """Test loading configuration from YAML files."""

    def test_from_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            yaml.safe_dump(
                {
                    "llm": {"provider": "openai", "model": "gpt-4o", "api_key": "sk-yaml"},
                    "database": {"path": "research.db"},
                    "context": {"max_items": 10},
                }
            )
        )

        config = Config.from_yaml(yaml_path)

        assert config.llm == LLMConfig(provider="openai", model="gpt-4o", api_key="sk-yaml")
        assert config.database == DatabaseConfig(path="research.db")
        assert config.context.max_items == 10

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "missing.yaml")

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            yaml.safe_dump({"database": {"path": "yaml.db"}, "default_agent_mode": "scribe"})
        )
        monkeypatch.setenv("SCHOLAR_DB_PATH", "env.db")

        config = Config.from_env_or_yaml(yaml_path=yaml_path)

        assert config.database.path == "env.db"
        assert config.default_agent_mode == "scribe"

    def test_no_yaml_falls_back_to_env(self, monkeypatch):
        monkeypatch.setenv("SCHOLAR_LLM_MODEL", "qwen2.5:7b")

        config = Config.from_env_or_yaml(yaml_path=None)

        assert config.llm.model == "qwen2.5:7b"
