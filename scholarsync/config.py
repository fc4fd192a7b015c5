"""
Configuration for ScholarSync.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    """Model service configuration."""

    provider: str = "ollama"  # ollama, openai
    model: str = "llama3.1:8b"
    base_url: str = "http://localhost:11434"
    api_key: str | None = None
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout: float = 120.0
    # Ask the model service to ground answers in web search when it can
    search_grounding: bool = True


class DatabaseConfig(BaseModel):
    """SQLite research store configuration."""

    path: str = "data/research.db"


class ContextConfig(BaseModel):
    """Bounds for the project context block sent with every turn."""

    note_preview_chars: int = Field(default=200, ge=1)
    abstract_preview_chars: int = Field(default=500, ge=1)
    max_items: int = Field(default=50, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class Config(BaseModel):
    """Main configuration."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Persona selected for new chat sessions
    default_agent_mode: str = "librarian"

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            SCHOLAR_LLM_PROVIDER: Model provider (ollama, openai)
            SCHOLAR_LLM_MODEL: Model name
            SCHOLAR_LLM_BASE_URL: Model service base URL
            SCHOLAR_LLM_API_KEY: API key (for OpenAI)
            SCHOLAR_LLM_SEARCH_GROUNDING: Request web search grounding
            SCHOLAR_DB_PATH: SQLite database file
            SCHOLAR_CONTEXT_NOTE_PREVIEW: Note content prefix length
            SCHOLAR_CONTEXT_ABSTRACT_PREVIEW: Abstract prefix length
            SCHOLAR_CONTEXT_MAX_ITEMS: Entries per context section
            SCHOLAR_DEFAULT_AGENT_MODE: Persona for new sessions
            SCHOLAR_LOG_LEVEL: Log level
        """
        # Load .env file if provided or exists
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None:
                return default
            # If value is empty string, return default
            if value == "":
                return default
            # Convert boolean strings
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            # Convert numeric strings
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        return cls(
            llm=LLMConfig(
                provider=get_env("SCHOLAR_LLM_PROVIDER", "ollama"),
                model=get_env("SCHOLAR_LLM_MODEL", "llama3.1:8b"),
                base_url=get_env("SCHOLAR_LLM_BASE_URL", "http://localhost:11434"),
                api_key=get_env("SCHOLAR_LLM_API_KEY"),
                temperature=get_env("SCHOLAR_LLM_TEMPERATURE", 0.7),
                max_tokens=get_env("SCHOLAR_LLM_MAX_TOKENS", 2000),
                timeout=get_env("SCHOLAR_LLM_TIMEOUT", 120.0),
                search_grounding=get_env("SCHOLAR_LLM_SEARCH_GROUNDING", True),
            ),
            database=DatabaseConfig(
                path=get_env("SCHOLAR_DB_PATH", "data/research.db"),
            ),
            context=ContextConfig(
                note_preview_chars=get_env("SCHOLAR_CONTEXT_NOTE_PREVIEW", 200),
                abstract_preview_chars=get_env("SCHOLAR_CONTEXT_ABSTRACT_PREVIEW", 500),
                max_items=get_env("SCHOLAR_CONTEXT_MAX_ITEMS", 50),
            ),
            logging=LoggingConfig(
                level=get_env("SCHOLAR_LOG_LEVEL", "INFO"),
                log_to_file=get_env("SCHOLAR_LOG_TO_FILE", True),
                log_dir=get_env("SCHOLAR_LOG_DIR", "logs"),
                file_rotation=get_env("SCHOLAR_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("SCHOLAR_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("SCHOLAR_LOG_COMPRESSION", "zip"),
                serialize=get_env("SCHOLAR_LOG_SERIALIZE", True),
            ),
            default_agent_mode=get_env("SCHOLAR_DEFAULT_AGENT_MODE", "librarian"),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file=env_file)

        final_dict = {**config_dict}

        # Apply env overrides (non-default values)
        default = cls()
        if env_config.llm != default.llm:
            final_dict["llm"] = env_config.llm.model_dump()
        if env_config.database != default.database:
            final_dict["database"] = env_config.database.model_dump()
        if env_config.context != default.context:
            final_dict["context"] = env_config.context.model_dump()
        if env_config.logging != default.logging:
            final_dict["logging"] = env_config.logging.model_dump()

        if env_config.default_agent_mode != default.default_agent_mode:
            final_dict["default_agent_mode"] = env_config.default_agent_mode

        return cls(**final_dict) if final_dict else env_config
