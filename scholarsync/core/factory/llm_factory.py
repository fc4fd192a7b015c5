"""
Factory for creating model clients.
"""

from scholarsync.config import LLMConfig
from scholarsync.core.llm.base import ModelClient
from scholarsync.core.llm.ollama import OllamaModelClient
from scholarsync.core.llm.openai import OpenAIModelClient


class LLMFactory:
    """Factory for creating model clients from configuration."""

    @staticmethod
    def create(config: LLMConfig) -> ModelClient:
        """
        Create model client from configuration.

        Args:
            config: LLM configuration

        Returns:
            Model client instance

        Raises:
            ValueError: If provider is not supported
        """
        if config.provider == "ollama":
            return OllamaModelClient(
                host=config.base_url,
                model=config.model,
                timeout=config.timeout,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
            )
        elif config.provider == "openai":
            if not config.api_key:
                raise ValueError("OpenAI API key is required")
            # The Ollama default URL is meaningless to OpenAI
            base_url = None if config.base_url == "http://localhost:11434" else config.base_url
            return OpenAIModelClient(
                api_key=config.api_key,
                model=config.model,
                base_url=base_url,
                timeout=config.timeout,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
            )
        else:
            raise ValueError(f"Unsupported LLM provider: {config.provider}")
