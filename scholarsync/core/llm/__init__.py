"""
Model service abstraction layer for chat with tool calling.

Supported providers:
- Ollama (native SDK)
- OpenAI (official SDK)
"""
from scholarsync.core.llm.base import ModelClient
from scholarsync.core.llm.ollama import OllamaModelClient
from scholarsync.core.llm.openai import OpenAIModelClient

__all__ = [
    "ModelClient",
    "OllamaModelClient",
    "OpenAIModelClient",
]
