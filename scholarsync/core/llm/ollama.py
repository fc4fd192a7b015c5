"""
Ollama model client using native ollama-python SDK.
"""

import ollama

from scholarsync.core.llm.base import ModelClient
from scholarsync.models.llm import ModelRequest, ModelResponse, RawToolCall
from scholarsync.utils.exceptions import LLMError
from scholarsync.utils.logger import get_logger

logger = get_logger(__name__)


class OllamaModelClient(ModelClient):
    """
    Ollama chat client.

    Uses the native tool calling of tool-capable models
    (llama3.1, qwen2.5, mistral-nemo, ...). Ollama has no web search,
    so the grounding flag is accepted and ignored.
    """

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
        timeout: float = 120.0,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ):
        """
        Initialize Ollama model client.

        Args:
            host: Ollama server URL
            model: Model name (must support tools)
            timeout: Request timeout in seconds
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
        """
        self.host = host
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

        self.client = ollama.AsyncClient(host=host, timeout=timeout)

    async def generate(self, request: ModelRequest) -> ModelResponse:
        """
        Run one chat request.

        Args:
            request: History, system instruction, tools and grounding flag

        Returns:
            ModelResponse with message content and tool calls

        Raises:
            LLMError: If the Ollama server fails or is unreachable
        """
        if request.search_grounding:
            logger.debug("Ollama does not support web search grounding; flag ignored")

        options = {
            "temperature": self.temperature,
            "num_predict": self.max_tokens,
        }

        try:
            response = await self.client.chat(
                model=self.model,
                messages=self.to_provider_messages(request),
                tools=[tool.to_function_tool() for tool in request.tools] or None,
                options=options,
            )
        except Exception as e:
            logger.bind(model=self.model, host=self.host, error_type=type(e).__name__).error(
                f"Ollama error: {e}"
            )
            raise LLMError(f"Ollama error: {e}") from e

        message = response["message"]
        tool_calls = []
        for call in message.get("tool_calls") or []:
            function = call["function"]
            arguments = function.get("arguments")
            tool_calls.append(
                RawToolCall(
                    name=function["name"],
                    arguments=dict(arguments) if arguments is not None else None,
                )
            )

        return ModelResponse(text=message.get("content"), tool_calls=tool_calls)

    async def close(self):
        """Close client (Ollama SDK handles cleanup internally)."""
        pass
