"""
OpenAI model client using official SDK.
"""

from openai import AsyncOpenAI

from scholarsync.core.llm.base import ModelClient
from scholarsync.models.llm import ModelRequest, ModelResponse, RawToolCall
from scholarsync.utils.exceptions import LLMError, ValidationError
from scholarsync.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAIModelClient(ModelClient):
    """
    OpenAI chat client with function calling.

    Web search grounding is only available on the search-enabled chat
    models (e.g. "gpt-4o-search-preview"); other models ignore the flag.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        organization: str | None = None,
        base_url: str | None = None,
        timeout: float = 120.0,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ):
        """
        Initialize OpenAI model client.

        Args:
            api_key: OpenAI API key
            model: Model name (e.g., "gpt-4o", "gpt-4o-mini")
            organization: Optional organization ID
            base_url: Optional custom base URL
            timeout: Request timeout in seconds
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
        """
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

        self.client = AsyncOpenAI(
            api_key=api_key, organization=organization, base_url=base_url, timeout=timeout
        )

    @property
    def supports_web_search(self) -> bool:
        return "search" in self.model

    async def generate(self, request: ModelRequest) -> ModelResponse:
        """
        Run one chat completion.

        Args:
            request: History, system instruction, tools and grounding flag

        Returns:
            ModelResponse with message content and decoded tool calls

        Raises:
            LLMError: If OpenAI API call fails
            ValidationError: If the request carries no messages
        """
        if not request.messages:
            raise ValidationError("Model request must contain at least one message")

        params = {
            "model": self.model,
            "messages": self.to_provider_messages(request),
            "max_tokens": self.max_tokens,
        }

        if request.tools:
            params["tools"] = [tool.to_function_tool() for tool in request.tools]

        if request.search_grounding and self.supports_web_search:
            # Search models reject sampling parameters
            params["web_search_options"] = {}
        else:
            params["temperature"] = self.temperature
            if request.search_grounding:
                logger.debug(f"Model {self.model} has no web search; grounding skipped")

        try:
            response = await self.client.chat.completions.create(**params)
        except Exception as e:
            logger.bind(model=self.model, error_type=type(e).__name__).error(
                f"OpenAI API error: {e}"
            )
            raise LLMError(f"OpenAI API error: {e}") from e

        if not response.choices:
            raise LLMError("OpenAI returned no choices", context={"model": self.model})

        message = response.choices[0].message
        tool_calls = [
            RawToolCall(name=call.function.name, arguments=call.function.arguments)
            for call in (message.tool_calls or [])
        ]

        return ModelResponse(text=message.content, tool_calls=tool_calls)

    async def close(self):
        """Close OpenAI client."""
        await self.client.close()
