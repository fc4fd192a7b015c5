"""
Abstract base class for model service clients.
Handles one chat round trip with tool declarations.
"""

from abc import ABC, abstractmethod
from typing import Any

from scholarsync.models.llm import MessageRole, ModelRequest, ModelResponse


class ModelClient(ABC):
    """
    Abstract base for chat model providers.

    Responsibilities:
    - Translate a ModelRequest into the provider's chat payload
    - Offer tool declarations and, where supported, web search grounding
    - Return free text and/or tool calls as a ModelResponse
    """

    # Provider name for the model's own prior replies
    response_role: str = "assistant"

    def to_provider_messages(self, request: ModelRequest) -> list[dict[str, Any]]:
        """
        Build the provider message list.

        The system instruction goes first, followed by history in order.

        Args:
            request: Provider-neutral request

        Returns:
            List of {"role", "content"} dicts
        """
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": request.system_instruction}
        ]
        for message in request.messages:
            role = self.response_role if message.role == MessageRole.RESPONSE else "user"
            messages.append({"role": role, "content": message.content})
        return messages

    @abstractmethod
    async def generate(self, request: ModelRequest) -> ModelResponse:
        """
        Send one turn to the model.

        Args:
            request: History, system instruction, tools and grounding flag

        Returns:
            Model text and/or tool calls

        Raises:
            LLMError: If the service is unreachable or returns an error
        """
        pass

    @abstractmethod
    async def close(self):
        """
        Close any open connections.
        """
