"""
Request and response shapes exchanged with the model service.

Provider clients translate these into their SDK payloads, so the
orchestrator never touches provider-specific structures.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    """Provider-neutral role vocabulary.

    RESPONSE stands for the model's own prior replies; each provider maps
    it onto its native name ("assistant" for OpenAI and Ollama).
    """

    USER = "user"
    RESPONSE = "response"


class ModelMessage(BaseModel):
    """Single history entry sent to the model."""

    role: MessageRole
    content: str


class ToolDeclaration(BaseModel):
    """Callable action offered to the model."""

    name: str = Field(..., description="Function name the model calls")
    description: str = Field(..., description="What the action does, for the model")
    parameters: dict[str, Any] = Field(..., description="JSON schema of the arguments")

    def to_function_tool(self) -> dict[str, Any]:
        """Render in the function-tool shape accepted by OpenAI and Ollama."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ModelRequest(BaseModel):
    """Everything the model needs for one turn."""

    messages: list[ModelMessage] = Field(..., description="History plus the new user message")
    system_instruction: str = Field(..., description="Persona instruction and project context")
    tools: list[ToolDeclaration] = Field(default_factory=list)
    search_grounding: bool = Field(default=False, description="Allow web search grounding")


class RawToolCall(BaseModel):
    """Untyped tool call exactly as the model emitted it."""

    name: str
    # JSON string (OpenAI) or already-decoded mapping (Ollama)
    arguments: dict[str, Any] | str | None = None


class ModelResponse(BaseModel):
    """Model output: free text, tool calls, or both."""

    text: str | None = None
    tool_calls: list[RawToolCall] = Field(default_factory=list)

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())
