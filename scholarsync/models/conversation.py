"""
Chat turn model.

Turns live only as long as the chat session that holds them.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ChatRole(str, Enum):
    """Speaker of a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatTurn(BaseModel):
    """One message in a conversation."""

    role: ChatRole = Field(..., description="Who produced the message")
    content: str = Field(..., description="Message text (markdown)")
    is_error: bool = Field(
        default=False,
        description="Canned failure reply; shown to the user but not replayed to the model",
    )
