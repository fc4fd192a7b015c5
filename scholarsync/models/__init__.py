"""
Data models for ScholarSync.

- Research entities: Project, Note, Citation, NoteKind, ProjectSnapshot
- Conversation: ChatRole, ChatTurn
- Model exchange: ModelRequest, ModelResponse, ModelMessage, RawToolCall, ToolDeclaration
- Tool commands: SaveNoteCommand, SaveCitationCommand, UnknownCommand, parse_tool_call
- Turn outcomes: TurnState, TurnResult, ToolOutcome, ToolStatus, AnomalyKind
"""

from scholarsync.models.commands import (
    SAVE_CITATION,
    SAVE_NOTE,
    SaveCitationCommand,
    SaveNoteCommand,
    ToolCommand,
    UnknownCommand,
    parse_tool_call,
)
from scholarsync.models.conversation import ChatRole, ChatTurn
from scholarsync.models.llm import (
    MessageRole,
    ModelMessage,
    ModelRequest,
    ModelResponse,
    RawToolCall,
    ToolDeclaration,
)
from scholarsync.models.research import Citation, Note, NoteKind, Project, ProjectSnapshot
from scholarsync.models.turn import AnomalyKind, ToolOutcome, ToolStatus, TurnResult, TurnState

__all__ = [
    # Research models
    "Project",
    "Note",
    "NoteKind",
    "Citation",
    "ProjectSnapshot",
    # Conversation
    "ChatRole",
    "ChatTurn",
    # Model exchange
    "MessageRole",
    "ModelMessage",
    "ModelRequest",
    "ModelResponse",
    "RawToolCall",
    "ToolDeclaration",
    # Commands
    "SAVE_NOTE",
    "SAVE_CITATION",
    "SaveNoteCommand",
    "SaveCitationCommand",
    "UnknownCommand",
    "ToolCommand",
    "parse_tool_call",
    # Turn outcomes
    "TurnState",
    "TurnResult",
    "ToolOutcome",
    "ToolStatus",
    "AnomalyKind",
]
