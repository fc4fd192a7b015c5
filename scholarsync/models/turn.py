"""
Turn lifecycle and outcome models.
"""

from enum import Enum

from pydantic import BaseModel, Field


class TurnState(str, Enum):
    """States a chat turn moves through."""

    COMPOSING = "composing"
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TurnState.DONE, TurnState.FAILED)


class ToolStatus(str, Enum):
    """Result of executing one tool call."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    IGNORED = "ignored"


class AnomalyKind(str, Enum):
    """Non-fatal problems recorded against a single tool call."""

    VALIDATION = "validation"
    PERSISTENCE = "persistence"
    UNKNOWN_TOOL = "unknown_tool"


class ToolOutcome(BaseModel):
    """Observability record for one tool call."""

    name: str
    status: ToolStatus
    anomaly: AnomalyKind | None = None
    record_id: int | None = Field(default=None, description="Id of the created row")
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.status == ToolStatus.SUCCEEDED


class TurnResult(BaseModel):
    """What a submitted turn produced."""

    turn_id: str
    reply: str
    state: TurnState
    outcomes: list[ToolOutcome] = Field(default_factory=list)
    refreshed: bool = Field(default=False, description="Project cache re-read after writes")
    error: str | None = None

    @property
    def saved_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == ToolStatus.FAILED)
