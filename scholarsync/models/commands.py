"""
Typed commands parsed from model tool calls.

Tool-call arguments arrive as duck-typed JSON from an external service.
They are validated and coerced here, once, into one of three variants
before anything touches the store:

- SaveNoteCommand
- SaveCitationCommand
- UnknownCommand (name not in the registry; logged and skipped)
"""

import json
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from scholarsync.models.llm import RawToolCall
from scholarsync.models.research import NoteKind
from scholarsync.utils.exceptions import ValidationError

SAVE_NOTE = "saveNote"
SAVE_CITATION = "saveCitation"


def _require_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string")
    return value.strip()


class SaveNoteCommand(BaseModel):
    """Create a note, draft or summary in the active project."""

    model_config = {"extra": "ignore"}

    command_type: Literal["saveNote"] = SAVE_NOTE
    title: str
    content: str
    # Older clients send the kind as "type"
    kind: NoteKind = Field(
        default=NoteKind.NOTE, validation_alias=AliasChoices("kind", "type")
    )

    @field_validator("title", mode="before")
    @classmethod
    def _check_title(cls, value: Any) -> str:
        return _require_text(value, "title")

    @field_validator("content", mode="before")
    @classmethod
    def _check_content(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("content must be a non-empty string")
        return value

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> NoteKind:
        return NoteKind.normalize(value)


class SaveCitationCommand(BaseModel):
    """Create a citation in the active project."""

    model_config = {"extra": "ignore"}

    command_type: Literal["saveCitation"] = SAVE_CITATION
    title: str
    authors: str
    year: str
    url: str | None = None
    doi: str | None = None
    abstract: str | None = None
    citation_count: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("citationCount", "citation_count")
    )

    @field_validator("title", "authors", mode="before")
    @classmethod
    def _check_required_text(cls, value: Any, info) -> str:
        return _require_text(value, info.field_name)

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value: Any) -> str:
        # Models often emit the year as a number
        if isinstance(value, bool):
            raise ValueError("year must be a string or number")
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, int):
            return str(value)
        return _require_text(value, "year")

    @field_validator("url", "doi", "abstract", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("citation_count", mode="before")
    @classmethod
    def _normalize_count(cls, value: Any) -> int:
        if value is None or isinstance(value, bool):
            return 0
        try:
            count = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0
        return max(count, 0)


class UnknownCommand(BaseModel):
    """Tool call whose name the registry does not know."""

    command_type: Literal["unknown"] = "unknown"
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


ToolCommand = Annotated[
    Union[SaveNoteCommand, SaveCitationCommand, UnknownCommand],
    Field(discriminator="command_type"),
]

COMMAND_TYPES: dict[str, type[BaseModel]] = {
    SAVE_NOTE: SaveNoteCommand,
    SAVE_CITATION: SaveCitationCommand,
}


def _decode_arguments(call: RawToolCall) -> dict[str, Any]:
    arguments = call.arguments
    if arguments is None:
        return {}
    if isinstance(arguments, str):
        if not arguments.strip():
            return {}
        try:
            arguments = json.loads(arguments)
        except json.JSONDecodeError as e:
            raise ValidationError(
                f"Arguments for {call.name} are not valid JSON",
                context={"tool": call.name, "error": str(e)},
            ) from e
    if not isinstance(arguments, dict):
        raise ValidationError(
            f"Arguments for {call.name} must be an object",
            context={"tool": call.name, "type": type(arguments).__name__},
        )
    return arguments


def parse_tool_call(call: RawToolCall) -> ToolCommand:
    """
    Validate a raw tool call into a typed command.

    Args:
        call: Tool call as emitted by the model

    Returns:
        SaveNoteCommand, SaveCitationCommand or UnknownCommand

    Raises:
        ValidationError: If arguments are malformed or a required field is
            missing and has no safe default
    """
    command_cls = COMMAND_TYPES.get(call.name)
    if command_cls is None:
        try:
            arguments = _decode_arguments(call)
        except ValidationError:
            arguments = {}
        return UnknownCommand(name=call.name, arguments=arguments)

    arguments = _decode_arguments(call)
    # The discriminator is ours to set, never the model's
    payload = {k: v for k, v in arguments.items() if k != "command_type"}

    try:
        return command_cls.model_validate(payload)
    except PydanticValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ValidationError(
            f"Invalid arguments for {call.name}: {', '.join(fields)}",
            context={"tool": call.name, "fields": fields},
        ) from e
