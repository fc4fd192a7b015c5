"""
Tool declarations offered to the model.

The registry only describes the actions; argument validation happens
when a call is parsed into a command (see scholarsync.models.commands).
"""

from scholarsync.models.commands import SAVE_CITATION, SAVE_NOTE
from scholarsync.models.llm import ToolDeclaration
from scholarsync.models.research import NoteKind

SAVE_NOTE_TOOL = ToolDeclaration(
    name=SAVE_NOTE,
    description="Save a research note, draft, or summary to the current project.",
    parameters={
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": "The title of the note."},
            "content": {
                "type": "string",
                "description": "The content of the note in markdown format.",
            },
            "kind": {
                "type": "string",
                "enum": [kind.value for kind in NoteKind],
                "description": "The type of note: note, draft, or summary.",
            },
        },
        "required": ["title", "content", "kind"],
    },
)

SAVE_CITATION_TOOL = ToolDeclaration(
    name=SAVE_CITATION,
    description="Save a research citation to the current project.",
    parameters={
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": "The title of the paper."},
            "authors": {"type": "string", "description": "The authors of the paper."},
            "year": {"type": "string", "description": "The publication year."},
            "url": {"type": "string", "description": "The URL to the paper."},
            "doi": {"type": "string", "description": "The DOI of the paper."},
            "abstract": {
                "type": "string",
                "description": "A brief abstract or summary of the paper.",
            },
            "citationCount": {
                "type": "integer",
                "minimum": 0,
                "description": "The number of citations the paper has received.",
            },
        },
        "required": ["title", "authors", "year"],
    },
)


class ToolRegistry:
    """Tool declarations exposed to the model, keyed by name."""

    def __init__(self, tools: list[ToolDeclaration] | None = None):
        tools = tools if tools is not None else [SAVE_NOTE_TOOL, SAVE_CITATION_TOOL]
        self._tools: dict[str, ToolDeclaration] = {tool.name: tool for tool in tools}

    def declarations(self) -> list[ToolDeclaration]:
        return list(self._tools.values())
