"""
Research data models.

A Project is the root of a small ownership tree: it exclusively owns
its Notes and Citations, and deleting it removes both.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class NoteKind(str, Enum):
    """Kinds of free-text artifacts saved to a project."""

    NOTE = "note"
    DRAFT = "draft"
    SUMMARY = "summary"

    @classmethod
    def normalize(cls, value: object) -> "NoteKind":
        """
        Map an arbitrary value onto a NoteKind.

        Unknown, empty or non-string values fall back to NOTE.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.NOTE


class Project(BaseModel):
    """Top-level container for a body of research work."""

    id: int = Field(..., description="Row id assigned by the store")
    title: str = Field(..., min_length=1, description="Project title")
    description: str = Field(default="", description="Free-form description")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")


class Note(BaseModel):
    """
    Free-text artifact tagged as note, draft or summary.

    Notes are append-only: they are created and deleted, never updated.
    """

    id: int = Field(..., description="Row id assigned by the store")
    project_id: int = Field(..., description="Owning project id")
    title: str = Field(default="", description="Note title")
    content: str = Field(default="", description="Note body (markdown)")
    kind: NoteKind = Field(default=NoteKind.NOTE, description="Artifact kind")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")

    def content_preview(self, limit: int = 200) -> str:
        """
        Get a bounded prefix of the note content.

        Args:
            limit: Maximum number of characters kept

        Returns:
            Content truncated to ``limit`` characters with a trailing ellipsis
        """
        if len(self.content) > limit:
            return f"{self.content[:limit]}..."
        return self.content


class Citation(BaseModel):
    """Bibliographic record within a project."""

    id: int = Field(..., description="Row id assigned by the store")
    project_id: int = Field(..., description="Owning project id")
    title: str = Field(default="", description="Paper title")
    authors: str = Field(default="", description="Author list as free text")
    year: str = Field(default="", description="Publication year")
    url: str | None = Field(default=None, description="Link to the paper")
    doi: str | None = Field(default=None, description="Digital Object Identifier")
    abstract: str | None = Field(default=None, description="Abstract or short summary")
    citation_count: int = Field(default=0, ge=0, description="Times the paper has been cited")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")


class ProjectSnapshot(BaseModel):
    """Cached view of a project's notes and citations."""

    project_id: int
    notes: list[Note] = Field(default_factory=list)
    citations: list[Citation] = Field(default_factory=list)
    loaded_at: datetime = Field(default_factory=datetime.now)
