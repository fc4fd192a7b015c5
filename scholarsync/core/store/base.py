"""
Base interface for research persistence.

Three tables: projects, and the notes and citations each project owns.
"""

from abc import ABC, abstractmethod

from scholarsync.models.research import Citation, Note, NoteKind, Project


class ResearchStore(ABC):
    """Abstract base class for project, note and citation storage."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the store (create tables/schema)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the underlying connection."""
        pass

    # ═══════════════════════════════════════════════════════════
    # PROJECTS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def create_project(self, title: str, description: str = "") -> int:
        """
        Create a project.

        Args:
            title: Project title, non-empty
            description: Optional description

        Returns:
            New project id

        Raises:
            ValidationError: If title is empty
        """
        pass

    @abstractmethod
    async def get_project(self, project_id: int) -> Project | None:
        """
        Retrieve a project by id.

        Returns:
            Project or None if not found
        """
        pass

    @abstractmethod
    async def list_projects(self) -> list[Project]:
        """List all projects, newest first."""
        pass

    @abstractmethod
    async def delete_project(self, project_id: int) -> None:
        """
        Delete a project together with its notes and citations.

        Deleting an unknown id is not an error.
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # NOTES
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def create_note(
        self,
        project_id: int,
        title: str,
        content: str,
        kind: NoteKind = NoteKind.NOTE,
    ) -> int:
        """
        Create a note in a project.

        Returns:
            New note id

        Raises:
            StoreError: If the project does not exist or the write fails
        """
        pass

    @abstractmethod
    async def list_notes_by_project(self, project_id: int) -> list[Note]:
        """List a project's notes, newest first."""
        pass

    @abstractmethod
    async def delete_note(self, note_id: int) -> None:
        """Delete a note. Deleting an unknown id is not an error."""
        pass

    # ═══════════════════════════════════════════════════════════
    # CITATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def create_citation(
        self,
        project_id: int,
        title: str,
        authors: str,
        year: str,
        url: str | None = None,
        doi: str | None = None,
        abstract: str | None = None,
        citation_count: int = 0,
    ) -> int:
        """
        Create a citation in a project.

        Returns:
            New citation id

        Raises:
            StoreError: If the project does not exist or the write fails
        """
        pass

    @abstractmethod
    async def list_citations_by_project(self, project_id: int) -> list[Citation]:
        """List a project's citations, newest first."""
        pass

    @abstractmethod
    async def delete_citation(self, citation_id: int) -> None:
        """Delete a citation. Deleting an unknown id is not an error."""
        pass
