"""
Cached notes and citations per project.

The orchestrator reads the project context from here and refreshes the
entry after tool calls write to the store.
"""

from scholarsync.core.store.base import ResearchStore
from scholarsync.models.research import ProjectSnapshot
from scholarsync.utils.logger import get_logger

logger = get_logger(__name__)


class ProjectCache:
    """In-memory view of each project's notes and citations."""

    def __init__(self, store: ResearchStore):
        self.store = store
        self._snapshots: dict[int, ProjectSnapshot] = {}

    async def get(self, project_id: int) -> ProjectSnapshot:
        """
        Return the cached snapshot, loading it on a miss.

        Raises:
            StoreError: If loading from the store fails
        """
        snapshot = self._snapshots.get(project_id)
        if snapshot is None:
            snapshot = await self.refresh(project_id)
        return snapshot

    async def refresh(self, project_id: int) -> ProjectSnapshot:
        """
        Re-read notes and citations from the store.

        Raises:
            StoreError: If loading from the store fails
        """
        notes = await self.store.list_notes_by_project(project_id)
        citations = await self.store.list_citations_by_project(project_id)
        snapshot = ProjectSnapshot(project_id=project_id, notes=notes, citations=citations)
        self._snapshots[project_id] = snapshot
        logger.debug(
            f"Project {project_id} refreshed: {len(notes)} notes, {len(citations)} citations"
        )
        return snapshot

    def invalidate(self, project_id: int) -> None:
        self._snapshots.pop(project_id, None)

    def clear(self) -> None:
        self._snapshots.clear()

    def __contains__(self, project_id: int) -> bool:
        return project_id in self._snapshots
