"""
SQLite research store implementation using aiosqlite.
"""

import asyncio
from datetime import datetime
from pathlib import Path

import aiosqlite

from scholarsync.core.store.base import ResearchStore
from scholarsync.models.research import Citation, Note, NoteKind, Project
from scholarsync.utils.exceptions import StoreError, ValidationError
from scholarsync.utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS projects (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT DEFAULT '',
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS notes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id INTEGER NOT NULL,
    title TEXT,
    content TEXT,
    type TEXT DEFAULT 'note',
    created_at TEXT NOT NULL,
    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS citations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id INTEGER NOT NULL,
    title TEXT,
    authors TEXT,
    year TEXT,
    url TEXT,
    doi TEXT,
    abstract TEXT,
    citation_count INTEGER DEFAULT 0,
    created_at TEXT NOT NULL,
    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_notes_project ON notes(project_id);
CREATE INDEX IF NOT EXISTS idx_citations_project ON citations(project_id);
"""


class SQLiteResearchStore(ResearchStore):
    """
    SQLite-based store for projects, notes and citations.

    A single connection is shared by the whole process. Writes go through
    an asyncio lock so row ids are handed out one create at a time.
    """

    def __init__(self, db_path: str = "data/research.db"):
        """
        Initialize SQLite research store.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            self.connection = await aiosqlite.connect(self.db_path)
            self.connection.row_factory = aiosqlite.Row
            await self.connection.execute("PRAGMA foreign_keys = ON")
            if self.db_path != ":memory:":
                await self.connection.execute("PRAGMA journal_mode = WAL")
            await self.connection.commit()

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()
        await self.connection.executescript(SCHEMA)
        await self.connection.commit()
        logger.info(f"Research store ready at {self.db_path}")

    async def close(self) -> None:
        """Close the connection."""
        if self.connection is not None:
            await self.connection.close()
            self.connection = None

    async def _insert(self, operation: str, query: str, params: tuple) -> int:
        await self.connect()
        async with self._write_lock:
            try:
                cursor = await self.connection.execute(query, params)
                await self.connection.commit()
            except aiosqlite.Error as e:
                await self.connection.rollback()
                logger.bind(operation=operation).error(f"{operation} failed: {e}")
                raise StoreError(f"{operation} failed: {e}", context={"operation": operation}) from e
        return cursor.lastrowid

    async def _delete(self, operation: str, statements: list[tuple[str, tuple]]) -> None:
        await self.connect()
        async with self._write_lock:
            try:
                for query, params in statements:
                    await self.connection.execute(query, params)
                await self.connection.commit()
            except aiosqlite.Error as e:
                await self.connection.rollback()
                logger.bind(operation=operation).error(f"{operation} failed: {e}")
                raise StoreError(f"{operation} failed: {e}", context={"operation": operation}) from e

    async def _fetch_all(self, query: str, params: tuple = ()) -> list[aiosqlite.Row]:
        await self.connect()
        try:
            cursor = await self.connection.execute(query, params)
            return await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StoreError(f"Query failed: {e}") from e

    # ═══════════════════════════════════════════════════════════
    # PROJECTS
    # ═══════════════════════════════════════════════════════════

    async def create_project(self, title: str, description: str = "") -> int:
        """Create a project and return its id."""
        if not title or not title.strip():
            raise ValidationError("Project title cannot be empty")

        project_id = await self._insert(
            "create_project",
            "INSERT INTO projects (title, description, created_at) VALUES (?, ?, ?)",
            (title.strip(), description or "", datetime.now().isoformat()),
        )
        logger.info(f"Project created: {project_id}", extra={"project_id": project_id})
        return project_id

    async def get_project(self, project_id: int) -> Project | None:
        """Retrieve a project by id."""
        rows = await self._fetch_all("SELECT * FROM projects WHERE id = ?", (project_id,))
        return self._row_to_project(rows[0]) if rows else None

    async def list_projects(self) -> list[Project]:
        """List all projects, newest first."""
        rows = await self._fetch_all("SELECT * FROM projects ORDER BY created_at DESC, id DESC")
        return [self._row_to_project(row) for row in rows]

    async def delete_project(self, project_id: int) -> None:
        """Delete a project and everything it owns."""
        await self._delete(
            "delete_project",
            [
                ("DELETE FROM notes WHERE project_id = ?", (project_id,)),
                ("DELETE FROM citations WHERE project_id = ?", (project_id,)),
                ("DELETE FROM projects WHERE id = ?", (project_id,)),
            ],
        )
        logger.info(f"Project deleted: {project_id}", extra={"project_id": project_id})

    # ═══════════════════════════════════════════════════════════
    # NOTES
    # ═══════════════════════════════════════════════════════════

    async def create_note(
        self,
        project_id: int,
        title: str,
        content: str,
        kind: NoteKind = NoteKind.NOTE,
    ) -> int:
        """Create a note and return its id."""
        kind = NoteKind.normalize(kind)
        return await self._insert(
            "create_note",
            "INSERT INTO notes (project_id, title, content, type, created_at) VALUES (?, ?, ?, ?, ?)",
            (project_id, title, content, kind.value, datetime.now().isoformat()),
        )

    async def list_notes_by_project(self, project_id: int) -> list[Note]:
        """List a project's notes, newest first."""
        rows = await self._fetch_all(
            "SELECT * FROM notes WHERE project_id = ? ORDER BY created_at DESC, id DESC",
            (project_id,),
        )
        return [self._row_to_note(row) for row in rows]

    async def delete_note(self, note_id: int) -> None:
        """Delete a note."""
        await self._delete("delete_note", [("DELETE FROM notes WHERE id = ?", (note_id,))])

    # ═══════════════════════════════════════════════════════════
    # CITATIONS
    # ═══════════════════════════════════════════════════════════

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
        """Create a citation and return its id."""
        return await self._insert(
            "create_citation",
            """
            INSERT INTO citations (
                project_id, title, authors, year, url, doi, abstract, citation_count, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                project_id,
                title,
                authors,
                year,
                url,
                doi,
                abstract,
                max(citation_count or 0, 0),
                datetime.now().isoformat(),
            ),
        )

    async def list_citations_by_project(self, project_id: int) -> list[Citation]:
        """List a project's citations, newest first."""
        rows = await self._fetch_all(
            "SELECT * FROM citations WHERE project_id = ? ORDER BY created_at DESC, id DESC",
            (project_id,),
        )
        return [self._row_to_citation(row) for row in rows]

    async def delete_citation(self, citation_id: int) -> None:
        """Delete a citation."""
        await self._delete(
            "delete_citation", [("DELETE FROM citations WHERE id = ?", (citation_id,))]
        )

    # ═══════════════════════════════════════════════════════════
    # ROW MAPPING
    # ═══════════════════════════════════════════════════════════

    def _row_to_project(self, row: aiosqlite.Row) -> Project:
        return Project(
            id=row["id"],
            title=row["title"],
            description=row["description"] or "",
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_note(self, row: aiosqlite.Row) -> Note:
        return Note(
            id=row["id"],
            project_id=row["project_id"],
            title=row["title"] or "",
            content=row["content"] or "",
            kind=NoteKind.normalize(row["type"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_citation(self, row: aiosqlite.Row) -> Citation:
        return Citation(
            id=row["id"],
            project_id=row["project_id"],
            title=row["title"] or "",
            authors=row["authors"] or "",
            year=row["year"] or "",
            url=row["url"],
            doi=row["doi"],
            abstract=row["abstract"],
            citation_count=max(row["citation_count"] or 0, 0),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
