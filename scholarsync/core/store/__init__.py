"""Research persistence: projects, notes and citations."""

from scholarsync.core.store.base import ResearchStore
from scholarsync.core.store.sqlite_store import SQLiteResearchStore

__all__ = [
    "ResearchStore",
    "SQLiteResearchStore",
]
