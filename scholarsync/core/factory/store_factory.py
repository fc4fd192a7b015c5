"""
Factory for creating research stores.
"""

from scholarsync.config import DatabaseConfig
from scholarsync.core.store.base import ResearchStore
from scholarsync.core.store.sqlite_store import SQLiteResearchStore


class StoreFactory:
    """Factory for creating research stores from configuration."""

    @staticmethod
    def create(config: DatabaseConfig) -> ResearchStore:
        """
        Create research store from configuration.

        Args:
            config: Database configuration

        Returns:
            Research store instance (not yet initialized)
        """
        return SQLiteResearchStore(db_path=config.path)
