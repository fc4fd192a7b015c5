"""
Factory modules for creating ScholarSync components.

Provides factories for the model client and the research store.
"""

from scholarsync.core.factory.llm_factory import LLMFactory
from scholarsync.core.factory.store_factory import StoreFactory

__all__ = [
    "LLMFactory",
    "StoreFactory",
]
