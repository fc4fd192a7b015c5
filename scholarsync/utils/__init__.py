"""Utility modules for ScholarSync."""

from scholarsync.utils.exceptions import (
    LLMError,
    ScholarSyncError,
    StoreError,
    TurnInProgressError,
    ValidationError,
)
from scholarsync.utils.id_generator import generate_session_id, generate_turn_id
from scholarsync.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # ID Generators
    "generate_session_id",
    "generate_turn_id",
    # Exceptions
    "ScholarSyncError",
    "StoreError",
    "ValidationError",
    "LLMError",
    "TurnInProgressError",
]
