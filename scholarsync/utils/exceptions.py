"""
Custom exception hierarchy for ScholarSync.

All exceptions inherit from ScholarSyncError so callers at the API
boundary can catch the whole family in one place.
"""


class ScholarSyncError(Exception):
    """
    Base exception for all ScholarSync errors.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize ScholarSync error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class StoreError(ScholarSyncError):
    """
    Persistence errors.
    Raised when a create, list or delete against the research store fails.
    """

    pass


class ValidationError(ScholarSyncError):
    """
    Validation errors.
    Raised when input is invalid, including malformed tool-call arguments.
    """

    pass


class LLMError(ScholarSyncError):
    """
    Model service errors.
    Raised when the model service is unreachable or answers with an error.
    """

    pass


class TurnInProgressError(ScholarSyncError):
    """
    Raised when a chat turn is submitted while another one is still
    awaiting the model for the same session.
    """

    pass
