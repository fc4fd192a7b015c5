"""
ID generation utilities for ScholarSync.

Projects, notes and citations get integer row ids from SQLite; the
helpers here cover ephemeral identifiers only:
- Sessions: sess_xxx
- Turns: turn_xxx
"""

from uuid import uuid4


def generate_session_id() -> str:
    """
    Generate unique chat session ID.

    Returns:
        ID in format "sess_xxx" where xxx is 12 hex characters
    """
    return f"sess_{uuid4().hex[:12]}"


def generate_turn_id() -> str:
    """
    Generate unique turn ID used to correlate log records of one turn.

    Returns:
        ID in format "turn_xxx" where xxx is 12 hex characters
    """
    return f"turn_{uuid4().hex[:12]}"
