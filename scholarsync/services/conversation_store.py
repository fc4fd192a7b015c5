"""Ordered, in-memory chat history for one session."""

from collections.abc import Iterator

from scholarsync.models.conversation import ChatRole, ChatTurn


class ConversationStore:
    """
    Append-only sequence of chat turns.

    Lives as long as the session that owns it; nothing is persisted.
    """

    def __init__(self, turns: list[ChatTurn] | None = None):
        self._turns: list[ChatTurn] = list(turns or [])

    def add_user(self, content: str) -> ChatTurn:
        turn = ChatTurn(role=ChatRole.USER, content=content)
        self._turns.append(turn)
        return turn

    def add_assistant(self, content: str, is_error: bool = False) -> ChatTurn:
        turn = ChatTurn(role=ChatRole.ASSISTANT, content=content, is_error=is_error)
        self._turns.append(turn)
        return turn

    def turns(self) -> list[ChatTurn]:
        """Copy of all turns in submission order."""
        return list(self._turns)

    def model_turns(self) -> list[ChatTurn]:
        """Turns worth replaying to the model (canned failures excluded)."""
        return [turn for turn in self._turns if not turn.is_error]

    def clear(self) -> None:
        self._turns.clear()

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ChatTurn]:
        return iter(list(self._turns))
