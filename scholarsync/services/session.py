"""
Chat sessions: one per project view.

A session owns the conversation of its project and lets at most one
turn be in flight. Tool calls are not idempotent, so a second
submission while the first is still running is rejected rather than
interleaved.
"""

import asyncio

from scholarsync.models.research import Project
from scholarsync.models.turn import TurnResult
from scholarsync.services.agent_modes import AgentMode, greeting
from scholarsync.services.conversation_store import ConversationStore
from scholarsync.services.orchestrator import TurnOrchestrator
from scholarsync.utils.exceptions import TurnInProgressError
from scholarsync.utils.id_generator import generate_session_id
from scholarsync.utils.logger import get_logger

logger = get_logger(__name__)


class ChatSession:
    """Conversation, persona and single-flight guard for one project."""

    def __init__(
        self,
        project: Project,
        orchestrator: TurnOrchestrator,
        agent_mode: AgentMode = AgentMode.LIBRARIAN,
    ):
        self.id = generate_session_id()
        self.project = project
        self.orchestrator = orchestrator
        self.agent_mode = AgentMode(agent_mode)
        self.conversation = ConversationStore()
        self._turn: asyncio.Task | None = None

    @property
    def busy(self) -> bool:
        return self._turn is not None and not self._turn.done()

    @property
    def greeting(self) -> str:
        return greeting(self.project, self.agent_mode)

    def set_agent_mode(self, mode: AgentMode | str) -> bool:
        """
        Switch persona. A new persona starts a fresh conversation.

        Returns:
            True if the mode changed

        Raises:
            ValueError: If mode is not a known agent mode
            TurnInProgressError: If a turn is in flight
        """
        mode = AgentMode(mode)
        if mode == self.agent_mode:
            return False
        if self.busy:
            raise TurnInProgressError(
                "Cannot switch agent mode while a turn is in progress",
                context={"project_id": self.project.id},
            )
        logger.info(f"Session {self.id}: agent mode {self.agent_mode.value} -> {mode.value}")
        self.agent_mode = mode
        self.conversation.clear()
        return True

    def reset(self) -> None:
        if self.busy:
            raise TurnInProgressError(
                "Cannot reset the conversation while a turn is in progress",
                context={"project_id": self.project.id},
            )
        self.conversation.clear()

    async def submit(self, text: str) -> TurnResult | None:
        """
        Submit a user message.

        The turn runs as a task owned by the session. Cancelling the
        caller does not stop it, and the session stays busy until the
        turn has finished writing.

        Raises:
            TurnInProgressError: If another turn of this session is in flight
        """
        if self.busy:
            raise TurnInProgressError(
                "A turn is already in progress for this project",
                context={"project_id": self.project.id, "session_id": self.id},
            )
        self._turn = asyncio.ensure_future(
            self.orchestrator.submit_turn(text, self.project, self.conversation, self.agent_mode)
        )
        return await asyncio.shield(self._turn)

    async def drain(self) -> None:
        """Wait until the in-flight turn, if any, has finished."""
        if self.busy:
            logger.debug(f"Session {self.id}: waiting for the in-flight turn")
            await asyncio.wait([self._turn])


class SessionManager:
    """Registry of chat sessions keyed by project id."""

    def __init__(
        self,
        orchestrator: TurnOrchestrator,
        default_agent_mode: AgentMode | str = AgentMode.LIBRARIAN,
    ):
        self.orchestrator = orchestrator
        self.default_agent_mode = AgentMode(default_agent_mode)
        self._sessions: dict[int, ChatSession] = {}

    def get(self, project_id: int) -> ChatSession | None:
        return self._sessions.get(project_id)

    def get_or_create(self, project: Project) -> ChatSession:
        session = self._sessions.get(project.id)
        if session is None:
            session = ChatSession(project, self.orchestrator, self.default_agent_mode)
            self._sessions[project.id] = session
            logger.debug(f"Session {session.id} opened for project {project.id}")
        return session

    def drop(self, project_id: int) -> None:
        """Forget a project's session and its cached data."""
        self._sessions.pop(project_id, None)
        self.orchestrator.cache.invalidate(project_id)

    async def drain(self) -> None:
        """Wait for every in-flight turn to finish (used at shutdown)."""
        await asyncio.gather(*(session.drain() for session in self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)
