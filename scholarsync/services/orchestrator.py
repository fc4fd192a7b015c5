"""
Turn orchestration: one chat turn with tool calling.

Lifecycle of a turn:
COMPOSING → AWAITING_MODEL → EXECUTING_TOOLS → FINALIZING → DONE
and FAILED from any non-terminal state.

Failures never escape submit_turn. A model-service failure ends the turn
with a canned reply and no writes; a failing tool call is recorded in
the outcomes and the remaining calls still run. Cancellation is the one
exception that propagates, after a canned reply keeps the history paired.
"""

import asyncio

from scholarsync.core.llm.base import ModelClient
from scholarsync.core.store.base import ResearchStore
from scholarsync.models.commands import (
    SaveCitationCommand,
    SaveNoteCommand,
    UnknownCommand,
    parse_tool_call,
)
from scholarsync.models.conversation import ChatRole, ChatTurn
from scholarsync.models.llm import MessageRole, ModelMessage, ModelRequest, RawToolCall
from scholarsync.models.research import Project, ProjectSnapshot
from scholarsync.models.turn import AnomalyKind, ToolOutcome, ToolStatus, TurnResult, TurnState
from scholarsync.services.agent_modes import AgentMode, get_agent_config
from scholarsync.services.context_builder import ProjectContextBuilder
from scholarsync.services.conversation_store import ConversationStore
from scholarsync.services.project_cache import ProjectCache
from scholarsync.services.tool_registry import ToolRegistry
from scholarsync.utils.exceptions import LLMError, StoreError, ValidationError
from scholarsync.utils.id_generator import generate_turn_id
from scholarsync.utils.logger import get_logger

logger = get_logger(__name__)

TOOL_USAGE_HINT = (
    "When you find a relevant paper or want to save a note/draft, use the provided tools "
    "to save them to the project database."
)

SAVED_REPLY = "I've saved that information to your project."
NO_RESPONSE_REPLY = "I'm sorry, I couldn't generate a response."
TRANSPORT_ERROR_REPLY = "Error: Failed to connect to the AI service."
CONTEXT_ERROR_REPLY = "Error: Failed to load project data."
AGENT_MODE_ERROR_REPLY = "Error: Unknown agent mode."
CANCELLED_REPLY = "Error: The request was cancelled."


class TurnOrchestrator:
    """
    Runs chat turns against the model and applies their side effects.

    Features:
    - Builds the request from history, persona, project context and tools
    - Parses tool calls into typed commands before touching the store
    - Best-effort, in-order execution of tool calls
    - Refreshes the project cache after successful writes
    """

    def __init__(
        self,
        model_client: ModelClient,
        store: ResearchStore,
        cache: ProjectCache | None = None,
        context_builder: ProjectContextBuilder | None = None,
        tool_registry: ToolRegistry | None = None,
        search_grounding: bool = True,
    ):
        """
        Initialize the orchestrator.

        Args:
            model_client: Model service client
            store: Research store tool calls write to
            cache: Project cache (one is created over ``store`` if omitted)
            context_builder: Project context renderer
            tool_registry: Tools offered to the model
            search_grounding: Ask the model service for web search grounding
        """
        self.model_client = model_client
        self.store = store
        self.cache = cache or ProjectCache(store)
        self.context_builder = context_builder or ProjectContextBuilder()
        self.tool_registry = tool_registry or ToolRegistry()
        self.search_grounding = search_grounding

    async def submit_turn(
        self,
        user_text: str,
        project: Project | None,
        history: ConversationStore,
        agent_mode: AgentMode | str = AgentMode.LIBRARIAN,
    ) -> TurnResult | None:
        """
        Run one chat turn.

        Args:
            user_text: Message typed by the user
            project: Active project; tool calls are scoped to it
            history: Session conversation, updated in place
            agent_mode: Persona whose instruction is sent

        Returns:
            TurnResult, or None when there is no active project or the
            message is blank (nothing is recorded in that case)

        Raises:
            asyncio.CancelledError: If the turn is cancelled. The canned
                cancellation reply is recorded first, and tool writes
                already dispatched still complete.
        """
        if project is None or not user_text or not user_text.strip():
            return None

        turn_id = generate_turn_id()
        log = logger.bind(turn_id=turn_id, project_id=project.id)
        log.info(f"Turn {turn_id} started for project {project.id}")

        prior_turns = history.model_turns()
        history.add_user(user_text)

        try:
            return await self._run_turn(turn_id, user_text, project, history, prior_turns, agent_mode)
        except asyncio.CancelledError:
            log.warning(f"Turn {turn_id} cancelled")
            history.add_assistant(CANCELLED_REPLY, is_error=True)
            raise

    async def _run_turn(
        self,
        turn_id: str,
        user_text: str,
        project: Project,
        history: ConversationStore,
        prior_turns: list[ChatTurn],
        agent_mode: AgentMode | str,
    ) -> TurnResult:
        state = TurnState.COMPOSING
        log = logger.bind(turn_id=turn_id, project_id=project.id)

        try:
            get_agent_config(agent_mode)
        except ValueError as e:
            return self._fail(turn_id, state, history, AGENT_MODE_ERROR_REPLY, str(e))

        try:
            snapshot = await self.cache.get(project.id)
            request = self.build_request(user_text, project, snapshot, prior_turns, agent_mode)
        except StoreError as e:
            log.error(f"Turn {turn_id} could not load project context: {e}")
            return self._fail(turn_id, state, history, CONTEXT_ERROR_REPLY, str(e))

        state = self._transition(turn_id, state, TurnState.AWAITING_MODEL)
        try:
            response = await self.model_client.generate(request)
        except LLMError as e:
            return self._fail(turn_id, state, history, TRANSPORT_ERROR_REPLY, e.message)
        except Exception as e:
            log.error(f"Turn {turn_id} model client raised {type(e).__name__}: {e}")
            return self._fail(turn_id, state, history, TRANSPORT_ERROR_REPLY, str(e))

        outcomes: list[ToolOutcome] = []
        refreshed = False
        if response.tool_calls:
            state = self._transition(turn_id, state, TurnState.EXECUTING_TOOLS)
            # Dispatched writes complete even if the turn is cancelled
            outcomes, refreshed = await asyncio.shield(
                self._run_tool_phase(turn_id, project.id, response.tool_calls)
            )

        state = self._transition(turn_id, state, TurnState.FINALIZING)
        if response.has_text:
            reply = response.text
        elif any(outcome.success for outcome in outcomes):
            reply = SAVED_REPLY
        else:
            reply = NO_RESPONSE_REPLY

        history.add_assistant(reply)
        state = self._transition(turn_id, state, TurnState.DONE)

        result = TurnResult(
            turn_id=turn_id,
            reply=reply,
            state=state,
            outcomes=outcomes,
            refreshed=refreshed,
        )
        log.info(
            f"Turn {turn_id} done: {result.saved_count} saved, {result.failure_count} failed"
        )
        return result

    def build_request(
        self,
        user_text: str,
        project: Project,
        snapshot: ProjectSnapshot,
        prior_turns: list[ChatTurn],
        agent_mode: AgentMode | str,
    ) -> ModelRequest:
        """
        Assemble the outbound model request.

        Args:
            user_text: New user message
            project: Active project
            snapshot: Project notes and citations for the context block
            prior_turns: Earlier turns of the conversation, oldest first
            agent_mode: Persona whose instruction leads the system prompt

        Returns:
            ModelRequest ready for the model client

        Raises:
            ValueError: If agent_mode is not a known persona
        """
        messages = [
            ModelMessage(
                role=MessageRole.USER if turn.role == ChatRole.USER else MessageRole.RESPONSE,
                content=turn.content,
            )
            for turn in prior_turns
        ]
        messages.append(ModelMessage(role=MessageRole.USER, content=user_text))

        context = self.context_builder.build(project, snapshot.notes, snapshot.citations)
        system_instruction = (
            f"{get_agent_config(agent_mode).instruction}"
            f"\n\nPROJECT CONTEXT:\n{context}"
            f"\n\n{TOOL_USAGE_HINT}"
        )

        return ModelRequest(
            messages=messages,
            system_instruction=system_instruction,
            tools=self.tool_registry.declarations(),
            search_grounding=self.search_grounding,
        )

    async def execute_tool_calls(
        self, project_id: int, tool_calls: list[RawToolCall]
    ) -> list[ToolOutcome]:
        """
        Execute tool calls sequentially, in emitted order.

        A failing call never stops the calls after it.

        Args:
            project_id: Project every write is scoped to
            tool_calls: Calls as emitted by the model

        Returns:
            One outcome per call, in the same order
        """
        outcomes = []
        for call in tool_calls:
            outcomes.append(await self._execute_one(project_id, call))
        return outcomes

    async def _run_tool_phase(
        self, turn_id: str, project_id: int, tool_calls: list[RawToolCall]
    ) -> tuple[list[ToolOutcome], bool]:
        outcomes = await self.execute_tool_calls(project_id, tool_calls)

        refreshed = False
        if any(outcome.success for outcome in outcomes):
            try:
                await self.cache.refresh(project_id)
                refreshed = True
            except StoreError as e:
                logger.bind(turn_id=turn_id, project_id=project_id).error(
                    f"Turn {turn_id} saved data but the project refresh failed: {e}"
                )
        return outcomes, refreshed

    async def _execute_one(self, project_id: int, call: RawToolCall) -> ToolOutcome:
        try:
            command = parse_tool_call(call)
        except ValidationError as e:
            logger.bind(tool=call.name, anomaly=AnomalyKind.VALIDATION.value).warning(
                f"Skipping {call.name}: {e.message}"
            )
            return ToolOutcome(
                name=call.name,
                status=ToolStatus.FAILED,
                anomaly=AnomalyKind.VALIDATION,
                error=e.message,
            )

        if isinstance(command, UnknownCommand):
            logger.bind(tool=command.name, anomaly=AnomalyKind.UNKNOWN_TOOL.value).warning(
                f"Ignoring unknown tool call: {command.name}"
            )
            return ToolOutcome(
                name=command.name, status=ToolStatus.IGNORED, anomaly=AnomalyKind.UNKNOWN_TOOL
            )

        try:
            if isinstance(command, SaveNoteCommand):
                record_id = await self.store.create_note(
                    project_id=project_id,
                    title=command.title,
                    content=command.content,
                    kind=command.kind,
                )
            elif isinstance(command, SaveCitationCommand):
                record_id = await self.store.create_citation(
                    project_id=project_id,
                    title=command.title,
                    authors=command.authors,
                    year=command.year,
                    url=command.url,
                    doi=command.doi,
                    abstract=command.abstract,
                    citation_count=command.citation_count,
                )
            else:
                raise TypeError(f"Unhandled command: {type(command).__name__}")
        except Exception as e:
            logger.bind(
                tool=call.name, project_id=project_id, anomaly=AnomalyKind.PERSISTENCE.value
            ).error(f"{call.name} failed for project {project_id}: {e}")
            return ToolOutcome(
                name=call.name,
                status=ToolStatus.FAILED,
                anomaly=AnomalyKind.PERSISTENCE,
                error=str(e),
            )

        logger.info(f"{call.name} saved record {record_id} to project {project_id}")
        return ToolOutcome(name=call.name, status=ToolStatus.SUCCEEDED, record_id=record_id)

    def _transition(self, turn_id: str, current: TurnState, new: TurnState) -> TurnState:
        if current.is_terminal:
            raise RuntimeError(f"Turn {turn_id} is already {current.value}")
        logger.debug(f"Turn {turn_id}: {current.value} -> {new.value}")
        return new

    def _fail(
        self,
        turn_id: str,
        state: TurnState,
        history: ConversationStore,
        reply: str,
        error: str,
    ) -> TurnResult:
        state = self._transition(turn_id, state, TurnState.FAILED)
        logger.bind(turn_id=turn_id).error(f"Turn {turn_id} failed: {error}")
        history.add_assistant(reply, is_error=True)
        return TurnResult(turn_id=turn_id, reply=reply, state=state, error=error)
