"""
Tests for ChatSession and SessionManager.
"""

import asyncio

import pytest
from conftest import BlockingModelClient, FakeModelClient, GatedNoteStore

from scholarsync.models import ChatRole, ModelResponse, RawToolCall, TurnState
from scholarsync.services.agent_modes import AgentMode
from scholarsync.services.orchestrator import SAVED_REPLY, TurnOrchestrator
from scholarsync.services.session import ChatSession, SessionManager
from scholarsync.utils.exceptions import TurnInProgressError


async def wait_until_busy(session: ChatSession) -> None:
    while not session.busy:
        await asyncio.sleep(0)


@pytest.fixture
def orchestrator(fake_llm, store):
    return TurnOrchestrator(model_client=fake_llm, store=store)


@pytest.mark.unit
@pytest.mark.asyncio
class TestChatSession:
    """Test ChatSession."""

    async def test_submit_records_turn(self, orchestrator, project):
        session = ChatSession(project, orchestrator)

        result = await session.submit("hello")

        assert result.state == TurnState.DONE
        assert len(session.conversation) == 2
        assert not session.busy

    async def test_second_submission_rejected_while_busy(self, store, project):
        client = BlockingModelClient()
        session = ChatSession(project, TurnOrchestrator(model_client=client, store=store))

        first = asyncio.create_task(session.submit("first"))
        await wait_until_busy(session)

        with pytest.raises(TurnInProgressError):
            await session.submit("second")

        client.release.set()
        result = await first

        assert result.reply == "finally"
        assert len(client.requests) == 1
        assert len(session.conversation) == 2

    async def test_mode_switch_rejected_while_busy(self, store, project):
        client = BlockingModelClient()
        session = ChatSession(project, TurnOrchestrator(model_client=client, store=store))

        first = asyncio.create_task(session.submit("first"))
        await wait_until_busy(session)

        with pytest.raises(TurnInProgressError):
            session.set_agent_mode(AgentMode.SCRIBE)
        with pytest.raises(TurnInProgressError):
            session.reset()

        client.release.set()
        await first

    async def test_cancelled_caller_keeps_session_busy(self, tmp_path):
        store = GatedNoteStore(db_path=str(tmp_path / "gated.db"))
        await store.initialize()
        try:
            project = await store.get_project(await store.create_project("Gated"))
            client = FakeModelClient(
                responses=[
                    ModelResponse(
                        tool_calls=[
                            RawToolCall(
                                name="saveNote", arguments={"title": "First", "content": "body"}
                            )
                        ]
                    )
                ]
            )
            session = ChatSession(project, TurnOrchestrator(model_client=client, store=store))

            task = asyncio.create_task(session.submit("first"))
            await store.entered.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

            assert session.busy
            with pytest.raises(TurnInProgressError):
                await session.submit("second turn")

            store.gate.set()
            await session.drain()

            assert not session.busy
            assert [t.role for t in session.conversation.turns()] == [
                ChatRole.USER,
                ChatRole.ASSISTANT,
            ]
            assert len(await store.list_notes_by_project(project.id)) == 1

            await session.submit("second turn")

            messages = client.requests[-1].messages
            assert [(m.role.value, m.content) for m in messages] == [
                ("user", "first"),
                ("response", SAVED_REPLY),
                ("user", "second turn"),
            ]
        finally:
            await store.close()

    async def test_mode_switch_clears_conversation(self, orchestrator, fake_llm, project):
        session = ChatSession(project, orchestrator)
        await session.submit("hello")

        assert session.set_agent_mode("analyst") is True

        assert session.agent_mode == AgentMode.ANALYST
        assert len(session.conversation) == 0
        assert "The Analyst (Bisleshok)" in session.greeting

    async def test_same_mode_keeps_conversation(self, orchestrator, project):
        session = ChatSession(project, orchestrator)
        await session.submit("hello")

        assert session.set_agent_mode(AgentMode.LIBRARIAN) is False
        assert len(session.conversation) == 2

    async def test_unknown_mode_rejected(self, orchestrator, project):
        session = ChatSession(project, orchestrator)

        with pytest.raises(ValueError):
            session.set_agent_mode("oracle")

    async def test_agent_mode_forwarded(self, orchestrator, fake_llm, project):
        session = ChatSession(project, orchestrator, AgentMode.SCRIBE)

        await session.submit("draft an intro")

        assert "academic writing specialist" in fake_llm.requests[0].system_instruction


@pytest.mark.unit
@pytest.mark.asyncio
class TestSessionManager:
    """Test SessionManager."""

    async def test_one_session_per_project(self, orchestrator, project):
        sessions = SessionManager(orchestrator)

        first = sessions.get_or_create(project)
        second = sessions.get_or_create(project)

        assert first is second
        assert len(sessions) == 1
        assert first.agent_mode == AgentMode.LIBRARIAN

    async def test_default_mode(self, orchestrator, project):
        sessions = SessionManager(orchestrator, default_agent_mode="reviewer")

        assert sessions.get_or_create(project).agent_mode == AgentMode.REVIEWER

    async def test_drop_forgets_session_and_cache(self, orchestrator, project):
        sessions = SessionManager(orchestrator)
        await sessions.get_or_create(project).submit("hello")
        assert project.id in orchestrator.cache

        sessions.drop(project.id)

        assert sessions.get(project.id) is None
        assert project.id not in orchestrator.cache

    async def test_sessions_are_independent(self, orchestrator, store, project):
        other = await store.get_project(await store.create_project("Other"))
        sessions = SessionManager(orchestrator)

        await sessions.get_or_create(project).submit("hello")

        assert len(sessions.get_or_create(other).conversation) == 0

    async def test_drain_waits_for_turns(self, store, project):
        client = BlockingModelClient()
        sessions = SessionManager(TurnOrchestrator(model_client=client, store=store))
        session = sessions.get_or_create(project)

        first = asyncio.create_task(session.submit("first"))
        await wait_until_busy(session)
        drained = asyncio.create_task(sessions.drain())
        await asyncio.sleep(0)
        assert not drained.done()

        client.release.set()
        await drained

        assert not session.busy
        assert (await first).reply == "finally"
