"""
Shared test fixtures.

Model clients are replaced by FakeModelClient, which replays canned
ModelResponses and records every request it receives. Stores are real
SQLite databases under tmp_path; GatedNoteStore and BlockingModelClient
hold a turn at a chosen point so cancellation can be exercised.
"""

import asyncio
from collections.abc import AsyncGenerator

import pytest

from scholarsync.core.llm.base import ModelClient
from scholarsync.core.store.sqlite_store import SQLiteResearchStore
from scholarsync.models import ModelRequest, ModelResponse, Project


class FakeModelClient(ModelClient):
    """Model client double returning scripted responses."""

    def __init__(
        self,
        responses: list[ModelResponse] | None = None,
        error: Exception | None = None,
    ):
        self.responses = list(responses or [])
        self.error = error
        self.requests: list[ModelRequest] = []
        self.closed = False

    async def generate(self, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return ModelResponse(text="ok")

    async def close(self):
        self.closed = True


class BlockingModelClient(FakeModelClient):
    """Model client that holds every turn until released."""

    def __init__(self, responses: list[ModelResponse] | None = None):
        super().__init__(responses=responses)
        self.release = asyncio.Event()

    async def generate(self, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        await self.release.wait()
        if self.responses:
            return self.responses.pop(0)
        return ModelResponse(text="finally")


class GatedNoteStore(SQLiteResearchStore):
    """Store whose note writes wait until the gate opens."""

    def __init__(self, db_path: str):
        super().__init__(db_path=db_path)
        self.entered = asyncio.Event()
        self.gate = asyncio.Event()

    async def create_note(self, *args, **kwargs) -> int:
        self.entered.set()
        await self.gate.wait()
        return await super().create_note(*args, **kwargs)


@pytest.fixture
def fake_llm() -> FakeModelClient:
    """Model client that answers "ok" until scripted otherwise."""
    return FakeModelClient()


@pytest.fixture
async def store(tmp_path) -> AsyncGenerator[SQLiteResearchStore, None]:
    """Initialized SQLite research store in a temporary directory."""
    research_store = SQLiteResearchStore(db_path=str(tmp_path / "research.db"))
    await research_store.initialize()
    yield research_store
    await research_store.close()


@pytest.fixture
async def project(store) -> Project:
    """A saved project with no notes or citations."""
    project_id = await store.create_project("Coral Reefs", "Reef health under warming oceans")
    return await store.get_project(project_id)
