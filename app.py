"""
ScholarSync FastAPI Application

A REST API server for the ScholarSync research assistant.
Provides endpoints for projects, notes, citations, chat turns and export.
"""

from contextlib import asynccontextmanager
from urllib.parse import quote

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import AliasChoices, BaseModel, Field

from scholarsync.config import Config
from scholarsync.core.factory import LLMFactory, StoreFactory
from scholarsync.core.llm.base import ModelClient
from scholarsync.core.store.base import ResearchStore
from scholarsync.models.research import Citation, Note, NoteKind, Project
from scholarsync.services.agent_modes import AGENT_CONFIGS, AgentMode
from scholarsync.services.context_builder import ProjectContextBuilder
from scholarsync.services.exporter import export_filename, export_project_markdown
from scholarsync.services.orchestrator import TurnOrchestrator
from scholarsync.services.project_cache import ProjectCache
from scholarsync.services.session import SessionManager
from scholarsync.utils.exceptions import StoreError, TurnInProgressError, ValidationError
from scholarsync.utils.logger import get_logger, setup_logging

# Global instances
store: ResearchStore | None = None
model_client: ModelClient | None = None
sessions: SessionManager | None = None
logger = get_logger(__name__)


# Pydantic models for API
class CreateProjectRequest(BaseModel):
    """Request model for creating a project."""

    title: str = Field(..., description="Project title")
    description: str = Field(default="", description="Optional description")


class CreatedResponse(BaseModel):
    """Id of a newly created row."""

    id: int


class CreateNoteRequest(BaseModel):
    """Request model for creating a note."""

    project_id: int
    title: str = ""
    content: str = ""
    kind: NoteKind = Field(default=NoteKind.NOTE, validation_alias=AliasChoices("kind", "type"))


class CreateCitationRequest(BaseModel):
    """Request model for creating a citation."""

    project_id: int
    title: str = ""
    authors: str = ""
    year: str = ""
    url: str | None = None
    doi: str | None = None
    abstract: str | None = None
    citation_count: int = Field(
        default=0, validation_alias=AliasChoices("citation_count", "citationCount")
    )


class ChatRequest(BaseModel):
    """Request model for submitting a chat turn."""

    message: str = Field(..., description="User message")
    agent_mode: AgentMode | None = Field(default=None, description="Switch persona first")


class ToolOutcomeResponse(BaseModel):
    """Outcome of one tool call."""

    name: str
    status: str
    anomaly: str | None = None
    record_id: int | None = None
    error: str | None = None


class ChatResponse(BaseModel):
    """Response model for a chat turn."""

    reply: str | None
    state: str | None
    outcomes: list[ToolOutcomeResponse] = Field(default_factory=list)
    refreshed: bool = False
    agent_mode: str


class ChatMessage(BaseModel):
    """Single conversation message."""

    role: str
    content: str
    is_error: bool = False


class ChatHistoryResponse(BaseModel):
    """Conversation of a project session."""

    project_id: int
    agent_mode: str
    greeting: str
    busy: bool
    messages: list[ChatMessage]


class AgentModeResponse(BaseModel):
    """Persona listing entry."""

    key: str
    short_name: str
    name: str
    icon: str
    instruction: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    store_initialized: bool
    model_client: str


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global store, model_client, sessions

    # Load configuration from environment or use defaults
    config = Config.from_env()

    setup_logging(config.logging)

    logger.info("Starting ScholarSync server")
    logger.info(
        f"Configuration: LLM={config.llm.provider}/{config.llm.model}, "
        f"DB={config.database.path}, grounding={config.llm.search_grounding}"
    )

    logger.info("Creating research store")
    store = StoreFactory.create(config.database)
    await store.initialize()

    logger.info("Creating model client")
    model_client = LLMFactory.create(config.llm)

    orchestrator = TurnOrchestrator(
        model_client=model_client,
        store=store,
        cache=ProjectCache(store),
        context_builder=ProjectContextBuilder(
            note_preview_chars=config.context.note_preview_chars,
            abstract_preview_chars=config.context.abstract_preview_chars,
            max_items=config.context.max_items,
        ),
        search_grounding=config.llm.search_grounding,
    )
    sessions = SessionManager(orchestrator, default_agent_mode=config.default_agent_mode)
    logger.info("ScholarSync ready")

    yield

    # Cleanup
    logger.info("Shutting down ScholarSync server")
    await sessions.drain()
    await model_client.close()
    await store.close()
    store = model_client = sessions = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="ScholarSync API",
    description="Research assistant with persona-driven, tool-calling chat",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_ready() -> tuple[ResearchStore, SessionManager]:
    if store is None or sessions is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return store, sessions


async def _require_project(project_id: int) -> Project:
    research_store, _ = _require_ready()
    project = await research_store.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy" if store else "initializing",
        store_initialized=store is not None,
        model_client=type(model_client).__name__ if model_client else "none",
    )


@app.get("/api/agent-modes", response_model=list[AgentModeResponse])
async def list_agent_modes():
    """List the personas a chat session can use."""
    return [
        AgentModeResponse(
            key=mode.value,
            short_name=config.short_name,
            name=config.name,
            icon=config.icon,
            instruction=config.instruction,
        )
        for mode, config in AGENT_CONFIGS.items()
    ]


# Project endpoints
@app.get("/api/projects", response_model=list[Project])
async def list_projects():
    """List projects, newest first."""
    research_store, _ = _require_ready()
    try:
        return await research_store.list_projects()
    except StoreError as e:
        logger.error(f"Error listing projects: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.post("/api/projects", response_model=CreatedResponse)
async def create_project(request: CreateProjectRequest):
    """Create a project. The title must not be blank."""
    research_store, _ = _require_ready()
    try:
        project_id = await research_store.create_project(request.title, request.description)
        return CreatedResponse(id=project_id)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message) from e
    except StoreError as e:
        logger.error(f"Error creating project: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.delete("/api/projects/{project_id}")
async def delete_project(project_id: int):
    """
    Delete a project with all of its notes and citations.

    Confirmation is the client's job. Deleting an unknown id succeeds.
    """
    research_store, session_manager = _require_ready()
    session = session_manager.get(project_id)
    if session is not None and session.busy:
        raise HTTPException(status_code=409, detail="A chat turn is in progress for this project")
    try:
        await research_store.delete_project(project_id)
    except StoreError as e:
        logger.error(f"Error deleting project: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    session_manager.drop(project_id)
    return {"success": True}


# Note endpoints
@app.get("/api/projects/{project_id}/notes", response_model=list[Note])
async def list_notes(project_id: int):
    """List a project's notes, newest first."""
    research_store, _ = _require_ready()
    try:
        return await research_store.list_notes_by_project(project_id)
    except StoreError as e:
        logger.error(f"Error listing notes: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.post("/api/notes", response_model=CreatedResponse)
async def create_note(request: CreateNoteRequest):
    """Create a note in a project."""
    research_store, session_manager = _require_ready()
    await _require_project(request.project_id)
    try:
        note_id = await research_store.create_note(
            request.project_id, request.title, request.content, request.kind
        )
    except StoreError as e:
        logger.error(f"Error creating note: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    session_manager.orchestrator.cache.invalidate(request.project_id)
    return CreatedResponse(id=note_id)


@app.delete("/api/notes/{note_id}")
async def delete_note(note_id: int):
    """Delete a note. Deleting an unknown id succeeds."""
    research_store, session_manager = _require_ready()
    try:
        await research_store.delete_note(note_id)
    except StoreError as e:
        logger.error(f"Error deleting note: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    session_manager.orchestrator.cache.clear()
    return {"success": True}


# Citation endpoints
@app.get("/api/projects/{project_id}/citations", response_model=list[Citation])
async def list_citations(project_id: int):
    """List a project's citations, newest first."""
    research_store, _ = _require_ready()
    try:
        return await research_store.list_citations_by_project(project_id)
    except StoreError as e:
        logger.error(f"Error listing citations: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.post("/api/citations", response_model=CreatedResponse)
async def create_citation(request: CreateCitationRequest):
    """Create a citation in a project."""
    research_store, session_manager = _require_ready()
    await _require_project(request.project_id)
    try:
        citation_id = await research_store.create_citation(
            project_id=request.project_id,
            title=request.title,
            authors=request.authors,
            year=request.year,
            url=request.url,
            doi=request.doi,
            abstract=request.abstract,
            citation_count=request.citation_count,
        )
    except StoreError as e:
        logger.error(f"Error creating citation: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    session_manager.orchestrator.cache.invalidate(request.project_id)
    return CreatedResponse(id=citation_id)


@app.delete("/api/citations/{citation_id}")
async def delete_citation(citation_id: int):
    """Delete a citation. Deleting an unknown id succeeds."""
    research_store, session_manager = _require_ready()
    try:
        await research_store.delete_citation(citation_id)
    except StoreError as e:
        logger.error(f"Error deleting citation: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    session_manager.orchestrator.cache.clear()
    return {"success": True}


# Chat endpoints
@app.get("/api/projects/{project_id}/chat", response_model=ChatHistoryResponse)
async def get_chat(project_id: int):
    """Return the project's conversation and the current persona greeting."""
    project = await _require_project(project_id)
    _, session_manager = _require_ready()
    session = session_manager.get_or_create(project)
    return ChatHistoryResponse(
        project_id=project.id,
        agent_mode=session.agent_mode.value,
        greeting=session.greeting,
        busy=session.busy,
        messages=[
            ChatMessage(role=turn.role.value, content=turn.content, is_error=turn.is_error)
            for turn in session.conversation
        ],
    )


@app.post("/api/projects/{project_id}/chat", response_model=ChatResponse)
async def submit_chat(project_id: int, request: ChatRequest):
    """
    Submit a chat turn.

    The model may save notes and citations to the project through tool
    calls; the outcome of each call is returned with the reply. A blank
    message is a no-op and returns a null reply; it also leaves the agent
    mode and the conversation untouched.
    """
    project = await _require_project(project_id)
    _, session_manager = _require_ready()
    session = session_manager.get_or_create(project)

    try:
        if request.agent_mode is not None and request.message.strip():
            session.set_agent_mode(request.agent_mode)
        result = await session.submit(request.message)
    except TurnInProgressError as e:
        raise HTTPException(status_code=409, detail=e.message) from e

    if result is None:
        return ChatResponse(reply=None, state=None, agent_mode=session.agent_mode.value)

    return ChatResponse(
        reply=result.reply,
        state=result.state.value,
        outcomes=[
            ToolOutcomeResponse(
                name=outcome.name,
                status=outcome.status.value,
                anomaly=outcome.anomaly.value if outcome.anomaly else None,
                record_id=outcome.record_id,
                error=outcome.error,
            )
            for outcome in result.outcomes
        ],
        refreshed=result.refreshed,
        agent_mode=session.agent_mode.value,
    )


@app.delete("/api/projects/{project_id}/chat")
async def reset_chat(project_id: int):
    """Start the project's conversation over."""
    _, session_manager = _require_ready()
    session = session_manager.get(project_id)
    if session is not None:
        try:
            session.reset()
        except TurnInProgressError as e:
            raise HTTPException(status_code=409, detail=e.message) from e
    return {"success": True}


# Export endpoint
@app.get("/api/projects/{project_id}/export")
async def export_project(project_id: int):
    """Download the project's notes and citations as markdown."""
    project = await _require_project(project_id)
    research_store, _ = _require_ready()
    try:
        notes = await research_store.list_notes_by_project(project_id)
        citations = await research_store.list_citations_by_project(project_id)
    except StoreError as e:
        logger.error(f"Error exporting project: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e

    return Response(
        content=export_project_markdown(project, notes, citations),
        media_type="text/markdown",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(export_filename(project))}"
        },
    )


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "ScholarSync API",
        "version": "1.0.0",
        "description": "Research assistant with persona-driven, tool-calling chat",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
