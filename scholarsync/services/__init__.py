"""
Services for ScholarSync.

Core orchestration:
- TurnOrchestrator: one chat turn with tool calling

Supporting services:
- ConversationStore, ProjectContextBuilder, ToolRegistry, ProjectCache
- ChatSession, SessionManager
- Agent mode table and markdown export
"""

from scholarsync.services.agent_modes import AGENT_CONFIGS, AgentConfig, AgentMode
from scholarsync.services.context_builder import ProjectContextBuilder
from scholarsync.services.conversation_store import ConversationStore
from scholarsync.services.exporter import export_filename, export_project_markdown
from scholarsync.services.orchestrator import TurnOrchestrator
from scholarsync.services.project_cache import ProjectCache
from scholarsync.services.session import ChatSession, SessionManager
from scholarsync.services.tool_registry import ToolRegistry

__all__ = [
    "AGENT_CONFIGS",
    "AgentConfig",
    "AgentMode",
    "ChatSession",
    "ConversationStore",
    "ProjectCache",
    "ProjectContextBuilder",
    "SessionManager",
    "ToolRegistry",
    "TurnOrchestrator",
    "export_filename",
    "export_project_markdown",
]
