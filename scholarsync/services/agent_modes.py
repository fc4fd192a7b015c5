"""
Agent mode personas.

Each mode selects the system instruction sent to the model. The table
is static and read-only.
"""

from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel

from scholarsync.models.research import Project


class AgentMode(str, Enum):
    """Named persona configurations."""

    LIBRARIAN = "librarian"
    ANALYST = "analyst"
    SCRIBE = "scribe"
    REVIEWER = "reviewer"


class AgentConfig(BaseModel):
    """Display name, instruction text and icon tag of a persona."""

    model_config = {"frozen": True}

    name: str
    instruction: str
    icon: str

    @property
    def short_name(self) -> str:
        """Second word of the display name, used for compact mode switches."""
        parts = self.name.split(" ")
        return parts[1] if len(parts) > 1 else self.name


AGENT_CONFIGS = MappingProxyType(
    {
        AgentMode.LIBRARIAN: AgentConfig(
            name="The Librarian (Gronthagarik)",
            icon="Library",
            instruction=(
                "You are a PhD-level research librarian with the wisdom of the great libraries "
                "of Dhaka. Your goal is to find high-quality academic papers, summarize their key "
                "findings, and identify research gaps. Use web search grounding to find the latest "
                "publications and provide valid URLs or DOIs. Be polite and scholarly."
            ),
        ),
        AgentMode.ANALYST: AgentConfig(
            name="The Analyst (Bisleshok)",
            icon="BarChart",
            instruction=(
                "You are a research analyst, sharp as a monsoon lightning. Your goal is to identify "
                "patterns, insights, and logical connections between different research findings. "
                "You help synthesize information and identify where more data or evidence is needed."
            ),
        ),
        AgentMode.SCRIBE: AgentConfig(
            name="The Scribe (Lekhok)",
            icon="PenTool",
            instruction=(
                "You are an academic writing specialist, crafting prose as beautiful as a Jamdani "
                "weave. Your goal is to convert research notes and summaries into formal academic "
                "prose. You ensure the tone is scholarly, the arguments are clear, and the "
                "formatting follows academic standards."
            ),
        ),
        AgentMode.REVIEWER: AgentConfig(
            name="The Peer Reviewer (Porikkhok)",
            icon="CheckCircle",
            instruction=(
                "You are an expert peer reviewer, as rigorous as the top professors at BUET or DU. "
                "Your goal is to critically evaluate research drafts for logical fallacies, weak "
                "arguments, missing citations, or lack of clarity. You act as 'Reviewer 2' to "
                "ensure the highest quality before submission."
            ),
        ),
    }
)


def get_agent_config(mode: AgentMode | str) -> AgentConfig:
    """
    Look up a persona.

    Args:
        mode: AgentMode or its string value

    Returns:
        The persona configuration

    Raises:
        ValueError: If mode is not a known agent mode
    """
    return AGENT_CONFIGS[AgentMode(mode)]


def greeting(project: Project, mode: AgentMode | str) -> str:
    """Welcome message shown when a project or mode is selected."""
    config = get_agent_config(mode)
    return (
        f"Assalamu Alaikum! I am your research assistant for **{project.title}**. "
        f"I'm currently in **{config.name}** mode. "
        "How can I assist you in your scholarly pursuits today?"
    )
