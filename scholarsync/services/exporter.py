"""
Markdown export of a project.

Pure formatting: the caller supplies the project, its notes and its
citations.
"""

import re
from datetime import date

from scholarsync.models.research import Citation, Note, Project


def export_project_markdown(
    project: Project,
    notes: list[Note],
    citations: list[Citation],
    generated_on: date | None = None,
) -> str:
    """
    Render a project as a markdown document.

    Args:
        project: Project being exported
        notes: Its notes, drafts and summaries
        citations: Its citations
        generated_on: Date printed in the header (defaults to today)

    Returns:
        Markdown text
    """
    generated_on = generated_on or date.today()

    lines = [
        f"# Project: {project.title}",
        f"Generated on: {generated_on.isoformat()}",
        "",
        "## Notes & Drafts",
    ]
    for note in notes:
        lines.append(f"### {note.title} ({note.kind.value})")
        lines.append(note.content)
        lines.append("")

    lines.append("")
    lines.append("## Citations")
    for citation in citations:
        line = f"- {citation.title} by {citation.authors} ({citation.year})"
        if citation.url:
            line += f" [Link]({citation.url})"
        lines.append(line)

    return "\n".join(lines).rstrip() + "\n"


def export_filename(project: Project) -> str:
    """File name for a project export, e.g. ``Coral_Reefs_export.md``."""
    stem = re.sub(r"\s+", "_", project.title.strip())
    return f"{stem}_export.md"
