"""
Project context block primed into every model turn.
"""

from scholarsync.models.research import Citation, Note, Project

NONE_YET = "- None yet."


def _truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text


class ProjectContextBuilder:
    """
    Summarise a project's citations and notes as plain text.

    Every citation contributes title, year, authors and a truncated
    abstract; every note contributes title, kind and a content prefix.
    Empty sections are rendered with an explicit "None yet." marker so a
    built context is never an empty string.
    """

    def __init__(
        self,
        note_preview_chars: int = 200,
        abstract_preview_chars: int = 500,
        max_items: int = 50,
    ):
        """
        Args:
            note_preview_chars: Characters of note content kept
            abstract_preview_chars: Characters of abstract kept
            max_items: Entries rendered per section before summarising the rest
        """
        self.note_preview_chars = note_preview_chars
        self.abstract_preview_chars = abstract_preview_chars
        self.max_items = max_items

    def build(self, project: Project, notes: list[Note], citations: list[Citation]) -> str:
        lines = [f"Current Project: {project.title}"]
        if project.description:
            lines.append(f"Description: {project.description}")

        lines.append("Saved Citations:")
        lines.extend(self._section(citations, self._citation_line))

        lines.append("")
        lines.append("Saved Notes:")
        lines.extend(self._section(notes, self._note_line))

        return "\n".join(lines)

    def _section(self, items: list, render) -> list[str]:
        if not items:
            return [NONE_YET]
        lines = [render(item) for item in items[: self.max_items]]
        if len(items) > self.max_items:
            lines.append(f"- ...and {len(items) - self.max_items} more")
        return lines

    def _citation_line(self, citation: Citation) -> str:
        abstract = citation.abstract.strip() if citation.abstract else ""
        abstract = _truncate(abstract, self.abstract_preview_chars) if abstract else "N/A"
        return (
            f"- {citation.title} ({citation.year or 'n.d.'}) by {citation.authors}. "
            f"Abstract: {abstract}"
        )

    def _note_line(self, note: Note) -> str:
        return f"- {note.title} ({note.kind.value}): {note.content_preview(self.note_preview_chars)}"
