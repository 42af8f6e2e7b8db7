"""Release notes transformation pipeline."""

from draft_release.notes.generator import (
    RenderedNotes,
    classify_bump,
    generate_release_notes,
    render_release_notes,
)
from draft_release.notes.grouping import group_dependency_updates
from draft_release.notes.prefixes import remove_conventional_prefixes
from draft_release.notes.sections import (
    SectionData,
    collapse_sections,
    rebuild_markdown,
    split_markdown_sections,
)

__all__ = [
    "RenderedNotes",
    "SectionData",
    "classify_bump",
    "collapse_sections",
    "generate_release_notes",
    "group_dependency_updates",
    "rebuild_markdown",
    "remove_conventional_prefixes",
    "render_release_notes",
    "split_markdown_sections",
]
