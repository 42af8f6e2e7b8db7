"""Splitting release notes into category sections and putting them back."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from draft_release.config import Category

logger = logging.getLogger(__name__)

SectionData = dict[str, list[str]]
"""Category label -> ordered bullet lines."""

BULLET_PREFIX = "* "

_CATEGORY_HEADING_RE = re.compile(r"^###\s(.+)")
_HEADING_RE = re.compile(r"^#{1,6}\s")

_COLLAPSE_OPEN = "<details><summary>{count} changes</summary>"
_COLLAPSE_CLOSE = "</details>"


def _category_heading(line: str) -> str | None:
    """Return the heading text if *line* is a level-3 heading."""
    match = _CATEGORY_HEADING_RE.match(line)
    return match.group(1) if match else None


def _find_category(categories: list[Category], title: str) -> Category | None:
    for category in categories:
        if category.title == title:
            return category
    return None


def empty_sections(categories: list[Category]) -> SectionData:
    """Return a SectionData with an empty section for every category."""
    return {category.key: [] for category in categories}


def split_markdown_sections(markdown: str, categories: list[Category]) -> SectionData:
    """Split release notes markdown into bullet lists keyed by category label.

    A ``### <title>`` heading selects the category with that exact title.
    Bullets (``* ``) are collected into the selected category until any other
    non-blank line appears: an unknown heading, a ``##`` heading or prose
    all reset the selection, and bullets seen without a selection are dropped.
    """
    sections = empty_sections(categories)
    current_label: str | None = None

    for raw_line in markdown.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        title = _category_heading(line)
        if title is not None:
            category = _find_category(categories, title)
            current_label = category.key if category else None
        elif current_label is not None and line.startswith(BULLET_PREFIX):
            sections[current_label].append(line)
        else:
            current_label = None

    return sections


def collapse_sections(sections: SectionData, threshold: int) -> SectionData:
    """Wrap sections with more than *threshold* entries in a ``<details>`` block.

    The opening marker is prepended to the first entry and the closing marker
    appended to the last, so the section stays a plain list of lines.
    """
    if threshold <= 0:
        return sections

    result: SectionData = {}
    for label, items in sections.items():
        if len(items) <= threshold:
            result[label] = list(items)
            continue

        logger.debug("Collapsing section %s with %d entries", label, len(items))
        collapsed = list(items)
        opening = _COLLAPSE_OPEN.format(count=len(items))
        collapsed[0] = f"{opening}\n\n{collapsed[0]}"
        collapsed[-1] = f"{collapsed[-1]}\n\n{_COLLAPSE_CLOSE}"
        result[label] = collapsed

    return result


def rebuild_markdown(markdown: str, sections: SectionData, categories: list[Category]) -> str:
    """Replace the body of every known category in *markdown* with *sections*.

    Everything outside the category bodies (the ``## What's Changed`` header,
    ``## New Contributors``, the changelog link) is copied unchanged. A category
    whose heading repeats is written once, at its first heading; later
    headings are dropped together with their bullets.
    """
    output: list[str] = []
    written: set[str] = set()
    replacing = False
    pending_blank: list[str] = []

    for line in markdown.split("\n"):
        stripped = line.strip()

        if replacing:
            if not stripped:
                pending_blank.append(line)
                continue
            if stripped.startswith(BULLET_PREFIX):
                pending_blank.clear()
                continue
            # Prose or a heading closes the replaced section
            replacing = False
            output.extend(pending_blank)
            pending_blank.clear()

        if _HEADING_RE.match(stripped):
            title = _category_heading(stripped)
            category = _find_category(categories, title) if title is not None else None
            if category is not None:
                if category.key not in written:
                    written.add(category.key)
                    output.append(line)
                    output.extend(sections.get(category.key, []))
                replacing = True
                continue

        output.append(line)

    output.extend(pending_blank)
    return "\n".join(output)
