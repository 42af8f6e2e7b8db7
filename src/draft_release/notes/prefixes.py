"""Conventional commit prefix removal for release note entries."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from draft_release.notes.sections import SectionData

logger = logging.getLogger(__name__)

# https://www.conventionalcommits.org/
CONVENTIONAL_TYPES: tuple[str, ...] = (
    "fix",
    "feat",
    "chore",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "build",
    "ci",
    "revert",
)

# type(scope)!: with optional scope and breaking marker
CONVENTIONAL_PREFIX = rf"(?:{'|'.join(CONVENTIONAL_TYPES)})(?:\([^)]*\))?!?: "

_ENTRY_PREFIX_RE = re.compile(rf"^\* (?:{CONVENTIONAL_PREFIX})+", re.IGNORECASE)


def strip_conventional_prefix(entry: str) -> str:
    """Remove leading ``type(scope): `` prefixes from a bullet and capitalize what follows.

    Stacked prefixes (``revert: fix(api): ...``) are all removed.
    """
    match = _ENTRY_PREFIX_RE.match(entry)
    if not match:
        return entry

    rest = entry[match.end() :]
    return f"* {rest[:1].upper()}{rest[1:]}"


def remove_conventional_prefixes(sections: SectionData) -> SectionData:
    """Strip conventional commit prefixes from every entry of every section."""
    result: SectionData = {}
    for label, items in sections.items():
        cleaned = [strip_conventional_prefix(item) for item in items]
        changed = sum(1 for before, after in zip(items, cleaned, strict=True) if before != after)
        if changed:
            logger.debug("Removed %d conventional prefixes in section %s", changed, label)
        result[label] = cleaned
    return result
