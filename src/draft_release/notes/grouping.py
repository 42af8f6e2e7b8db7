"""Consolidation of automated dependency update entries.

Bots such as Renovate, Dependabot and pre-commit.ci open one pull request per
update, so a release can list the same dependency many times. Each section is
scanned against a small table of update rules; entries that resolve to the
same rule and identity are merged into one line carrying the newest version
and every pull request reference.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from draft_release.notes.prefixes import CONVENTIONAL_PREFIX
from draft_release.version import is_earlier_version, is_newer_version

if TYPE_CHECKING:
    from draft_release.notes.sections import SectionData

logger = logging.getLogger(__name__)

_REFERENCE_SEPARATOR = ", "
_TRAILING_NUMBER_RE = re.compile(r"(\d+)\D*$")

# Optional conventional commit prefix, matched case-insensitively
_LEAD = rf"(?i:{CONVENTIONAL_PREFIX})?"


def _bot(handle: str) -> str:
    """Pattern for a bot mention, with or without the ``[bot]`` suffix."""
    return rf"(?P<actor>@{re.escape(handle)}(?:\[bot\])?)"


@dataclass
class UpdateGroup:
    """Accumulated state for one dependency within one section."""

    rule: UpdateRule
    identity: str
    display_name: str
    prefix: str
    actor: str
    latest_version: str = ""
    initial_version: str = ""
    references: set[str] = field(default_factory=set)

    def sorted_references(self) -> list[str]:
        return sorted(self.references, key=_reference_sort_key)


@dataclass(frozen=True)
class UpdateRule:
    """One recognised shape of automated update entry."""

    name: str
    """Rule name, part of the group identity key."""

    pattern: re.Pattern[str]
    """Entry pattern with ``lead``, ``actor`` and ``ref`` groups (plus ``name``,
    ``latest`` and ``initial`` where the rule tracks them)."""

    format_entry: Callable[[UpdateGroup, str], str]
    """Render a merged group given its joined references."""

    fixed_identity: str = ""
    """Identity for rules without a dependency name."""

    tracks_initial_version: bool = False
    """Whether the rule carries a "from" version (range bumps)."""

    trusts_recency: bool = False
    """Treat the most recently seen version as newest when versions are incomparable."""

    def identity(self, match: re.Match[str]) -> str:
        if self.fixed_identity:
            return self.fixed_identity
        return match.group("name").strip().lower()

    def display_name(self, match: re.Match[str]) -> str:
        if self.fixed_identity:
            return self.fixed_identity
        return match.group("name").strip()

    def latest_version(self, match: re.Match[str]) -> str:
        if "latest" not in self.pattern.groupindex:
            return ""
        return match.group("latest").strip()

    def initial_version(self, match: re.Match[str]) -> str:
        if not self.tracks_initial_version:
            return ""
        return match.group("initial").strip()


UPDATE_RULES: tuple[UpdateRule, ...] = (
    UpdateRule(
        name="renovate-dependency",
        pattern=re.compile(
            rf"^\* (?P<lead>{_LEAD}[Uu]pdate )(?P<name>.*?) to (?P<latest>.*?) "
            rf"by {_bot('renovate')} in (?P<ref>.*)$"
        ),
        format_entry=lambda group, refs: (
            f"* {group.prefix}{group.display_name} to {group.latest_version} "
            f"by {group.actor} in {refs}"
        ),
        trusts_recency=True,
    ),
    UpdateRule(
        name="renovate-lockfile",
        pattern=re.compile(
            rf"^\* (?P<lead>{_LEAD}[Ll]ock file maintenance) "
            rf"by {_bot('renovate')} in (?P<ref>.*)$"
        ),
        format_entry=lambda group, refs: f"* {group.prefix} by {group.actor} in {refs}",
        fixed_identity="lock-file-maintenance",
        trusts_recency=True,
    ),
    UpdateRule(
        name="dependabot",
        pattern=re.compile(
            rf"^\* (?P<lead>{_LEAD}[Bb]ump )(?P<name>.*?) from (?P<initial>.*?) "
            rf"to (?P<latest>.*?) by {_bot('dependabot')} in (?P<ref>.*)$"
        ),
        format_entry=lambda group, refs: (
            f"* {group.prefix}{group.display_name} from {group.initial_version} "
            f"to {group.latest_version} by {group.actor} in {refs}"
        ),
        tracks_initial_version=True,
    ),
    UpdateRule(
        name="pre-commit-ci",
        pattern=re.compile(
            rf"^\* (?P<lead>{_LEAD}\[pre-commit\.ci\] pre-commit autoupdate) "
            rf"by {_bot('pre-commit-ci')} in (?P<ref>.*)$"
        ),
        format_entry=lambda group, refs: f"* {group.prefix} by {group.actor} in {refs}",
        fixed_identity="pre-commit",
    ),
)


def _reference_sort_key(reference: str) -> tuple[int, int, str]:
    """Order references by their trailing number (PR id), then text."""
    match = _TRAILING_NUMBER_RE.search(reference)
    if match:
        return (0, int(match.group(1)), reference)
    return (1, 0, reference)


def _split_references(raw: str) -> set[str]:
    return {ref.strip() for ref in raw.split(_REFERENCE_SEPARATOR) if ref.strip()}


def match_update(entry: str) -> tuple[UpdateRule, re.Match[str]] | None:
    """Return the first rule matching *entry*, with its match."""
    for rule in UPDATE_RULES:
        match = rule.pattern.match(entry)
        if match:
            return rule, match
    return None


def _merge(group: UpdateGroup, match: re.Match[str]) -> None:
    rule = group.rule
    group.references |= _split_references(match.group("ref"))

    if rule.tracks_initial_version:
        initial = rule.initial_version(match)
        if initial and (
            not group.initial_version or is_earlier_version(initial, group.initial_version)
        ):
            logger.debug(
                "[%s] %s: initial version %s -> %s",
                rule.name,
                group.display_name,
                group.initial_version,
                initial,
            )
            group.initial_version = initial

    latest = rule.latest_version(match)
    if (
        latest
        and group.latest_version
        and is_newer_version(latest, group.latest_version, rule.trusts_recency)
    ):
        logger.debug(
            "[%s] %s: latest version %s -> %s",
            rule.name,
            group.display_name,
            group.latest_version,
            latest,
        )
        group.latest_version = latest


def _group_section(items: list[str]) -> list[str]:
    groups: dict[str, UpdateGroup] = {}
    entry_keys: list[str | None] = []

    # First pass: collect update information per identity
    for item in items:
        found = match_update(item)
        if found is None:
            entry_keys.append(None)
            continue

        rule, match = found
        key = f"{rule.name}:{rule.identity(match)}"
        entry_keys.append(key)

        if key in groups:
            _merge(groups[key], match)
            continue

        groups[key] = UpdateGroup(
            rule=rule,
            identity=key,
            display_name=rule.display_name(match),
            prefix=match.group("lead"),
            actor=match.group("actor"),
            latest_version=rule.latest_version(match),
            initial_version=rule.initial_version(match),
            references=_split_references(match.group("ref")),
        )

    # Second pass: emit merged entries at their first position
    emitted: set[str] = set()
    result: list[str] = []
    for item, key in zip(items, entry_keys, strict=True):
        if key is None:
            result.append(item)
            continue
        if key in emitted:
            continue

        group = groups[key]
        refs = _REFERENCE_SEPARATOR.join(group.sorted_references())
        result.append(group.rule.format_entry(group, refs))
        emitted.add(key)

    return result


def group_dependency_updates(sections: SectionData) -> SectionData:
    """Merge automated dependency update entries within each section.

    Entries are merged only inside their own section. Non-matching entries
    keep their position; merged entries take the position of their first
    occurrence.
    """
    result: SectionData = {}
    for label, items in sections.items():
        grouped = _group_section(items) if items else []
        if len(grouped) != len(items):
            logger.debug("Section %s: %d entries grouped into %d", label, len(items), len(grouped))
        result[label] = grouped
    return result
