"""Action inputs and release category configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = ".github/release.yml"

_TRUE_VALUES = frozenset({"true", "True", "TRUE"})
_FALSE_VALUES = frozenset({"false", "False", "FALSE"})


@dataclass(frozen=True)
class Category:
    """A release notes category from ``changelog.categories``."""

    title: str
    """Heading text used in the generated notes (without ``###``)."""

    labels: tuple[str, ...]
    """Pull request labels; the first one keys the category's section."""

    @property
    def key(self) -> str:
        """Label used to store this category's section content."""
        return self.labels[0]


@dataclass(frozen=True)
class Inputs:
    """Configuration for one run, read once and passed explicitly."""

    github_token: str = ""
    """Token used for the GitHub REST API."""

    major_label: str = ""
    """Label whose category marks a major release."""

    minor_label: str = ""
    """Label whose category marks a minor release."""

    header: str = ""
    """Template rendered above the notes."""

    footer: str = ""
    """Template rendered below the notes."""

    variables: tuple[str, ...] = field(default_factory=tuple)
    """Extra ``key=value`` template variables."""

    collapse_after: int = 0
    """Collapse sections with more entries than this (0 disables)."""

    publish: bool = False
    """Publish the release instead of keeping it as a draft."""

    config_path: str = DEFAULT_CONFIG_PATH
    """Path to the release configuration YAML."""

    dry_run: bool = False
    """Compute everything but do not create or update the release."""

    group_dependencies: bool = True
    """Merge automated dependency update entries."""

    remove_conventional_prefixes: bool = False
    """Strip ``type(scope):`` prefixes from entries."""


def _input_env_name(name: str) -> str:
    """Return the environment variable GitHub Actions uses for input *name*."""
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(name: str, default: str = "", env: Mapping[str, str] | None = None) -> str:
    """Read an action input, trimmed, falling back to *default* when unset or empty."""
    source = os.environ if env is None else env
    value = source.get(_input_env_name(name), "").strip()
    return value or default


def get_boolean_input(name: str, default: bool, env: Mapping[str, str] | None = None) -> bool:
    """Read a boolean action input (YAML 1.2 core schema spellings only).

    Raises:
        ValueError: If the value is neither a true nor a false spelling.
    """
    value = get_input(name, env=env)
    if not value:
        return default
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(
        f"Input does not meet YAML 1.2 Core Schema specification: {name}\n"
        "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )


def get_input_list(name: str, env: Mapping[str, str] | None = None) -> tuple[str, ...]:
    """Read a list input separated by newlines or commas, dropping empty items."""
    raw = get_input(name, env=env)
    items: list[str] = []
    for line in raw.splitlines():
        items.extend(item.strip() for item in line.split(","))
    return tuple(item for item in items if item)


def _get_int_input(name: str, default: int, env: Mapping[str, str] | None = None) -> int:
    value = get_input(name, env=env)
    if not value:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Input {name} must be an integer, got {value!r}") from exc


def load_inputs(env: Mapping[str, str] | None = None) -> Inputs:
    """Build :class:`Inputs` from the ``INPUT_*`` environment variables.

    Args:
        env: Environment mapping; defaults to ``os.environ``.

    Raises:
        ValueError: If a boolean or integer input is malformed.
    """
    source = os.environ if env is None else env
    token = get_input("github-token", env=source) or source.get("GITHUB_TOKEN", "")

    return Inputs(
        github_token=token,
        major_label=get_input("major-label", env=source),
        minor_label=get_input("minor-label", env=source),
        header=get_input("notes-header", env=source),
        footer=get_input("notes-footer", env=source),
        variables=get_input_list("variables", env=source),
        collapse_after=_get_int_input("collapse-after", 0, env=source),
        publish=get_boolean_input("publish", False, env=source),
        config_path=get_input("config-path", DEFAULT_CONFIG_PATH, env=source),
        dry_run=get_boolean_input("dry-run", False, env=source),
        group_dependencies=get_boolean_input("group-dependencies", True, env=source),
        remove_conventional_prefixes=get_boolean_input(
            "remove-conventional-prefixes", False, env=source
        ),
    )


def _parse_category(raw: Any, index: int) -> Category:
    if not isinstance(raw, dict):
        raise ValueError(f"changelog.categories[{index}] must be a mapping")

    labels = raw.get("labels")
    if isinstance(labels, str):
        labels = [labels]
    if not isinstance(labels, list) or not labels:
        raise ValueError(f"changelog.categories[{index}] needs at least one label")

    return Category(title=str(raw.get("title", "")), labels=tuple(str(label) for label in labels))


def parse_categories(text: str) -> list[Category]:
    """Parse categories from the text of a ``release.yml`` document.

    Raises:
        yaml.YAMLError: If the document is not valid YAML.
        ValueError: If ``changelog.categories`` is missing or malformed.
    """
    doc = yaml.safe_load(text)
    changelog = doc.get("changelog") if isinstance(doc, dict) else None
    categories = changelog.get("categories") if isinstance(changelog, dict) else None
    if not isinstance(categories, list):
        raise ValueError("Release configuration has no changelog.categories list")

    return [_parse_category(raw, index) for index, raw in enumerate(categories)]


def load_categories(config_path: str | Path) -> list[Category]:
    """Load release categories from the YAML file at *config_path*.

    Read and parse errors propagate to the caller: there is no sensible
    default category set.
    """
    path = Path(config_path)
    categories = parse_categories(path.read_text(encoding="utf-8"))
    logger.debug("Loaded %d categories from %s", len(categories), path)
    return categories
