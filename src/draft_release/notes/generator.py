"""Release notes generation: fetch, transform and template.

The pipeline runs in a fixed order::

    fetch -> split -> [strip prefixes] -> [group dependencies] -> [collapse]
          -> rebuild -> [header] -> [footer]

Bracketed stages run only when enabled in :class:`~draft_release.config.Inputs`;
a skipped stage passes its sections through unchanged.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from draft_release.config import load_categories
from draft_release.notes.grouping import group_dependency_updates
from draft_release.notes.prefixes import remove_conventional_prefixes
from draft_release.notes.sections import (
    SectionData,
    collapse_sections,
    rebuild_markdown,
    split_markdown_sections,
)
from draft_release.notes.templates import TemplateError, build_template_data, render_template
from draft_release.utils.actions import log_group, set_output
from draft_release.utils.github import GitHubAPIError
from draft_release.version import has_prior_release

if TYPE_CHECKING:
    from collections.abc import Mapping

    from draft_release.config import Category, Inputs
    from draft_release.release import ReleaseData
    from draft_release.utils.actions import ActionContext
    from draft_release.utils.github import GitHubAPI

logger = logging.getLogger(__name__)


@dataclass
class RenderedNotes:
    """Result of transforming one release notes body."""

    body: str
    """Final markdown, header and footer included."""

    header: str = ""
    """Rendered header, empty when not configured."""

    footer: str = ""
    """Rendered footer, empty when not configured."""

    sections: SectionData = field(default_factory=dict)
    """Processed sections before collapsing."""


def classify_bump(notes: str, major_title: str, minor_title: str) -> str:
    """Return ``major``, ``minor`` or ``patch`` from the category headings in *notes*.

    A ``### <major_title>`` heading wins over ``### <minor_title>``; empty
    titles never match.
    """
    if major_title and f"### {major_title}" in notes:
        return "major"
    if minor_title and f"### {minor_title}" in notes:
        return "minor"
    return "patch"


def _render_optional(name: str, template: str, data: Mapping[str, str]) -> str:
    if not template:
        return ""
    try:
        return render_template(template, data)
    except TemplateError as exc:
        logger.error("Error while rendering the release %s: %s", name, exc)
        return ""


def render_release_notes(
    body: str,
    categories: list[Category],
    inputs: Inputs,
    template_data: Mapping[str, str],
) -> RenderedNotes:
    """Transform a generated notes *body* according to *inputs*."""
    sections = split_markdown_sections(body, categories)

    if inputs.remove_conventional_prefixes:
        sections = remove_conventional_prefixes(sections)

    if inputs.group_dependencies:
        with log_group("Grouping dependency updates"):
            sections = group_dependency_updates(sections)
            logger.debug("Grouped sections: %s", json.dumps(sections, ensure_ascii=False))

    collapsed = collapse_sections(sections, inputs.collapse_after)
    result = rebuild_markdown(body, collapsed, categories)

    header = _render_optional("header", inputs.header, template_data)
    if header:
        result = f"{header}\n\n{result}"

    footer = _render_optional("footer", inputs.footer, template_data)
    if footer:
        result = f"{result}\n\n{footer}"

    return RenderedNotes(body=result, header=header, footer=footer, sections=sections)


def fetch_base_notes(
    client: GitHubAPI, context: ActionContext, release_data: ReleaseData, config_path: str
) -> str:
    """Ask GitHub to generate the notes between the latest and next release."""
    previous_tag = (
        release_data.latest_release if has_prior_release(release_data.latest_release) else ""
    )
    logger.info(
        "Generating notes for %s (previous: %s)",
        release_data.next_release,
        previous_tag or "none",
    )
    response = client.generate_release_notes(
        context.owner,
        context.repo,
        tag_name=release_data.next_release,
        previous_tag_name=previous_tag,
        target_commitish=release_data.branch,
        configuration_file_path=config_path,
    )
    return str(response.get("body") or "")


def generate_release_notes(
    client: GitHubAPI,
    inputs: Inputs,
    release_data: ReleaseData,
    context: ActionContext,
    categories: list[Category] | None = None,
) -> str:
    """Fetch, transform and template the release notes for *release_data*.

    Sets the ``release-header``, ``release-footer`` and ``release-sections``
    step outputs.

    Returns:
        The final notes, or an empty string if GitHub could not generate them.

    Raises:
        OSError, yaml.YAMLError, ValueError: If the category configuration
            cannot be loaded.
    """
    if categories is None:
        categories = load_categories(inputs.config_path)

    try:
        body = fetch_base_notes(client, context, release_data, inputs.config_path)
    except GitHubAPIError as exc:
        logger.error("Error while generating release notes: %s", exc)
        return ""

    template_data = build_template_data(
        release_data.next_release, release_data.latest_release, inputs.variables
    )
    rendered = render_release_notes(body, categories, inputs, template_data)

    if inputs.header:
        set_output("release-header", rendered.header.strip())
    if inputs.footer:
        set_output("release-footer", rendered.footer.strip())
    set_output("release-sections", json.dumps(rendered.sections, ensure_ascii=False))

    return rendered.body
