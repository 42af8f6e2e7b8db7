"""draft-release CLI — top-level command group."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import TextIO

import click
from rich.console import Console
from rich.markdown import Markdown

from draft_release import __version__
from draft_release.config import DEFAULT_CONFIG_PATH, Inputs, load_categories, load_inputs
from draft_release.notes.generator import generate_release_notes, render_release_notes
from draft_release.notes.templates import build_template_data
from draft_release.release import (
    INITIAL_RELEASE,
    create_or_update_release,
    get_release,
    get_version_increase,
)
from draft_release.utils.actions import annotate_error, detect_action_context, log_group, set_output
from draft_release.utils.github import GitHubAPI

logger = logging.getLogger(__name__)
console = Console()

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="draft-release")
def cli(*, verbose: bool) -> None:
    """draft-release — keep a draft GitHub release and its notes up to date."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=_LOG_FORMAT)


def _draft_release(*, dry_run: bool) -> None:
    inputs = load_inputs()
    if dry_run:
        inputs = dataclasses.replace(inputs, dry_run=True)

    context = detect_action_context()
    if not context.is_github_actions:
        raise click.ClickException("GITHUB_REPOSITORY must be set to owner/repo")

    with log_group("Context info"):
        logger.info("eventName: %s", context.event_name)
        logger.info("sha: %s", context.sha)
        logger.info("ref: %s", context.ref)

    client = GitHubAPI(inputs.github_token or None)
    categories = load_categories(inputs.config_path)

    release_data = get_release(client, context)
    if not release_data.next_release:
        raise click.ClickException(
            f"Latest release {release_data.latest_release} is not a semantic version"
        )

    notes = generate_release_notes(client, inputs, release_data, context, categories)
    next_release = get_version_increase(release_data, inputs, notes, categories)
    if next_release and next_release != release_data.next_release:
        logger.info("Next release: %s", next_release)
        release_data.next_release = next_release
        notes = generate_release_notes(client, inputs, release_data, context, categories)

    set_output("version", release_data.next_release)
    set_output("previous-version", release_data.latest_release)
    set_output("release-notes", notes)

    if inputs.dry_run:
        logger.info("Dry run: not creating or updating release %s", release_data.next_release)
        click.echo(notes)
        return

    release = create_or_update_release(
        client, context, release_data, notes, publish=inputs.publish
    )
    release_url = release.get("html_url", "")
    set_output("release-id", str(release.get("id", "")))
    set_output("release-url", release_url)
    console.print(f"[green]✓[/green] Release {release_data.next_release}: {release_url}")


@cli.command()
@click.option(
    "--dry-run",
    is_flag=True,
    help="Compute the release notes without creating or updating the release.",
)
def run(*, dry_run: bool) -> None:
    """Draft the next release from the ``INPUT_*`` and ``GITHUB_*`` environment.

    Intended to run as a GitHub Actions step.

    Example:
      draft-release run
      draft-release run --dry-run
    """
    try:
        _draft_release(dry_run=dry_run)
    except Exception as e:
        logger.error("Release drafting failed: %s", e)
        console.print(f"[red]✗[/red] {e}")
        annotate_error(str(e))
        raise SystemExit(1) from e


@cli.command()
@click.argument("notes_file", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--config-path",
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Release configuration with changelog.categories.",
)
@click.option(
    "--collapse-after",
    default=0,
    show_default=True,
    type=click.IntRange(min=0),
    help="Collapse sections with more entries than this (0 disables).",
)
@click.option(
    "--group-dependencies/--no-group-dependencies",
    default=True,
    show_default=True,
    help="Merge automated dependency update entries.",
)
@click.option(
    "--remove-prefixes",
    is_flag=True,
    help="Strip conventional commit prefixes from entries.",
)
@click.option("--header", default="", help="Header template.")
@click.option("--footer", default="", help="Footer template.")
@click.option(
    "--variable",
    "variables",
    multiple=True,
    metavar="KEY=VALUE",
    help="Extra template variable (repeatable).",
)
@click.option("--tag", default="v0.0.1", show_default=True, help="Tag of the next release.")
@click.option(
    "--previous-tag",
    default=INITIAL_RELEASE,
    show_default=True,
    help="Tag of the latest release.",
)
@click.option("--render", is_flag=True, help="Render the markdown in the terminal.")
def preview(
    notes_file: TextIO,
    config_path: str,
    collapse_after: int,
    header: str,
    footer: str,
    variables: tuple[str, ...],
    tag: str,
    previous_tag: str,
    *,
    group_dependencies: bool,
    remove_prefixes: bool,
    render: bool,
) -> None:
    """Transform existing release notes markdown locally.

    Reads NOTES_FILE (or stdin) and prints the notes as ``run`` would write
    them, without calling GitHub.

    Example:
      draft-release preview notes.md --collapse-after 5
      gh api repos/o/r/releases/latest --jq .body | draft-release preview --remove-prefixes
    """
    try:
        categories = load_categories(Path(config_path))
    except Exception as e:
        console.print(f"[red]✗[/red] Failed to load categories: {e}")
        raise click.Abort from e

    inputs = Inputs(
        header=header,
        footer=footer,
        variables=variables,
        collapse_after=collapse_after,
        config_path=config_path,
        group_dependencies=group_dependencies,
        remove_conventional_prefixes=remove_prefixes,
    )
    template_data = build_template_data(tag, previous_tag, variables)
    rendered = render_release_notes(notes_file.read(), categories, inputs, template_data)

    if render:
        console.print(Markdown(rendered.body))
    else:
        click.echo(rendered.body)


if __name__ == "__main__":
    cli()
