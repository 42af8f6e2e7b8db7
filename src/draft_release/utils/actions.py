"""GitHub Actions runtime helpers: workflow context, step outputs and log groups."""

from __future__ import annotations

import logging
import os
import sys
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_BRANCH_REF_PREFIX = "refs/heads/"

# Expected number of parts when splitting "owner/repo"
_OWNER_REPO_PARTS = 2


@dataclass(frozen=True)
class ActionContext:
    """Workflow run context taken from the ``GITHUB_*`` environment."""

    owner: str
    """Repository owner (org or user)."""

    repo: str
    """Repository name."""

    ref: str = ""
    """Full git ref that triggered the run (e.g. ``refs/heads/main``)."""

    sha: str = ""
    """Commit SHA that triggered the run."""

    event_name: str = ""
    """Name of the triggering event."""

    @property
    def branch(self) -> str | None:
        """Branch name when the run was triggered from a branch ref."""
        if self.ref.startswith(_BRANCH_REF_PREFIX):
            return self.ref[len(_BRANCH_REF_PREFIX) :]
        return None

    @property
    def is_github_actions(self) -> bool:
        return bool(self.owner and self.repo)


def parse_repository(full_name: str) -> tuple[str, str]:
    """Split ``owner/repo``.

    Raises:
        ValueError: If *full_name* is not of the form ``owner/repo``.
    """
    parts = full_name.strip().split("/")
    if len(parts) != _OWNER_REPO_PARTS or not all(parts):
        raise ValueError(f"Expected repository as owner/repo, got {full_name!r}")
    return parts[0], parts[1]


def detect_action_context(env: Mapping[str, str] | None = None) -> ActionContext:
    """Read the workflow context from environment variables.

    Outside of GitHub Actions the owner and repo are empty.
    """
    source = os.environ if env is None else env
    repository = source.get("GITHUB_REPOSITORY", "")
    try:
        owner, repo = parse_repository(repository)
    except ValueError:
        owner, repo = "", ""

    return ActionContext(
        owner=owner,
        repo=repo,
        ref=source.get("GITHUB_REF", ""),
        sha=source.get("GITHUB_SHA", ""),
        event_name=source.get("GITHUB_EVENT_NAME", ""),
    )


def set_output(name: str, value: str) -> None:
    """Write a step output to ``$GITHUB_OUTPUT`` using the multiline heredoc form."""
    github_output = os.environ.get("GITHUB_OUTPUT")
    if not github_output:
        logger.debug("Output %s=%s", name, value)
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with Path(github_output).open("a", encoding="utf-8") as handle:
        handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def _issue_command(command: str, message: str = "") -> None:
    if os.environ.get("GITHUB_ACTIONS") == "true":
        sys.stdout.write(f"::{command}::{message}\n")
        sys.stdout.flush()


def annotate_error(message: str) -> None:
    """Emit an error annotation for the workflow run."""
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    _issue_command("error", escaped)


@contextmanager
def log_group(title: str) -> Iterator[None]:
    """Fold the log lines emitted inside the block under *title*."""
    _issue_command("group", title)
    try:
        yield
    finally:
        _issue_command("endgroup")
