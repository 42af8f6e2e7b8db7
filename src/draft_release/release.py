"""Release selection, next version computation and draft maintenance."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from draft_release.notes.generator import classify_bump
from draft_release.version import increment_version

if TYPE_CHECKING:
    from draft_release.config import Category, Inputs
    from draft_release.utils.actions import ActionContext
    from draft_release.utils.github import GitHubAPI

logger = logging.getLogger(__name__)

# Tag used when the repository has no usable release yet
INITIAL_RELEASE = "v0.0.0"


@dataclass
class ReleaseData:
    """Where the next release starts from."""

    latest_release: str
    """Tag of the latest published release on the branch."""

    next_release: str
    """Tag of the release being drafted."""

    branch: str | None = None
    """Branch the workflow runs on; None for tag or pull request refs."""

    releases: list[dict[str, Any]] = field(default_factory=list)
    """Raw release payloads, newest first."""

    def find_draft(self) -> dict[str, Any] | None:
        """Return the newest draft release targeting :attr:`branch`."""
        for release in self.releases:
            if release.get("draft") and release.get("target_commitish") == self.branch:
                return release
        return None


def _created_at(release: dict[str, Any]) -> datetime:
    raw = release.get("created_at") or "1970-01-01T00:00:00Z"
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


def bump_tag(tag: str, bump: str) -> str:
    """Increment *tag* by *bump*, keeping a leading ``v``.

    Returns:
        The new tag, or an empty string if *tag* is not a semantic version.
    """
    version = increment_version(tag, bump)
    if version is None:
        return ""
    return f"v{version}" if tag.startswith("v") else version


def get_release(client: GitHubAPI, context: ActionContext) -> ReleaseData:
    """Find the latest release for the current branch.

    The newest published release targeting the branch wins; when there is
    none the newest release of the repository is used. Non-branch refs and
    repositories without releases start from ``v0.0.0``. The next release is
    a provisional patch bump until the notes are classified.

    Raises:
        GitHubAPIError: If the releases cannot be listed.
    """
    branch = context.branch
    releases = sorted(
        client.list_releases(context.owner, context.repo), key=_created_at, reverse=True
    )
    logger.info("Found %d releases", len(releases))

    latest = INITIAL_RELEASE
    if branch is None:
        logger.info("Ref %s is not a branch, starting from %s", context.ref, latest)
    elif not releases:
        logger.info("No releases found")
    else:
        logger.info("Current branch: %s", branch)
        in_branch = next(
            (
                release
                for release in releases
                if not release.get("draft") and release.get("target_commitish") == branch
            ),
            None,
        )
        if in_branch is None:
            logger.info("No release found for branch %s", branch)
            in_branch = releases[0]
        latest = in_branch["tag_name"]

    logger.info("Latest release: %s", latest)
    return ReleaseData(
        latest_release=latest,
        next_release=bump_tag(latest, "patch"),
        branch=branch,
        releases=releases,
    )


def _title_for_label(categories: list[Category], label: str) -> str:
    if not label:
        return ""
    for category in categories:
        if label in category.labels:
            return category.title
    return ""


def get_version_increase(
    release_data: ReleaseData, inputs: Inputs, notes: str, categories: list[Category]
) -> str:
    """Compute the next release tag from the categories present in *notes*.

    Returns:
        The incremented tag, or an empty string if the latest release is
        not a semantic version.
    """
    major_title = _title_for_label(categories, inputs.major_label)
    minor_title = _title_for_label(categories, inputs.minor_label)
    bump = classify_bump(notes, major_title, minor_title)
    logger.info("Version increase: %s", bump)
    return bump_tag(release_data.latest_release, bump)


def create_or_update_release(
    client: GitHubAPI,
    context: ActionContext,
    release_data: ReleaseData,
    notes: str,
    publish: bool = False,
) -> dict[str, Any]:
    """Update the branch's draft release or create a new one.

    Raises:
        GitHubAPIError: If the API request fails.
    """
    draft = release_data.find_draft()
    tag = release_data.next_release

    if draft is not None:
        logger.info("Updating draft release %s (%s)", draft["id"], tag)
        return client.update_release(
            context.owner,
            context.repo,
            draft["id"],
            tag_name=tag,
            name=tag,
            body=notes,
            draft=not publish,
        )

    logger.info("Creating release %s on %s", tag, release_data.branch)
    return client.create_release(
        context.owner,
        context.repo,
        tag_name=tag,
        name=tag,
        body=notes,
        target_commitish=release_data.branch,
        draft=not publish,
    )
