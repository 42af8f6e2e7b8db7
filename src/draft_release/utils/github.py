"""GitHub REST API client for releases and generated release notes."""

from __future__ import annotations

import logging
import os
from typing import Any

import requests

logger = logging.getLogger(__name__)

# GitHub API constants
GITHUB_API_BASE = "https://api.github.com"
_GITHUB_AUTH_ENV_KEY = "GITHUB_" + "TOKEN"
_PER_PAGE = 100


class GitHubAPIError(Exception):
    """Exception raised when GitHub API operations fail."""


class GitHubAPI:
    """Client for the release endpoints of the GitHub API.

    Handles authentication, pagination and error wrapping. Every request
    failure surfaces as :class:`GitHubAPIError`.
    """

    def __init__(self, token: str | None = None, api_base: str | None = None) -> None:
        """Initialize the GitHub API client.

        Args:
            token: GitHub token. If not provided, will try to read from the
                GITHUB_TOKEN environment variable.
            api_base: REST API root. Defaults to ``GITHUB_API_URL`` (set on
                GitHub Enterprise runners) or the public API.

        Raises:
            GitHubAPIError: If no token is available.
        """
        self._token = token or os.environ.get(_GITHUB_AUTH_ENV_KEY)
        if not self._token:
            raise GitHubAPIError(
                f"GitHub token required. Set {_GITHUB_AUTH_ENV_KEY} environment variable "
                "or pass token to constructor."
            )

        self._api_base = (api_base or os.environ.get("GITHUB_API_URL") or GITHUB_API_BASE).rstrip(
            "/"
        )
        self._session_headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _repo_url(self, owner: str, repo: str, path: str) -> str:
        return f"{self._api_base}/repos/{owner}/{repo}/{path}"

    def list_releases(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """List every release of a repository, drafts included.

        Follows the ``Link: rel="next"`` header until all pages are read.

        Raises:
            GitHubAPIError: If any page request fails.
        """
        url: str | None = self._repo_url(owner, repo, f"releases?per_page={_PER_PAGE}")
        releases: list[dict[str, Any]] = []

        while url:
            response = self._request("GET", url)
            try:
                page = response.json()
            except ValueError as exc:
                raise GitHubAPIError(f"GET request returned invalid JSON: {exc}") from exc
            releases.extend(page)
            url = response.links.get("next", {}).get("url")

        logger.debug("Fetched %d releases for %s/%s", len(releases), owner, repo)
        return releases

    def generate_release_notes(
        self,
        owner: str,
        repo: str,
        *,
        tag_name: str,
        previous_tag_name: str = "",
        target_commitish: str | None = None,
        configuration_file_path: str | None = None,
    ) -> dict[str, Any]:
        """Ask GitHub to generate release notes for *tag_name*.

        Args:
            owner: Repository owner.
            repo: Repository name.
            tag_name: Tag of the release being drafted. It does not need to exist.
            previous_tag_name: Starting point; omitted when empty so GitHub
                picks the previous release itself.
            target_commitish: Branch or commit the tag would point to.
            configuration_file_path: Path of the category configuration in
                the repository.

        Returns:
            GitHub API response with ``name`` and ``body`` keys.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        data: dict[str, Any] = {"tag_name": tag_name}
        if previous_tag_name:
            data["previous_tag_name"] = previous_tag_name
        if target_commitish:
            data["target_commitish"] = target_commitish
        if configuration_file_path:
            data["configuration_file_path"] = configuration_file_path

        result: dict[str, Any] = self._post(
            self._repo_url(owner, repo, "releases/generate-notes"), data
        )
        return result

    def create_release(
        self,
        owner: str,
        repo: str,
        *,
        tag_name: str,
        name: str,
        body: str,
        target_commitish: str | None = None,
        draft: bool = True,
    ) -> dict[str, Any]:
        """Create a release.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        data: dict[str, Any] = {
            "tag_name": tag_name,
            "name": name,
            "body": body,
            "draft": draft,
        }
        if target_commitish:
            data["target_commitish"] = target_commitish

        result: dict[str, Any] = self._post(self._repo_url(owner, repo, "releases"), data)
        return result

    def update_release(
        self,
        owner: str,
        repo: str,
        release_id: int,
        *,
        tag_name: str,
        name: str,
        body: str,
        draft: bool = True,
    ) -> dict[str, Any]:
        """Update an existing release in place.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        data: dict[str, Any] = {
            "tag_name": tag_name,
            "name": name,
            "body": body,
            "draft": draft,
        }
        result: dict[str, Any] = self._patch(
            self._repo_url(owner, repo, f"releases/{release_id}"), data
        )
        return result

    def _request(self, method: str, url: str, data: dict[str, Any] | None = None) -> Any:
        """Send a request and raise for HTTP errors.

        Raises:
            GitHubAPIError: If the request fails.
        """
        try:
            response = requests.request(
                method, url, json=data, headers=self._session_headers, timeout=30
            )
            response.raise_for_status()
        except Exception as exc:
            raise GitHubAPIError(f"{method} request failed: {exc}") from exc
        return response

    def _post(self, url: str, data: dict[str, Any]) -> Any:
        """Make a POST request to the GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        response = self._request("POST", url, data)
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubAPIError(f"POST request returned invalid JSON: {exc}") from exc

    def _patch(self, url: str, data: dict[str, Any]) -> Any:
        """Make a PATCH request to the GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        response = self._request("PATCH", url, data)
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubAPIError(f"PATCH request returned invalid JSON: {exc}") from exc
