"""GitHub REST API integration (public repositories of a user).

Docs: https://docs.github.com/en/rest/repos/repos#list-repositories-for-a-user
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from mothership.config import settings

logger = logging.getLogger(__name__)


@dataclass
class GitHubRepos:
    """Outcome of a repo lookup. `found` is False for non-2xx answers."""

    username: str
    found: bool
    repos: list[dict[str, Any]] = field(default_factory=list)


class GitHubClient:
    """Async client for the GitHub users/repos endpoint."""

    def __init__(self, base_url: str | None = None, timeout: int | None = None):
        self.base_url = (base_url or settings.github_api_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds

    async def list_repos(self, username: str) -> GitHubRepos:
        """Public repos of `username`, most-starred first.

        Network failures propagate as httpx.HTTPError so callers can tell
        "not found" apart from "could not ask".
        """
        url = f"{self.base_url}/users/{username}/repos"
        params = {"per_page": "100", "sort": "stars"}
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "Mothership-Verification",
        }

        start = time.monotonic()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(url, params=params, headers=headers)
        elapsed_ms = int((time.monotonic() - start) * 1000)

        if response.status_code != 200:
            logger.warning("GitHub | user=%s | status=%d | %dms", username, response.status_code, elapsed_ms)
            return GitHubRepos(username=username, found=False)

        repos = response.json()
        if not isinstance(repos, list):
            repos = []
        logger.info("GitHub OK | user=%s | repos=%d | %dms", username, len(repos), elapsed_ms)
        return GitHubRepos(username=username, found=True, repos=repos)
