"""
GitHub REST API client for Tourwatch.

Lists the files changed by a pull request and manages the summary comment
on it. Every failure is raised as ApiError; nothing is retried, a failed
call fails the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator

import requests

from . import __version__
from .config import DEFAULT_PER_PAGE, DEFAULT_TIMEOUT, GITHUB_API_BASE
from .errors import ApiError, RateLimitError

logger = logging.getLogger(__name__)


@dataclass
class IssueComment:
    """Parsed issue/PR comment data."""
    id: int
    body: str
    html_url: str = ""


class GitHubClient:
    """GitHub REST API client with pagination and rate limit detection."""

    def __init__(
        self,
        token: str,
        api_url: str = GITHUB_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

        self.session.headers["Authorization"] = f"token {token}"
        self.session.headers["Accept"] = "application/vnd.github.v3+json"
        self.session.headers["User-Agent"] = f"tourwatch/{__version__}"

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> requests.Response:
        """Make a single API request, translating failures into ApiError."""
        url = f"{self.api_url}{endpoint}"
        logger.debug("%s %s params=%s", method, endpoint, params)

        try:
            response = self.session.request(
                method, url, params=params, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise ApiError(f"Request failed: {method} {endpoint}: {e}") from e

        if response.status_code == 403:
            remaining = response.headers.get("X-RateLimit-Remaining")
            if remaining == "0":
                reset_time = int(response.headers.get("X-RateLimit-Reset", 0))
                raise RateLimitError(reset_time)

        if response.status_code >= 400:
            raise ApiError(
                f"GitHub API error: {response.status_code} - {response.text}",
                response.status_code,
            )

        return response

    def _json(self, response: requests.Response, method: str, endpoint: str) -> Any:
        """Decode a JSON body; anything else (a proxy's HTML page) is an ApiError."""
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                f"Invalid JSON from {method} {endpoint}: {e}",
                response.status_code,
            ) from e

    def _paginate(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Iterate through paginated API results."""
        params = dict(params or {})
        params.setdefault("per_page", DEFAULT_PER_PAGE)
        page = 1

        while True:
            params["page"] = page
            response = self._request("GET", endpoint, params=params)
            items = self._json(response, "GET", endpoint)

            if not items:
                break

            yield from items

            if len(items) < params["per_page"]:
                break

            page += 1

    def get_pull_files(self, repo: str, number: int) -> list[str]:
        """
        Get the paths of files changed in a pull request.

        Args:
            repo: Full repository name (owner/repo)
            number: PR number

        Returns:
            File paths relative to the repository root
        """
        endpoint = f"/repos/{repo}/pulls/{number}/files"
        files = [item.get("filename", "") for item in self._paginate(endpoint)]
        logger.info("PR %s#%d changes %d file(s)", repo, number, len(files))
        return [path for path in files if path]

    def list_issue_comments(self, repo: str, number: int) -> list[IssueComment]:
        """List comments on an issue or pull request, oldest first."""
        endpoint = f"/repos/{repo}/issues/{number}/comments"
        return [self._parse_comment(item) for item in self._paginate(endpoint)]

    def create_comment(self, repo: str, number: int, body: str) -> IssueComment:
        endpoint = f"/repos/{repo}/issues/{number}/comments"
        response = self._request("POST", endpoint, json={"body": body})
        return self._parse_comment(self._json(response, "POST", endpoint))

    def update_comment(self, repo: str, comment_id: int, body: str) -> IssueComment:
        endpoint = f"/repos/{repo}/issues/comments/{comment_id}"
        response = self._request("PATCH", endpoint, json={"body": body})
        return self._parse_comment(self._json(response, "PATCH", endpoint))

    def _parse_comment(self, data: dict[str, Any]) -> IssueComment:
        """Parse raw comment data into an IssueComment object."""
        return IssueComment(
            id=data.get("id", 0),
            body=data.get("body") or "",
            html_url=data.get("html_url", ""),
        )
