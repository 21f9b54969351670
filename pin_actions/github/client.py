"""
GitHub REST API client: the read-only calls needed to turn a tag into a
commit SHA.

Wraps a single httpx.Client, which is safe to share across the worker
threads of the resolver. Every non-2xx response is raised as a
GitHubAPIError; a 404 is raised as its NotFoundError subclass so callers
can treat "no such release/tag" as an ordinary branch.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from pin_actions import __version__

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
API_TIMEOUT: float = 30.0
TAGS_PER_PAGE: int = 100


class GitHubAPIError(Exception):
    """A GitHub API call failed for a reason other than a missing resource."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(GitHubAPIError):
    """The requested release, tag or ref does not exist (HTTP 404)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


@dataclass(frozen=True)
class Tag:
    """An entry from the repository tag listing."""
    name: str
    commit_sha: str  # commit the tag points at, as listed by the API


@dataclass(frozen=True)
class TagPage:
    tags: list[Tag]
    next_page: Optional[int]  # None on the last page


@dataclass(frozen=True)
class GitObject:
    """The object a git ref or annotated tag points at."""
    type: str  # "commit" or "tag"
    sha: str


class GitHubClient:
    """Authenticated, read-only access to the GitHub REST API."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = GITHUB_API_URL,
        timeout: float = API_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"pin-github-actions/{__version__}",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> httpx.Response:
        t0 = time.monotonic()
        try:
            response = self._http.get(path, params=params)
        except httpx.HTTPError as e:
            logger.error("GET %s failed: %s", path, e)
            raise GitHubAPIError(f"GET {path} failed: {e}") from e

        elapsed_ms = (time.monotonic() - t0) * 1000
        logger.debug("GET %s -> %d in %.0fms", path, response.status_code, elapsed_ms)

        if response.status_code == 404:
            raise NotFoundError(f"Not found: {path}")
        if response.is_error:
            raise GitHubAPIError(
                f"GET {path} returned HTTP {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )
        return response

    def get_latest_release(self, owner: str, repo: str) -> str:
        """Return the tag name of the latest published release."""
        data = self._get(f"/repos/{owner}/{repo}/releases/latest").json()
        return data.get("tag_name", "")

    def list_tags(
        self,
        owner: str,
        repo: str,
        page: int = 1,
        per_page: int = TAGS_PER_PAGE,
    ) -> TagPage:
        """Return one page of tags, newest first by GitHub's convention."""
        response = self._get(
            f"/repos/{owner}/{repo}/tags",
            params={"per_page": per_page, "page": page},
        )
        tags = [
            Tag(name=t.get("name", ""), commit_sha=(t.get("commit") or {}).get("sha", ""))
            for t in response.json()
        ]
        return TagPage(tags=tags, next_page=_next_page(response))

    def get_tag_ref(self, owner: str, repo: str, tag_name: str) -> GitObject:
        """Return the object `refs/tags/<tag_name>` points at."""
        data = self._get(f"/repos/{owner}/{repo}/git/ref/tags/{tag_name}").json()
        # A prefix match returns a list of refs instead of the exact ref
        if isinstance(data, list):
            raise NotFoundError(f"No exact tag ref: {tag_name}")
        return _git_object(data)

    def get_tag(self, owner: str, repo: str, sha: str) -> GitObject:
        """Dereference an annotated tag object to what it points at."""
        data = self._get(f"/repos/{owner}/{repo}/git/tags/{sha}").json()
        return _git_object(data)


def _git_object(data: dict[str, Any]) -> GitObject:
    obj = data.get("object") or {}
    return GitObject(type=obj.get("type", ""), sha=obj.get("sha", ""))


def _next_page(response: httpx.Response) -> Optional[int]:
    """Read the next page number from the Link header, if any."""
    next_link = response.links.get("next")
    if not next_link:
        return None
    page = httpx.URL(next_link["url"]).params.get("page")
    return int(page) if page and page.isdigit() else None


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    return data.get("message", "") if isinstance(data, dict) else ""
