"""
Tag helpers shared by the resolution strategies: turning a tag into a
commit SHA and picking tags out of the paginated tag listing.
"""

import logging
from typing import Iterator, Optional

from pin_actions.github.client import GitHubClient, NotFoundError, Tag
from pin_actions.versions import is_moving_major_tag, parse_version

logger = logging.getLogger(__name__)

# Annotated tags may point at other tags; give up after this many hops
MAX_TAG_DEPTH = 5


def resolve_tag_to_commit(client: GitHubClient, owner: str, repo: str, tag_name: str) -> str:
    """
    Resolve a tag name to the commit SHA it ultimately points at.

    Annotated tags are dereferenced until a commit is reached.

    Raises:
        NotFoundError: If the tag doesn't exist or never reaches a commit.
        GitHubAPIError: On any other API failure.
    """
    obj = client.get_tag_ref(owner, repo, tag_name)
    depth = 0
    while obj.type == "tag" and obj.sha and depth < MAX_TAG_DEPTH:
        logger.debug("Dereferencing annotated tag %s (%s)", tag_name, obj.sha[:12])
        obj = client.get_tag(owner, repo, obj.sha)
        depth += 1

    if obj.type != "commit" or not obj.sha:
        raise NotFoundError(f"no commit found for tag {tag_name}")
    return obj.sha


def iter_tag_pages(client: GitHubClient, owner: str, repo: str) -> Iterator[list[Tag]]:
    """Yield the repository's tags one page at a time, following pagination."""
    page: Optional[int] = 1
    while page is not None:
        result = client.list_tags(owner, repo, page=page)
        logger.debug("Tags page %d for %s/%s: %d tag(s)", page, owner, repo, len(result.tags))
        yield result.tags
        page = result.next_page


def select_latest_tag(client: GitHubClient, owner: str, repo: str) -> Optional[str]:
    """
    Pick the highest version tag across all pages.

    If no tag parses as a version, fall back to the first tag listed
    (GitHub lists newest first). Returns None when there are no tags.
    """
    best_version = None
    best_name = None
    first_name = None
    for tags in iter_tag_pages(client, owner, repo):
        for tag in tags:
            if first_name is None:
                first_name = tag.name
            version = parse_version(tag.name)
            if version is None:
                continue
            if best_version is None or version > best_version:
                best_version = version
                best_name = tag.name
    return best_name or first_name


def select_same_major_tag(client: GitHubClient, owner: str, repo: str, major: int) -> Optional[str]:
    """
    Pick the highest version tag whose major matches.

    Stops paginating at the first page without a match once an earlier
    page had one, relying on tags being listed newest first.
    """
    best_version = None
    best_name = None
    matched_before = False
    for tags in iter_tag_pages(client, owner, repo):
        matched_here = False
        for tag in tags:
            version = parse_version(tag.name)
            if version is None or version.major != major:
                continue
            matched_here = True
            if best_version is None or version > best_version:
                best_version = version
                best_name = tag.name
        if matched_before and not matched_here:
            logger.debug("No v%d tags on this page after earlier matches, stopping", major)
            break
        matched_before = matched_before or matched_here
    return best_name


def find_full_tag_for_commit(
    client: GitHubClient,
    owner: str,
    repo: str,
    major: int,
    commit_sha: str,
) -> Optional[str]:
    """
    Find a full version tag (e.g. v4.2.2) of the given major at commit_sha.

    The first pass compares the commit SHA listed with each tag, which
    costs nothing extra. Only candidates that didn't match are then
    dereferenced one by one. Moving major tags themselves never count.
    """
    candidates = []
    for tags in iter_tag_pages(client, owner, repo):
        for tag in tags:
            if is_moving_major_tag(tag.name):
                continue
            version = parse_version(tag.name)
            if version is None or version.major != major:
                continue
            if tag.commit_sha and tag.commit_sha == commit_sha:
                return tag.name
            candidates.append(tag.name)

    for name in candidates:
        try:
            if resolve_tag_to_commit(client, owner, repo, name) == commit_sha:
                return name
        except NotFoundError:
            continue
    return None
