"""
Strategy: pin exactly the requested ref.

Moving major tags (v4, 4) resolve to the commit the tag currently points
at. With expand_major, the pin comment shows the full version tag at that
commit (v4.2.2) instead of the bare major.
"""

import logging
from typing import Optional

from pin_actions.github.client import NotFoundError
from pin_actions.resolver.engine import Policy, Resolution, ResolveRequest, register_strategy
from pin_actions.resolver.tags import find_full_tag_for_commit, resolve_tag_to_commit
from pin_actions.versions import is_full_sha, is_moving_major_tag, normalize_major_ref, parse_major

logger = logging.getLogger(__name__)


def _resolve_moving_major(request: ResolveRequest) -> Optional[Resolution]:
    ref = request.requested_ref
    candidates = [ref]
    if not ref.startswith("v"):
        candidates.append(normalize_major_ref(ref))

    for candidate in candidates:
        try:
            sha = resolve_tag_to_commit(request.client, request.owner, request.repo, candidate)
        except NotFoundError:
            logger.debug("Major tag %s not found for %s/%s", candidate, request.owner, request.repo)
            continue

        version = candidate
        if request.expand_major:
            full_tag = find_full_tag_for_commit(
                request.client, request.owner, request.repo, parse_major(ref), sha,
            )
            if full_tag:
                version = full_tag
            else:
                logger.debug("No full tag found at %s for %s", sha[:12], candidate)
        return Resolution(owner=request.owner, repo=request.repo, version=version, commit_id=sha)
    return None


@register_strategy
def resolve_requested(request: ResolveRequest) -> Optional[Resolution]:
    if request.policy is not Policy.REQUESTED or not request.requested_ref:
        return None

    ref = request.requested_ref
    if is_moving_major_tag(ref):
        resolution = _resolve_moving_major(request)
        if resolution is not None:
            return resolution
    else:
        try:
            sha = resolve_tag_to_commit(request.client, request.owner, request.repo, ref)
            return Resolution(owner=request.owner, repo=request.repo, version=ref, commit_id=sha)
        except NotFoundError:
            logger.debug("Tag %s not found for %s/%s", ref, request.owner, request.repo)

    # Already pinned
    if is_full_sha(ref):
        return Resolution(owner=request.owner, repo=request.repo, version=ref, commit_id=ref)
    return None
