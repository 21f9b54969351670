"""
Strategy: move to the newest version within the requested major
(e.g. @v2 or @v2.1.0 -> newest v2.x.y), never across majors.

An already pinned SHA takes its major from the version comment beside it
(@<sha> # v2.1.0). Without one, or with no tags left in that major, the
pin is kept as it is.
"""

import logging
from typing import Optional

from pin_actions.resolver.engine import Policy, Resolution, ResolveRequest, register_strategy
from pin_actions.resolver.tags import resolve_tag_to_commit, select_same_major_tag
from pin_actions.versions import is_full_sha, parse_major

logger = logging.getLogger(__name__)


def _keep_pin(request: ResolveRequest) -> Resolution:
    ref = request.requested_ref
    return Resolution(owner=request.owner, repo=request.repo, version=ref, commit_id=ref)


@register_strategy
def resolve_same_major(request: ResolveRequest) -> Optional[Resolution]:
    if request.policy is not Policy.SAME_MAJOR or not request.requested_ref:
        return None

    ref = request.requested_ref
    pinned = is_full_sha(ref)
    major = parse_major(request.pinned_version if pinned else ref)
    if major is None:
        if pinned:
            logger.debug("%s/%s pinned without a version comment, keeping %s", request.owner, request.repo, ref[:12])
            return _keep_pin(request)
        logger.debug("No major version in ref '%s', falling through", ref)
        return None

    tag_name = select_same_major_tag(request.client, request.owner, request.repo, major)
    if not tag_name:
        logger.debug("No v%d tags for %s/%s", major, request.owner, request.repo)
        return _keep_pin(request) if pinned else None

    sha = resolve_tag_to_commit(request.client, request.owner, request.repo, tag_name)
    return Resolution(owner=request.owner, repo=request.repo, version=tag_name, commit_id=sha)
