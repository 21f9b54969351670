"""
Strategy: the newest version overall. Always tried last.

Prefers the latest published release; repositories without releases
(or whose release tag can't be resolved) fall back to the highest
version tag, then to the newest tag listed.
"""

import logging
from typing import Optional

from pin_actions.github.client import NotFoundError
from pin_actions.resolver.engine import Resolution, ResolveRequest, register_strategy
from pin_actions.resolver.tags import resolve_tag_to_commit, select_latest_tag

logger = logging.getLogger(__name__)


@register_strategy
def resolve_latest(request: ResolveRequest) -> Optional[Resolution]:
    client, owner, repo = request.client, request.owner, request.repo

    try:
        release_tag = client.get_latest_release(owner, repo)
    except NotFoundError:
        # Plenty of action repos only publish tags
        logger.debug("No published release for %s/%s", owner, repo)
        release_tag = ""

    if release_tag:
        try:
            sha = resolve_tag_to_commit(client, owner, repo, release_tag)
            return Resolution(owner=owner, repo=repo, version=release_tag, commit_id=sha)
        except NotFoundError:
            logger.debug("Release tag %s of %s/%s did not resolve, listing tags", release_tag, owner, repo)

    tag_name = select_latest_tag(client, owner, repo)
    if not tag_name:
        return None

    sha = resolve_tag_to_commit(client, owner, repo, tag_name)
    return Resolution(owner=owner, repo=repo, version=tag_name, commit_id=sha)
