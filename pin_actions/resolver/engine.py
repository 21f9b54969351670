"""
Resolver engine: defines the Resolution model and runs the registered
resolution strategies, in order, for a single action reference.

Each strategy either returns a Resolution (done) or None (not applicable
or nothing found, try the next one). A NotFoundError escaping a strategy
counts as "nothing found"; any other GitHubAPIError ends resolution for
that reference and is recorded as a failure.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from pin_actions.github.client import GitHubAPIError, GitHubClient, NotFoundError

logger = logging.getLogger(__name__)


class Policy(Enum):
    LATEST = "latest"          # newest version across all majors
    SAME_MAJOR = "same-major"  # newest version within the requested major
    REQUESTED = "requested"    # exactly what is written, pinned to its commit

    @classmethod
    def parse(cls, text: Optional[str]) -> "Policy":
        """Parse a user-supplied policy name, accepting the common aliases."""
        name = (text or "").strip().lower()
        for policy, aliases in _POLICY_ALIASES.items():
            if name in aliases:
                return policy
        raise ValueError(f"unknown policy: {text}")


_POLICY_ALIASES = {
    Policy.LATEST: ("", "major", "latest-major", "latest"),
    # minor/patch are treated as staying within the same major
    Policy.SAME_MAJOR: ("same-major", "stay-major", "minor", "patch"),
    Policy.REQUESTED: ("requested", "exact", "pin-requested"),
}


@dataclass(frozen=True)
class Resolution:
    """The outcome of resolving one action reference."""
    owner: str
    repo: str
    version: str = ""             # e.g. "v4.2.2", shown in the pin comment
    commit_id: str = ""           # 40-char SHA, empty on failure
    failure: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and bool(self.commit_id)


@dataclass(frozen=True)
class ResolveRequest:
    """Everything a strategy needs to resolve one reference."""
    client: GitHubClient
    owner: str
    repo: str
    requested_ref: str
    policy: Policy
    expand_major: bool = False
    pinned_version: str = ""  # version comment next to an already pinned SHA


# Type alias: a strategy takes a request and returns a Resolution or None
StrategyFunc = Callable[[ResolveRequest], Optional[Resolution]]

# Registry of all strategies, in the order they are tried
_strategies: list[StrategyFunc] = []


def register_strategy(func: StrategyFunc) -> StrategyFunc:
    """Decorator to register a resolution strategy."""
    _strategies.append(func)
    logger.debug("Registered strategy: %s", func.__name__)
    return func


def resolve_action(
    client: GitHubClient,
    owner: str,
    repo: str,
    requested_ref: str,
    policy: Policy,
    expand_major: bool = False,
    pinned_version: str = "",
) -> Resolution:
    """
    Resolve owner/repo@requested_ref to a commit according to policy.

    pinned_version is the version named in the trailing comment of the
    occurrence (e.g. "v2.5.0" for "@<sha> # v2.5.0"); strategies use it
    when the ref itself is a commit SHA.

    Never raises for API problems: failures are returned on the
    Resolution so one bad reference cannot affect the others.
    """
    if not owner or not repo:
        return Resolution(
            owner=owner,
            repo=repo,
            failure=f"malformed action reference '{owner}/{repo}': expected owner/repo",
        )

    request = ResolveRequest(
        client=client,
        owner=owner,
        repo=repo,
        requested_ref=requested_ref,
        policy=policy,
        expand_major=expand_major,
        pinned_version=pinned_version,
    )
    t0 = time.monotonic()
    not_found = None
    for strategy in _strategies:
        try:
            resolution = strategy(request)
        except NotFoundError as e:
            logger.debug("Strategy '%s' found nothing for %s/%s: %s", strategy.__name__, owner, repo, e)
            not_found = e
            continue
        except GitHubAPIError as e:
            logger.warning("Resolving %s/%s@%s failed: %s", owner, repo, requested_ref, e)
            return Resolution(owner=owner, repo=repo, failure=str(e))

        if resolution is not None:
            logger.info(
                "Resolved %s/%s@%s via '%s' to %s (%s) in %.1fms",
                owner, repo, requested_ref, strategy.__name__,
                resolution.version, resolution.commit_id[:12],
                (time.monotonic() - t0) * 1000,
            )
            return resolution

    message = f"no release or tag found for {owner}/{repo}"
    if not_found is not None:
        message = f"{message} ({not_found})"
    return Resolution(owner=owner, repo=repo, failure=message)
