"""
Resolves every occurrence of a workflow concurrently.

One task per occurrence runs on a thread pool; all tasks share a cache
keyed by (owner, repo, policy, requested_ref, comment version). The first
task to claim a key does the lookup and tasks for the same key wait for
its result, so repeated references cost one lookup. The lock only guards
claiming and releasing keys, never a network call. Results, and the progress lines printed for them, always come back
in the order of the input occurrences.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from pin_actions.github.client import GitHubClient
from pin_actions.parser.workflow_parser import Occurrence
from pin_actions.resolver.engine import Policy, Resolution, resolve_action

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8

CacheKey = tuple[str, str, Policy, str, str]


class ResolutionCache:
    """
    Resolutions for one run, shared by all worker threads.

    Each key holds a Future. The first worker to claim a key owns the
    lookup; later workers wait on the same Future instead of repeating
    it. A failed lookup is dropped from the cache before its waiters wake,
    so one of them claims the key again and retries.
    """

    def __init__(self):
        self._slots: dict[CacheKey, Future] = {}
        self._lock = threading.Lock()

    def claim(self, key: CacheKey) -> tuple[Future, bool]:
        """Return the slot for key and whether the caller now owns the lookup."""
        with self._lock:
            slot = self._slots.get(key)
            if slot is not None:
                return slot, False
            slot = Future()
            self._slots[key] = slot
            return slot, True

    def settle(self, key: CacheKey, slot: Future, resolution: Resolution) -> None:
        """Publish the owner's result to every waiter on slot."""
        if not resolution.ok:
            with self._lock:
                if self._slots.get(key) is slot:
                    del self._slots[key]
        slot.set_result(resolution)

    def get(self, key: CacheKey) -> Optional[Resolution]:
        """The finished, successful resolution for key, if any."""
        with self._lock:
            slot = self._slots.get(key)
        if slot is None or not slot.done():
            return None
        return slot.result()

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)


def resolve_all(
    client: GitHubClient,
    occurrences: Sequence[Occurrence],
    policy: Policy,
    expand_major: bool = False,
    echo: Optional[Callable[[str], None]] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[Resolution]:
    """
    Resolve all occurrences in parallel.

    Args:
        client: Authenticated GitHub client, shared by all workers.
        occurrences: Occurrences from extract_occurrences.
        policy: Version selection policy for the whole run.
        expand_major: Show full version tags for moving major refs.
        echo: Called with one progress line per resolved occurrence, in
              input order, once every task has finished.
        max_workers: Thread pool size.

    Returns:
        One Resolution per occurrence, index-aligned with the input.
    """
    if not occurrences:
        return []

    cache = ResolutionCache()
    resolutions: list[Optional[Resolution]] = [None] * len(occurrences)
    messages: list[str] = [""] * len(occurrences)

    def lookup(occ: Occurrence) -> Resolution:
        key = (occ.owner, occ.repo, policy, occ.requested_ref, occ.comment_version)
        while True:
            slot, owner = cache.claim(key)
            if not owner:
                resolution = slot.result()
                if resolution.ok:
                    logger.debug("Cache hit for %s@%s", occ.action, occ.requested_ref)
                    return resolution
                # The owner failed and released the key; claim it again
                continue

            try:
                resolution = resolve_action(
                    client, occ.owner, occ.repo, occ.requested_ref, policy, expand_major,
                    pinned_version=occ.comment_version,
                )
            except Exception as e:
                cache.settle(key, slot, Resolution(owner=occ.owner, repo=occ.repo, failure=str(e)))
                raise
            cache.settle(key, slot, resolution)
            return resolution

    def work(idx: int, occ: Occurrence) -> None:
        resolution = lookup(occ)
        resolutions[idx] = resolution
        if resolution.ok:
            messages[idx] = f"  {occ.action}: {resolution.version} -> {resolution.commit_id}"

    logger.info(
        "Resolving %d occurrence(s) with policy=%s (workers=%d)",
        len(occurrences), policy.value, max_workers,
    )
    t0 = time.monotonic()
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(work, idx, occ) for idx, occ in enumerate(occurrences)]

    # Leaving the with-block joined every task
    for idx, (future, occ) in enumerate(zip(futures, occurrences)):
        error = future.exception()
        if error is not None:
            logger.error("Unexpected error resolving %s: %s", occ.action, error)
            resolutions[idx] = Resolution(owner=occ.owner, repo=occ.repo, failure=str(error))

    logger.info(
        "Resolved %d occurrence(s), %d unique cached, in %.1fms",
        len(occurrences), len(cache), (time.monotonic() - t0) * 1000,
    )

    if echo is not None:
        for message in messages:
            if message:
                echo(message)

    return list(resolutions)
