"""
Planned changes as plain data: one record per occurrence whose pin
would change, for previews and callers that render their own output.
"""

from dataclasses import dataclass
from typing import Sequence

from pin_actions.parser.workflow_parser import Occurrence
from pin_actions.resolver.engine import Resolution
from pin_actions.versions import is_full_sha


@dataclass(frozen=True)
class PlannedChange:
    action: str      # e.g. "actions/checkout"
    old_ref: str     # e.g. "v4"
    new_commit: str  # 40-char SHA
    version: str     # e.g. "v4.2.2"
    line: int
    column: int


def pretty_ref(ref: str) -> str:
    """Shorten full SHAs to 12 characters for display; blank refs show as (none)."""
    if not ref.strip():
        return "(none)"
    if is_full_sha(ref):
        return ref[:12] + "…"
    return ref


def planned_changes(
    occurrences: Sequence[Occurrence],
    resolutions: Sequence[Resolution],
) -> list[PlannedChange]:
    """Pair occurrences with resolutions, keeping only those that change."""
    changes = []
    for occ, resolution in zip(occurrences, resolutions):
        if not resolution.ok or occ.requested_ref == resolution.commit_id:
            continue
        changes.append(PlannedChange(
            action=occ.action,
            old_ref=occ.requested_ref,
            new_commit=resolution.commit_id,
            version=resolution.version,
            line=occ.line,
            column=occ.column,
        ))
    return changes
