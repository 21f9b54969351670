"""
Console reporter: prints discovered actions, planned pin changes and the
final pinned list to the terminal.
"""

from typing import Sequence

from pin_actions.parser.workflow_parser import Occurrence
from pin_actions.reporter.changes import planned_changes, pretty_ref
from pin_actions.resolver.engine import Resolution

BOLD = "\033[1m"
YELLOW = "\033[33m"
RESET = "\033[0m"


def bold(text: str) -> str:
    return f"{BOLD}{text}{RESET}"


def _emit(lines: list[str]) -> str:
    report = "\n".join(lines)
    print(report)
    return report


def report_discovered_actions(actions: Sequence[str]) -> str:
    """List the distinct actions found in the workflow."""
    lines = [bold("Discovered actions:"), ""]
    for action in actions:
        lines.append(f"  - {action}")
    lines.append("")
    return _emit(lines)


def report_planned_changes(
    occurrences: Sequence[Occurrence],
    resolutions: Sequence[Resolution],
) -> str:
    """
    Show a from → to line per occurrence that will change, e.g.

        - actions/checkout (L12:C15): v4 → 5e2f1c1a9b3d…  (v4.2.2)

    Failed resolutions are listed as warnings underneath.

    Returns:
        The formatted report string (also prints it).
    """
    lines = [bold("Planned updates:"), ""]

    changes = planned_changes(occurrences, resolutions)
    for c in changes:
        lines.append(
            f"  - {c.action} (L{c.line}:C{c.column}): "
            f"{pretty_ref(c.old_ref)} → {pretty_ref(c.new_commit)}  ({c.version})"
        )
    if not changes:
        lines.append("  No changes needed. All actions already pinned to the latest commits.")

    failures = [
        (occ, res) for occ, res in zip(occurrences, resolutions) if res.failure
    ]
    if failures:
        lines.append("")
        lines.append(f"{YELLOW}{BOLD}Could not resolve:{RESET}")
        for occ, res in failures:
            lines.append(f"  - {occ.action}@{occ.requested_ref} (L{occ.line}:C{occ.column}): {res.failure}")

    return _emit(lines)


def report_pinned(resolutions: Sequence[Resolution]) -> str:
    """List every successfully pinned action after the file was written."""
    lines = [bold("Pinned actions:"), ""]
    for res in resolutions:
        if res.ok:
            lines.append(f"  {res.owner}/{res.repo}@{res.commit_id} # {res.version}")
    lines.append("")
    return _emit(lines)
