"""
Rewrite engine: splices resolved commit SHAs back into the workflow text.

Each replacement covers an occurrence's `@ref [# comment]` span and is
applied against the offsets of the original content in a single pass, so
earlier edits never shift later ones. Everything outside those spans is
copied through untouched.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from pin_actions.parser.workflow_parser import Occurrence
from pin_actions.resolver.engine import Resolution

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Replacement:
    start: int
    end: int
    text: str


def pin_text(resolution: Resolution) -> str:
    """The text that replaces `@ref [# comment]`, e.g. '@8ade13... # v4.1.0'."""
    return f"@{resolution.commit_id} # {resolution.version}"


def plan_replacements(
    occurrences: Sequence[Occurrence],
    resolutions: Sequence[Resolution],
) -> list[Replacement]:
    """
    Build one replacement per occurrence that actually changes.

    Skipped: failed resolutions, occurrences already at the resolved
    commit, and spans that are empty or inverted.
    """
    replacements = []
    for occ, resolution in zip(occurrences, resolutions):
        if not resolution.ok:
            continue
        if occ.replace_start < 0 or occ.replace_end <= occ.replace_start:
            logger.warning("Skipping %s at L%d: invalid span", occ.action, occ.line)
            continue
        if occ.requested_ref == resolution.commit_id:
            continue
        replacements.append(Replacement(
            start=occ.replace_start,
            end=occ.replace_end,
            text=pin_text(resolution),
        ))
    return replacements


def apply_replacements(content: str, replacements: Sequence[Replacement]) -> str:
    """
    Apply replacements to content in one left-to-right pass.

    Replacements that overlap an earlier one are dropped rather than
    risk corrupting the file. With nothing to apply, the original string
    is returned as-is.
    """
    if not replacements:
        return content

    parts = []
    cursor = 0
    for repl in sorted(replacements, key=lambda r: r.start):
        if repl.start < cursor:
            logger.warning("Skipping overlapping replacement at offset %d", repl.start)
            continue
        parts.append(content[cursor:repl.start])
        parts.append(repl.text)
        cursor = repl.end
    parts.append(content[cursor:])
    return "".join(parts)


def update_content(
    content: str,
    occurrences: Sequence[Occurrence],
    resolutions: Sequence[Resolution],
) -> str:
    """Return content with every resolvable occurrence pinned to its commit."""
    replacements = plan_replacements(occurrences, resolutions)
    logger.info("Applying %d replacement(s)", len(replacements))
    return apply_replacements(content, replacements)
