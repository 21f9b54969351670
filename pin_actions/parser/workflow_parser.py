"""
Locates action references in GitHub Actions workflow files.

The workflow is matched as plain text rather than loaded as YAML so that
offsets stay exact and rewrites never disturb comments, quoting or key
order elsewhere in the file.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from pin_actions.versions import is_full_sha, parse_major

logger = logging.getLogger(__name__)

# uses: owner/repo[/path]@ref [# inline comment]
OCCURRENCE_PATTERN = re.compile(
    r"uses:\s+(?P<action>[^@/\s]+/[^@\s]+)@(?P<ref>[^\s#]+)(?P<comment>[ \t]*#[^\r\n]*)?"
)

# Same shape without requiring @ref, for the discovered-actions listing
ACTION_PATTERN = re.compile(r"uses:\s+(?P<action>[^@/\s]+/[^@\s]+)")


@dataclass(frozen=True)
class Occurrence:
    """A single `uses: owner/repo@ref` entry and where it sits in the file."""
    owner: str          # e.g. "actions"
    repo: str           # e.g. "checkout"
    action: str         # as written, e.g. "github/codeql-action/init"
    requested_ref: str  # e.g. "v4", "main" or a SHA

    # Offsets into the original content (half-open)
    match_start: int    # start of the whole `uses: ...` match
    match_end: int
    replace_start: int  # the '@' before the ref
    replace_end: int    # end of match, trailing comment included

    # 1-based, for display
    line: int
    column: int

    # Version named by the trailing comment, e.g. "v4.1.0" in "@<sha> # v4.1.0"
    comment_version: str = ""

    @property
    def is_pinned(self) -> bool:
        return is_full_sha(self.requested_ref)


def compute_line_col(content: str, offset: int) -> tuple[int, int]:
    """Return the 1-based (line, column) of an offset, clamped into the content."""
    offset = max(0, min(offset, len(content)))
    line = content.count("\n", 0, offset) + 1
    last_nl = content.rfind("\n", 0, offset)
    return line, offset - last_nl


def _is_remote_action(action: str) -> bool:
    """Local (./path) and docker:// actions have no GitHub repo to resolve."""
    return not action.startswith(("./", "../", "docker://"))


def _split_action(action: str) -> tuple[str, str]:
    """Split 'owner/repo[/path]' into (owner, repo); empty parts are kept empty."""
    parts = action.split("/")
    owner = parts[0]
    repo = parts[1] if len(parts) > 1 else ""
    return owner, repo


def _comment_version(comment: Optional[str]) -> str:
    """First word of an inline comment when it looks like a version ("# v4.1.0")."""
    if not comment:
        return ""
    words = comment.strip().lstrip("#").split()
    if words and parse_major(words[0]) is not None:
        return words[0]
    return ""


def extract_occurrences(content: str) -> list[Occurrence]:
    """
    Find every `uses: owner/repo@ref` occurrence, in document order.

    Occurrences are never de-duplicated: the same action used in two
    steps yields two entries, each with its own span.

    Args:
        content: Raw workflow text.

    Returns:
        Occurrences with strictly increasing, non-overlapping spans.
    """
    occurrences = []
    for match in OCCURRENCE_PATTERN.finditer(content):
        action = match.group("action")
        if not _is_remote_action(action):
            logger.debug("Skipping local/docker action: %s", action)
            continue
        owner, repo = _split_action(action)
        line, column = compute_line_col(content, match.start("action"))
        occurrences.append(Occurrence(
            owner=owner,
            repo=repo,
            action=action,
            requested_ref=match.group("ref"),
            match_start=match.start(),
            match_end=match.end(),
            # '@' sits right after the action
            replace_start=match.end("action"),
            replace_end=match.end(),
            line=line,
            column=column,
            comment_version=_comment_version(match.group("comment")),
        ))
        logger.debug(
            "Found %s@%s at L%d:C%d", action, match.group("ref")[:12], line, column,
        )

    logger.info("Extracted %d action occurrence(s)", len(occurrences))
    return occurrences


def extract_actions(content: str) -> list[str]:
    """
    List the distinct owner/repo identities referenced by `uses:`, in order
    of first use. Subpath actions (github/codeql-action/init) count as their
    repository.

    Unlike extract_occurrences, entries without an @ref are included.
    """
    seen = set()
    actions = []
    for match in ACTION_PATTERN.finditer(content):
        action = match.group("action")
        if not _is_remote_action(action):
            continue
        identity = "/".join(_split_action(action))
        if identity in seen:
            continue
        seen.add(identity)
        actions.append(identity)
    return actions
