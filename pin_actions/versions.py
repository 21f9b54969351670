"""
Helpers for classifying action refs: commit SHAs, moving major tags
(v4, 4) and semantic version tags (v4.2.2).
"""

import re
from typing import Optional

from semver import Version

# A full SHA-1 hash is 40 hex characters
_FULL_SHA_PATTERN = re.compile(r"^[0-9a-fA-F]{40}$")
_MOVING_MAJOR_PATTERN = re.compile(r"^v?\d+$")


def is_full_sha(ref: str) -> bool:
    """True if ref is a full 40-character commit SHA (any case)."""
    return bool(_FULL_SHA_PATTERN.match(ref))


def is_moving_major_tag(ref: str) -> bool:
    """True for tags like 'v4' or '4' that maintainers move between releases."""
    return bool(_MOVING_MAJOR_PATTERN.match(ref))


def normalize_major_ref(ref: str) -> str:
    """Return the 'v'-prefixed form of a major ref ('4' -> 'v4')."""
    if ref.startswith("v"):
        return ref
    return "v" + ref


def parse_version(tag: str) -> Optional[Version]:
    """
    Parse a tag name as a semantic version, tolerating a leading 'v' and
    a missing minor or patch ('v4' is 4.0.0, 'v4.2' is 4.2.0).

    Pre-release labels rank below the release (v3.0.0-node20 < v3.0.0) and
    build metadata is ignored when comparing.

    Returns None for anything that isn't version-shaped, including
    all-digit commit SHAs that would otherwise parse as huge integers.
    """
    if not tag or is_full_sha(tag):
        return None
    text = tag[1:] if tag.startswith("v") else tag
    try:
        return Version.parse(text, optional_minor_and_patch=True)
    except ValueError:
        return None


def parse_major(ref: str) -> Optional[int]:
    """
    Extract the major version number from 'v4', '4' or 'v4.2.2'.

    Returns None when the ref carries no recognizable major (branches,
    SHAs, empty strings).
    """
    if is_full_sha(ref):
        return None
    if is_moving_major_tag(ref):
        return int(ref.lstrip("v"))
    version = parse_version(ref)
    if version is None:
        return None
    return version.major
