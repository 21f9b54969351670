"""
Configuration file support for pin-actions.

Looks for a .pin-actions.yml file next to the workflow (or in any parent
directory) and loads defaults for the update policy and the actions that
should be left alone.

Example .pin-actions.yml:

    # Update policy: major (default), same-major, requested
    policy: same-major

    # Show the full tag (v4.2.2) in the pin comment for moving majors (v4)
    expand_major: true

    # Actions never rewritten (owner/repo)
    ignore_actions:
      - docker/setup-buildx-action
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = ".pin-actions.yml"


@dataclass
class Config:
    """Parsed pin-actions configuration."""
    policy: str = "major"
    expand_major: bool = False
    ignore_actions: list[str] = field(default_factory=list)


def load_config(config_path: Optional[str] = None, scan_path: Optional[str] = None) -> Config:
    """
    Load configuration from a .pin-actions.yml file.

    Search order:
      1. Explicit config_path if provided
      2. .pin-actions.yml in the scan_path directory (or its parent if scan_path is a file),
         then in each parent directory
      3. .pin-actions.yml in the current working directory

    Returns a Config with defaults if no config file is found.
    """
    path = _find_config_file(config_path, scan_path)

    if path is None:
        logger.debug("No config file found, using defaults")
        return Config()

    logger.info("Loading config from %s", path)

    with open(path, "r") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        logger.warning("Config file is not a YAML mapping, using defaults")
        return Config()

    return Config(
        policy=str(raw.get("policy") or "major"),
        expand_major=bool(raw.get("expand_major", False)),
        ignore_actions=list(raw.get("ignore_actions") or []),
    )


def _find_config_file(
    config_path: Optional[str] = None,
    scan_path: Optional[str] = None,
) -> Optional[str]:
    """Find the config file, returning its path or None."""
    # 1. Explicit path
    if config_path:
        p = Path(config_path)
        if p.is_file():
            return str(p)
        logger.warning("Config file not found: %s", config_path)
        return None

    # 2. Next to the workflow, walking up (e.g. from .github/workflows/ci.yml to the repo root)
    if scan_path:
        scan_p = Path(scan_path)
        if scan_p.is_file():
            scan_p = scan_p.parent
        for directory in [scan_p, *scan_p.parents]:
            candidate = directory / DEFAULT_CONFIG_FILENAME
            if candidate.is_file():
                return str(candidate)

    # 3. Current working directory
    cwd_candidate = Path.cwd() / DEFAULT_CONFIG_FILENAME
    if cwd_candidate.is_file():
        return str(cwd_candidate)

    return None
