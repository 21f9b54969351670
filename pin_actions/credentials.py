"""
GitHub token discovery.

Checks, in order: the GH_TOKEN and GITHUB_TOKEN environment variables,
the OS keyring entry `gh auth login` writes by default, then the token
older gh versions store in ~/.config/gh/hosts.yml.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import keyring
import yaml
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")
GH_HOST = "github.com"
KEYRING_SERVICE = f"gh:{GH_HOST}"


class CredentialsError(Exception):
    """No GitHub token could be found."""


def gh_hosts_file() -> Path:
    return Path.home() / ".config" / "gh" / "hosts.yml"


def _token_from_keyring() -> Optional[str]:
    try:
        return keyring.get_password(KEYRING_SERVICE, "") or None
    except KeyringError as e:
        logger.debug("Keyring lookup for %s failed: %s", KEYRING_SERVICE, e)
        return None


def _token_from_hosts_file(path: Path) -> Optional[str]:
    try:
        with open(path, "r") as f:
            hosts = yaml.safe_load(f)
    except FileNotFoundError:
        return None
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None

    if not isinstance(hosts, dict):
        return None
    host = hosts.get(GH_HOST)
    if not isinstance(host, dict):
        return None
    return host.get("oauth_token") or None


def find_github_token(hosts_file: Optional[Path] = None) -> str:
    """
    Return a GitHub token from the environment, the OS keyring or the gh CLI config.

    Raises:
        CredentialsError: If no token is available anywhere.
    """
    for var in TOKEN_ENV_VARS:
        token = os.environ.get(var)
        if token:
            logger.debug("Using GitHub token from %s", var)
            return token

    token = _token_from_keyring()
    if token:
        logger.debug("Using GitHub token from the %s keyring entry", KEYRING_SERVICE)
        return token

    path = hosts_file or gh_hosts_file()
    token = _token_from_hosts_file(path)
    if token:
        logger.debug("Using GitHub token from %s", path)
        return token

    raise CredentialsError(
        "no GitHub token found. Set GH_TOKEN or GITHUB_TOKEN environment "
        "variable, or use 'gh auth login'"
    )
