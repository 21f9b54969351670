"""
CLI entry point: ties together parser → resolver → rewriter → reporter.

Usage:
  # Preview and confirm interactively (latest version across majors):
  python3 -m pin_actions pin .github/workflows/ci.yml

  # Stay within each action's current major, no prompt:
  python3 -m pin_actions pin .github/workflows/ci.yml --policy same-major --yes

  # Pin moving majors (v4) exactly, showing the full tag in the comment:
  python3 -m pin_actions pin .github/workflows/ci.yml --policy requested --expand-major

  # CI check: exit 2 if anything would change
  python3 -m pin_actions pin .github/workflows/ci.yml --dry-run

Exit codes:
  0: done, or nothing to change
  1: error (bad input, missing token, etc.)
  2: --dry-run found changes to make
"""

import logging
import os
import sys

import click

from pin_actions.config import load_config
from pin_actions.credentials import CredentialsError, find_github_token
from pin_actions.github import GitHubClient
from pin_actions.parser import extract_actions, extract_occurrences
from pin_actions.reporter import report_discovered_actions, report_planned_changes, report_pinned
from pin_actions.reporter.console_reporter import bold
from pin_actions.resolver import Policy, resolve_all
from pin_actions.rewriter import update_content

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CHANGES = 2


def _setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
def cli(verbose: bool):
    """Pin GitHub Actions to commit SHAs, keeping the version as a comment."""
    _setup_logging(verbose)


@cli.command()
@click.argument("workflow_file")
@click.option("--policy", default=None, help="Update policy: major (default), same-major, requested.")
@click.option("--expand-major", is_flag=True, help="Expand moving major tags (vN or N) to the full version in the comment.")
@click.option("--yes", "--write", "yes", is_flag=True, help="Apply changes without confirmation prompt.")
@click.option("--dry-run", is_flag=True, help="Preview planned updates and exit without writing.")
@click.option("--config", "config_path", default=None, help="Path to .pin-actions.yml config file.")
def pin(workflow_file: str, policy: str, expand_major: bool, yes: bool, dry_run: bool, config_path: str):
    """Pin every `uses: owner/repo@ref` in a workflow file to a commit SHA.

    With --dry-run, exits with code 0 if the file is up to date and 2 if
    changes would be made.
    """
    if dry_run and yes:
        click.echo("Error: --dry-run cannot be used with --yes/--write", err=True)
        sys.exit(EXIT_ERROR)

    path = os.path.abspath(workflow_file)
    if not os.path.isfile(path):
        click.echo(f"Error: File '{workflow_file}' not found", err=True)
        sys.exit(EXIT_ERROR)

    # Load config file (CLI flags override config values)
    config = load_config(config_path=config_path, scan_path=path)
    try:
        effective_policy = Policy.parse(policy or config.policy)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)
    expand_major = expand_major or config.expand_major

    click.echo(f"\n{bold('Scanning workflow')} {workflow_file}\n")

    # newline="" keeps CRLF files byte-identical outside the edited spans
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"Error reading file: {e}", err=True)
        sys.exit(EXIT_ERROR)

    actions = extract_actions(content)
    if not actions:
        click.echo(f"{bold('No actions:')} No GitHub Actions references found in {workflow_file}")
        sys.exit(EXIT_OK)

    report_discovered_actions(actions)

    occurrences = extract_occurrences(content)
    if config.ignore_actions:
        before = len(occurrences)
        ignored = set(config.ignore_actions)
        occurrences = [
            occ for occ in occurrences
            if occ.action not in ignored and f"{occ.owner}/{occ.repo}" not in ignored
        ]
        if before != len(occurrences):
            logger.info("Ignored %d occurrence(s) via config", before - len(occurrences))

    if not occurrences:
        click.echo(f"{bold('Nothing to pin:')} no versioned action references in {workflow_file}")
        sys.exit(EXIT_OK)

    try:
        token = find_github_token()
    except CredentialsError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    click.echo(bold("Resolving versions and SHAs (parallel)...") + "\n")
    with GitHubClient(token=token) as client:
        resolutions = resolve_all(
            client, occurrences, effective_policy, expand_major=expand_major, echo=click.echo,
        )

    updated = update_content(content, occurrences, resolutions)

    click.echo()
    report_planned_changes(occurrences, resolutions)

    if dry_run:
        sys.exit(EXIT_OK if updated == content else EXIT_CHANGES)

    if updated == content:
        click.echo(f"\n{bold('Up to date:')} All actions are already pinned to the latest versions.")
        sys.exit(EXIT_OK)

    click.echo()
    if not yes and not click.confirm(bold("Apply changes?"), default=False):
        click.echo(bold("\nNo changes applied."))
        sys.exit(EXIT_OK)

    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(updated)
    except OSError as e:
        click.echo(f"Error writing file: {e}", err=True)
        sys.exit(EXIT_ERROR)

    click.echo(f"\n{bold('Updated file')} {workflow_file}\n")
    report_pinned(resolutions)
    sys.exit(EXIT_OK)


if __name__ == "__main__":
    cli()
