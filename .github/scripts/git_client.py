#!/usr/bin/env python3

"""
Makes sure the PR base commit exists in the local clone. actions/checkout
fetches a single commit by default, so the baseline usually has to be fetched.
"""

import logging
from command_runner import run_command
from semver_classifier import strip_ansi
from semver_errors import CommandError

logger = logging.getLogger(__name__)

def ensure_commit_available(sha: str, cwd: str) -> None:
    """Fetch `sha` from origin unless the commit is already present."""
    logger.info(f"Checking if base SHA {sha} is available...")
    check = run_command(["git", "cat-file", "-e", f"{sha}^{{commit}}"], cwd=cwd)
    if check.ok:
        logger.info("Base SHA is already available.")
        return
    logger.info(f"Fetching base SHA {sha} from origin...")
    fetch = run_command(["git", "fetch", "--no-tags", "--depth=1", "origin", sha], cwd=cwd)
    if not fetch.ok:
        raise CommandError(f"Failed to fetch base SHA {sha}: {strip_ansi(fetch.combined).strip()}")
    logger.info("Base SHA fetched successfully.")
