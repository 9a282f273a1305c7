#!/usr/bin/env python3

"""
Semver Label Sync
-----------------
Keeps exactly one `<prefix><type>` label on a pull request.

Labels that start with the prefix but differ from the new label are removed,
the new label is added if missing (and created in the repository first if it
is not defined there), and labels without the prefix are left untouched.
"""

import logging
from typing import Iterable, List, Tuple
from github_api_client import GitHubAPIClient

logger = logging.getLogger(__name__)

LABEL_COLOR = "ededed"
LABEL_DESCRIPTION = "Semver required update"

def compute_label_changes(existing_labels: Iterable[str], new_label: str, label_prefix: str) -> Tuple[List[str], List[str]]:
    """Return (to_add, to_remove) for moving `existing_labels` to `new_label`."""
    existing = set(existing_labels)
    to_remove = []
    if label_prefix:
        to_remove = sorted(label for label in existing if label.startswith(label_prefix) and label != new_label)
    to_add = [] if new_label in existing else [new_label]
    return to_add, to_remove

def ensure_label_exists(client: GitHubAPIClient, repo: str, name: str) -> None:
    if client.get_label(repo, name) is None:
        client.create_label(repo, name, LABEL_COLOR, LABEL_DESCRIPTION)

def upsert_semver_label(client: GitHubAPIClient, repo: str, pr_number: int, label_prefix: str,
                        new_label: str, dry_run: bool = False) -> None:
    """Replace any previous semver label on the PR with `new_label`."""
    logger.info(f"Fetching existing labels for issue #{pr_number}...")
    existing_labels = client.get_existing_labels_on_pr(repo, pr_number)
    logger.info(f"Found {len(existing_labels)} existing labels: {', '.join(existing_labels) or '(none)'}")
    to_add, to_remove = compute_label_changes(existing_labels, new_label, label_prefix)
    logger.debug(f"Labels to add: {to_add}")
    logger.debug(f"Labels to remove: {to_remove}")
    if dry_run:
        logger.info(f"Dry run: would remove {to_remove or 'nothing'} and add {to_add or 'nothing'} on PR #{pr_number}.")
        return

    for label in to_remove:
        logger.info(f"Removing old label: {label}")
        client.remove_label(repo, pr_number, label)

    if to_add:
        logger.info(f"Adding new label: {new_label}")
        ensure_label_exists(client, repo, new_label)
        client.add_labels(repo, pr_number, to_add)
    else:
        logger.info(f'Label "{new_label}" already exists, skipping.')
