#!/usr/bin/env python3

"""
PR Semver Label Script
----------------------
This script runs cargo semver-checks for a pull request against the PR base
commit, determines the required semver bump (major, minor or patch) and keeps
a single `<prefix><type>` label on the pull request in sync with it.

It supports two triggers:
    - pull_request: the PR and base SHA come straight from the payload.
    - workflow_run: runs after another workflow completed; the PR is resolved
      from the run (skipped unless the run succeeded).

Inputs are read from INPUT_* environment variables (see config_loader.py)
and can be overridden by the arguments below.

Arguments:
    --repo          : OPTIONAL, full repository name (defaults to GITHUB_REPOSITORY)
    --event-name    : OPTIONAL, triggering event (defaults to GITHUB_EVENT_NAME)
    --event-path    : OPTIONAL, path to the event payload (defaults to GITHUB_EVENT_PATH)
    --workspace     : OPTIONAL, crate or workspace checkout (defaults to GITHUB_WORKSPACE)
    --label-prefix, --package, --toolchain, --feature-group, --features,
    --rust-target, --cargo-semver-checks-version, --use-release-binary,
    --structured-output : OPTIONAL, override the matching action inputs
    --dry-run       : If set, classify but only log label changes and skip outputs.
    --debug         : If set, enables detailed debug logging.

Outputs:
    Writes 'semver-type' to the GitHub Actions $GITHUB_OUTPUT file.

Example Usage:
    To run in debug mode and perform a dry-run (no changes made):
        INPUT_GITHUB-TOKEN=$GH_TOKEN python pr_semver_label.py --repo org/crate \\
            --event-name pull_request --event-path event.json --dry-run --debug
"""

import argparse
import logging
import os
import sys
from typing import List, Optional
import config_loader
import stdio_guard
from git_client import ensure_commit_available
from github_api_client import DEFAULT_API_URL, GitHubAPIClient
from label_sync import upsert_semver_label
from pr_context import parse_trigger_event, resolve_pr_context
from retry_policy import with_retries
from semver_checks_installer import install_cargo_semver_checks
from semver_checks_runner import run_semver_checks
from semver_classifier import classify
from semver_errors import ConfigError
from semver_models import ActionConfig, PrContext, Skip

logger = logging.getLogger(__name__)

def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Label a PR with the semver bump required by cargo semver-checks.")
    parser.add_argument("--repo", default=os.environ.get("GITHUB_REPOSITORY"), help="Full repository name (e.g., org/repo)")
    parser.add_argument("--event-name", default=os.environ.get("GITHUB_EVENT_NAME"), help="Triggering event name")
    parser.add_argument("--event-path", default=os.environ.get("GITHUB_EVENT_PATH"), help="Path to the event payload JSON")
    parser.add_argument("--workspace", default=os.environ.get("GITHUB_WORKSPACE") or os.getcwd(), help="Checkout to run cargo semver-checks in")
    for name in config_loader.INPUT_NAMES:
        if name != "github-token":
            parser.add_argument(f"--{name}", default=None, help=f"Override the '{name}' input")
    parser.add_argument("--dry-run", action="store_true", help="Log label changes without applying them.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)

def resolve_context(client: GitHubAPIClient, repo: str, event_name: str, payload: dict) -> PrContext:
    event = parse_trigger_event(event_name, payload)
    return with_retries(
        lambda: resolve_pr_context(
            event,
            lambda owner, branch: client.get_prs_by_head_branch(repo, owner, branch),
            lambda sha: client.get_prs_for_commit(repo, sha),
            lambda number: client.get_pr(repo, number),
        ),
        "Resolve PR context",
    )

def log_run_settings(config: ActionConfig, event_name: str, pr_number: int, baseline: str, cwd: str) -> None:
    logger.info(f"Event: {event_name}")
    logger.info(f"PR number: {pr_number}")
    logger.info(f"Working directory: {cwd}")
    logger.info(f"PR base SHA: {baseline}")
    logger.info(f"Use release binary: {config.use_release_binary}")
    optional_settings = {
        "Toolchain": config.toolchain,
        "Package": config.package,
        "Feature group": config.feature_group.value if config.feature_group else "",
        "Features": config.features,
        "Rust target": config.rust_target,
    }
    for title, value in optional_settings.items():
        if value:
            logger.info(f"{title}: {value}")

def write_output(name: str, value: str) -> None:
    """Append an output for later workflow steps."""
    output_file = os.environ.get("GITHUB_OUTPUT")
    if not output_file:
        logger.warning(f"GITHUB_OUTPUT environment variable not set. Output {name}={value} cannot be written.")
        return
    with open(output_file, "a", encoding="utf-8") as f:
        print(f"{name}={value}", file=f)
    logger.info(f"Wrote to GITHUB_OUTPUT: {name}={value}")

def run(args: argparse.Namespace) -> None:
    """Resolve the PR, classify the semver impact and sync the label."""
    overrides = {name: getattr(args, name.replace("-", "_"), None) for name in config_loader.INPUT_NAMES}
    config = config_loader.load_action_config(overrides)
    if not args.repo:
        raise ConfigError("Repository is unknown; set GITHUB_REPOSITORY or pass --repo.")
    if not args.event_name or not args.event_path:
        raise ConfigError("Event is unknown; set GITHUB_EVENT_NAME/GITHUB_EVENT_PATH or pass --event-name/--event-path.")
    payload = config_loader.load_event_payload(args.event_path)

    client = GitHubAPIClient(config.github_token, os.environ.get("GITHUB_API_URL") or DEFAULT_API_URL)
    context = resolve_context(client, args.repo, args.event_name, payload)
    if isinstance(context, Skip):
        logger.info(context.reason)
        return

    log_run_settings(config, args.event_name, context.pr_number, context.baseline_commit, args.workspace)
    ensure_commit_available(context.baseline_commit, args.workspace)
    install_cargo_semver_checks(
        config.cargo_semver_checks_version,
        args.workspace,
        toolchain=config.toolchain,
        use_release_binary=config.use_release_binary,
    )

    outcome, structured = run_semver_checks(config, context.baseline_commit, args.workspace)
    semver_type = classify(outcome, structured=structured)
    label = config.label_for(semver_type)
    logger.info(f"Determined semver type: {semver_type.value}")

    logger.info(f'Applying label "{label}" to PR #{context.pr_number}...')
    with_retries(
        lambda: upsert_semver_label(client, args.repo, context.pr_number, config.label_prefix, label, args.dry_run),
        "Apply semver label",
    )
    if args.dry_run:
        logger.info(f"Dry run enabled. semver-type={semver_type.value} not written to GITHUB_OUTPUT.")
        return
    logger.info("Label applied successfully.")
    write_output("semver-type", semver_type.value)

def report_failure(message: str) -> None:
    """Report the run failure as a workflow error annotation."""
    logger.error(message)
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    stdio_guard.safe_print(f"::error::{escaped}")

def main(argv: Optional[List[str]] = None) -> int:
    """Main function to execute the PR semver label logic."""
    args = parse_arguments(argv)
    debug = args.debug or os.environ.get("RUNNER_DEBUG") == "1"
    stdio_guard.install(logging.DEBUG if debug else logging.INFO)
    try:
        run(args)
    except Exception as e:
        if stdio_guard.is_broken_pipe(e):
            stdio_guard.silence_stdout()
            return 0
        logger.debug("Run failed", exc_info=True)
        report_failure(str(e))
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
