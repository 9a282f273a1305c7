#!/usr/bin/env python3

"""
PR Context Resolution
---------------------
Determines which pull request a run should label and which base SHA
cargo semver-checks should compare against.

Two triggers are supported:
    - pull_request / pull_request_target: the payload names the PR and its base SHA.
    - workflow_run: the payload describes a completed upstream run. Its
      `pull_requests` list is not always populated, so when it is empty the PR
      is looked up by head branch and then by head commit.

The GitHub lookups are passed in as callables so this module never talks to
the API directly.
"""

import logging
from typing import Callable, List, Optional
from semver_errors import (
    AmbiguousPullRequest,
    MissingBaseCommit,
    MissingContext,
    MissingHeadCommit,
    UnsupportedEvent,
)
from semver_models import (
    DirectPullRequest,
    PrContext,
    Proceed,
    PullRequestSummary,
    Skip,
    TriggerEvent,
    UpstreamWorkflowRun,
)

logger = logging.getLogger(__name__)

PULL_REQUEST_EVENTS = ("pull_request", "pull_request_target")
WORKFLOW_RUN_EVENT = "workflow_run"

LookupByHeadBranch = Callable[[str, str], List[PullRequestSummary]]
LookupByCommit = Callable[[str], List[PullRequestSummary]]
LookupPrByNumber = Callable[[int], PullRequestSummary]

def parse_trigger_event(event_name: str, payload: dict) -> TriggerEvent:
    """Build a TriggerEvent from the event name and the raw webhook payload."""
    logger.debug(f"Event name: {event_name}")
    if event_name in PULL_REQUEST_EVENTS:
        pr = payload.get("pull_request")
        if not pr:
            raise MissingContext("Missing pull_request payload.")
        return DirectPullRequest(
            number=pr.get("number"),
            base_sha=(pr.get("base") or {}).get("sha"),
        )
    if event_name == WORKFLOW_RUN_EVENT:
        run = payload.get("workflow_run")
        if not run:
            raise MissingContext("Missing workflow_run payload.")
        head_repo = run.get("head_repository") or {}
        owner = head_repo.get("owner") or {}
        event = UpstreamWorkflowRun(
            run_id=run.get("id"),
            conclusion=run.get("conclusion"),
            pull_requests=[_correlated_pull_request(pr) for pr in run.get("pull_requests") or []],
            head_owner=owner.get("login") or owner.get("name"),
            head_repo=head_repo.get("full_name") or head_repo.get("name"),
            head_branch=run.get("head_branch"),
            head_sha=run.get("head_sha"),
        )
        logger.debug(
            f"workflow_run id={event.run_id or 'unknown'} head_sha={event.head_sha or 'n/a'} "
            f"head_branch={event.head_branch or 'n/a'} head_repo={event.head_repo or 'unknown'}"
        )
        return event
    raise UnsupportedEvent(f"Unsupported event type: {event_name}")

def _correlated_pull_request(data: dict) -> PullRequestSummary:
    if not data.get("number"):
        raise MissingContext("workflow_run pull_request is missing number.")
    return PullRequestSummary.from_api(data)

def resolve_pr_context(
    event: TriggerEvent,
    lookup_by_head_branch: LookupByHeadBranch,
    lookup_by_commit: LookupByCommit,
    lookup_pr_by_number: LookupPrByNumber,
) -> PrContext:
    """Resolve the PR number and base SHA for `event`, or a Skip with its reason."""
    if isinstance(event, DirectPullRequest):
        return _resolve_direct(event)
    if isinstance(event, UpstreamWorkflowRun):
        return _resolve_workflow_run(event, lookup_by_head_branch, lookup_by_commit, lookup_pr_by_number)
    raise UnsupportedEvent(f"Unsupported event type: {type(event).__name__}")

def _resolve_direct(event: DirectPullRequest) -> Proceed:
    if not event.number:
        raise MissingContext("pull_request payload is missing number.")
    if not event.base_sha:
        raise MissingContext("Unable to determine the PR base SHA.")
    return Proceed(pr_number=event.number, baseline_commit=event.base_sha)

def _resolve_workflow_run(
    event: UpstreamWorkflowRun,
    lookup_by_head_branch: LookupByHeadBranch,
    lookup_by_commit: LookupByCommit,
    lookup_pr_by_number: LookupPrByNumber,
) -> PrContext:
    if event.conclusion != "success":
        rendered = event.conclusion or "unknown"
        return Skip(reason=f"workflow_run conclusion is {rendered}; skipping semver checks.")

    pr_count = len(event.pull_requests)
    if pr_count > 1:
        raise AmbiguousPullRequest(f"workflow_run must have exactly one pull request, found {pr_count}.")

    if pr_count == 1:
        match: Optional[PullRequestSummary] = event.pull_requests[0]
    else:
        match = _lookup_by_head_branch(event, lookup_by_head_branch)
        if match is None:
            match = _lookup_by_commit(event, lookup_by_commit)

    base_sha = match.base_sha
    if not base_sha:
        logger.debug(f"Fetching PR #{match.number} to determine its base SHA.")
        base_sha = lookup_pr_by_number(match.number).base_sha
    if not base_sha:
        raise MissingBaseCommit("Unable to determine the PR base SHA.")
    return Proceed(pr_number=match.number, baseline_commit=base_sha)

def _lookup_by_head_branch(
    event: UpstreamWorkflowRun,
    lookup_by_head_branch: LookupByHeadBranch,
) -> Optional[PullRequestSummary]:
    """Find the open PR for the run's head owner:branch. None when unknown or not found."""
    if not event.head_owner or not event.head_branch:
        return None
    logger.info("workflow_run.pull_requests is empty; resolving PR from head repository.")
    prs = lookup_by_head_branch(event.head_owner, event.head_branch)
    logger.debug(f"PRs for head {event.head_owner}:{event.head_branch}: {len(prs)}")
    if len(prs) > 1:
        raise AmbiguousPullRequest(f"Unable to resolve PR from head ref; found {len(prs)}.")
    return prs[0] if prs else None

def _lookup_by_commit(event: UpstreamWorkflowRun, lookup_by_commit: LookupByCommit) -> PullRequestSummary:
    if not event.head_sha:
        raise MissingHeadCommit("workflow_run is missing head_sha.")
    logger.info("Resolving PR from head_sha.")
    prs = lookup_by_commit(event.head_sha)
    logger.debug(f"PRs for head_sha {event.head_sha}: {len(prs)}")
    if len(prs) != 1:
        raise AmbiguousPullRequest(f"Unable to resolve PR from head_sha; found {len(prs)}.")
    return prs[0]
