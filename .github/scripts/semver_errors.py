#!/usr/bin/env python3

"""
Errors raised by the semver labeling scripts. All of them are fatal for a run
and are reported once by the entry script.
"""

class SemverLabelError(Exception):
    """Base class for semver labeling failures."""

class ConfigError(SemverLabelError):
    """Invalid or missing action inputs."""

class MissingContext(SemverLabelError):
    """The trigger payload lacks the object or field needed to find the PR."""

class MissingBaseCommit(SemverLabelError):
    """No base SHA could be determined for the pull request."""

class MissingHeadCommit(SemverLabelError):
    """A workflow_run event without head_sha could not be correlated to a PR."""

class AmbiguousPullRequest(SemverLabelError):
    """Zero or several pull requests matched where exactly one is required."""

class UnsupportedEvent(SemverLabelError):
    """The workflow was triggered by an event this action does not handle."""

class UnparseableOutput(SemverLabelError):
    """cargo semver-checks failed without output that could be classified."""

    def __init__(self, output: str) -> None:
        super().__init__(f"cargo semver-checks failed to produce parseable output:\n{output}")
        self.output = output

class CommandError(SemverLabelError):
    """An external command could not be started or a required command failed."""

class InstallError(SemverLabelError):
    """cargo-semver-checks could not be provisioned."""
