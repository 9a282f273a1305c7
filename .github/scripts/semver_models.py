#!/usr/bin/env python3

"""
Semver Label Models
-------------------
Pydantic models shared by the semver labeling scripts.

This includes:
- The semver classification and its ordering
- The trigger event union (direct pull_request vs. upstream workflow_run)
- The resolved PR context (skip or proceed)
- The captured outcome of an external process
- The validated action configuration
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CARGO_SEMVER_CHECKS_VERSION = "latest"
DEFAULT_LABEL_PREFIX = "semver: "

class SemverClassification(str, Enum):
    """Required semver bump. Ordered major > minor > patch."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @classmethod
    def highest(cls, found) -> "SemverClassification":
        """Return the most severe classification in `found`, patch when empty."""
        return max(found, key=lambda item: item.rank, default=cls.PATCH)

_RANKS = {
    SemverClassification.PATCH: 0,
    SemverClassification.MINOR: 1,
    SemverClassification.MAJOR: 2,
}

class FeatureGroup(str, Enum):
    ALL_FEATURES = "all-features"
    DEFAULT_FEATURES = "default-features"
    ONLY_EXPLICIT_FEATURES = "only-explicit-features"

class PullRequestSummary(BaseModel):
    """A pull request as returned by the platform: its number and base commit, if known."""

    model_config = ConfigDict(frozen=True)

    number: int
    base_sha: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "PullRequestSummary":
        return cls(number=data["number"], base_sha=(data.get("base") or {}).get("sha"))

class DirectPullRequest(BaseModel):
    """A pull_request event. Fields stay optional so resolution can report what is missing."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["pull_request"] = "pull_request"
    number: Optional[int] = None
    base_sha: Optional[str] = None

class UpstreamWorkflowRun(BaseModel):
    """A workflow_run event raised when an upstream workflow completes."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["workflow_run"] = "workflow_run"
    run_id: Optional[int] = None
    conclusion: Optional[str] = None
    pull_requests: List[PullRequestSummary] = Field(default_factory=list)
    head_owner: Optional[str] = None
    head_repo: Optional[str] = None
    head_branch: Optional[str] = None
    head_sha: Optional[str] = None

TriggerEvent = Annotated[Union[DirectPullRequest, UpstreamWorkflowRun], Field(discriminator="kind")]

class Skip(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["skip"] = "skip"
    reason: str

class Proceed(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["proceed"] = "proceed"
    pr_number: int = Field(..., gt=0)
    baseline_commit: str = Field(..., min_length=1)

PrContext = Annotated[Union[Skip, Proceed], Field(discriminator="kind")]

class ProcessOutcome(BaseModel):
    """Exit status and captured output of an external process."""

    model_config = ConfigDict(frozen=True)

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def combined(self) -> str:
        return f"{self.stdout}\n{self.stderr}"

class ActionConfig(BaseModel):
    """Validated action inputs."""

    model_config = ConfigDict(frozen=True)

    github_token: str = Field(..., min_length=1, repr=False)
    cargo_semver_checks_version: str = DEFAULT_CARGO_SEMVER_CHECKS_VERSION
    use_release_binary: bool = True
    label_prefix: str = DEFAULT_LABEL_PREFIX
    package: str = ""
    toolchain: str = ""
    feature_group: Optional[FeatureGroup] = None
    features: str = ""
    rust_target: str = ""
    structured_output: bool = False

    def label_for(self, classification: SemverClassification) -> str:
        return f"{self.label_prefix}{classification.value}"
