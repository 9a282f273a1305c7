"""Pytest configuration for all tests."""

import os
import sys
from unittest.mock import Mock

import pytest
import requests

# Add the scripts directory to the Python path for all tests
scripts_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '.github', 'scripts'))
if scripts_dir not in sys.path:
    sys.path.insert(0, scripts_dir)

from semver_models import ProcessOutcome, PullRequestSummary  # noqa: E402


@pytest.fixture
def no_sleep(monkeypatch):
    """Make retry backoff instant and record the requested delays."""
    delays = []
    monkeypatch.setattr("retry_policy.time.sleep", delays.append)
    return delays


@pytest.fixture
def lookups():
    """Mock GitHub lookup hooks for PR context resolution."""
    hooks = Mock()
    hooks.by_head_branch.return_value = []
    hooks.by_commit.return_value = []
    hooks.by_number.return_value = PullRequestSummary(number=1, base_sha=None)
    return hooks


@pytest.fixture
def make_outcome():
    def _make(stdout: str = "", stderr: str = "", returncode: int = 0) -> ProcessOutcome:
        return ProcessOutcome(returncode=returncode, stdout=stdout, stderr=stderr)
    return _make


@pytest.fixture
def http_response():
    """Factory for mock requests.Response objects."""
    def _make(status_code: int, json_body=None, headers=None) -> Mock:
        response = Mock(spec=requests.Response)
        response.status_code = status_code
        response.ok = status_code < 400
        response.headers = headers or {}
        response.text = "" if json_body is None else str(json_body)
        response.content = b"" if json_body is None else b"{}"
        response.json.return_value = json_body
        if status_code >= 400:
            response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error", response=response)
        else:
            response.raise_for_status.return_value = None
        return response
    return _make
