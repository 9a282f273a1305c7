"""Tests for the command runner and the base commit fetch."""

import sys
from unittest.mock import patch

import pytest

from command_runner import command_env, run_command
from git_client import ensure_commit_available
from semver_errors import CommandError
from semver_models import ProcessOutcome


def test_run_command_captures_output():
    outcome = run_command([sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"])
    assert outcome == ProcessOutcome(returncode=3, stdout="out\n", stderr="err\n")
    assert not outcome.ok


def test_run_command_missing_executable():
    with pytest.raises(CommandError, match="Failed to run"):
        run_command(["definitely-not-a-real-command-7f3a"])


def test_command_env_overrides(monkeypatch):
    monkeypatch.setenv("CARGO_TERM_COLOR", "never")
    env = command_env(CARGO_TERM_COLOR="always")
    assert env["CARGO_TERM_COLOR"] == "always"


class TestEnsureCommitAvailable:

    def test_commit_already_present(self):
        with patch("git_client.run_command", return_value=ProcessOutcome(returncode=0)) as run_command:
            ensure_commit_available("abc123", "/work")
        run_command.assert_called_once_with(["git", "cat-file", "-e", "abc123^{commit}"], cwd="/work")

    def test_fetches_missing_commit(self):
        outcomes = [ProcessOutcome(returncode=128), ProcessOutcome(returncode=0)]
        with patch("git_client.run_command", side_effect=outcomes) as run_command:
            ensure_commit_available("abc123", "/work")
        assert run_command.call_args.args[0] == ["git", "fetch", "--no-tags", "--depth=1", "origin", "abc123"]

    def test_fetch_failure(self):
        outcomes = [
            ProcessOutcome(returncode=128),
            ProcessOutcome(returncode=128, stderr="fatal: remote error: upload-pack: not our ref abc123"),
        ]
        with patch("git_client.run_command", side_effect=outcomes):
            with pytest.raises(CommandError, match="Failed to fetch base SHA abc123: fatal: remote error"):
                ensure_commit_available("abc123", "/work")
