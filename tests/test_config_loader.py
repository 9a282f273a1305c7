"""Tests for loading action inputs and the event payload."""

import json

import pytest

from config_loader import get_input, load_action_config, load_event_payload
from semver_errors import ConfigError
from semver_models import FeatureGroup


def test_get_input_uses_github_naming():
    environ = {"INPUT_LABEL-PREFIX": "  semver/  ", "INPUT_GITHUB-TOKEN": "t"}
    assert get_input("label-prefix", environ) == "semver/"
    assert get_input("package", environ) == ""


def test_defaults():
    config = load_action_config(environ={"INPUT_GITHUB-TOKEN": "secret"})
    assert config.github_token == "secret"
    assert config.cargo_semver_checks_version == "latest"
    assert config.use_release_binary is True
    assert config.label_prefix == "semver: "
    assert config.feature_group is None
    assert config.structured_output is False
    assert config.package == config.toolchain == config.features == config.rust_target == ""


def test_all_inputs():
    environ = {
        "INPUT_GITHUB-TOKEN": "secret",
        "INPUT_CARGO-SEMVER-CHECKS-VERSION": "0.35.0",
        "INPUT_USE-RELEASE-BINARY": "false",
        "INPUT_LABEL-PREFIX": "api/",
        "INPUT_PACKAGE": "my-crate",
        "INPUT_TOOLCHAIN": "nightly",
        "INPUT_FEATURE-GROUP": "all-features",
        "INPUT_FEATURES": "serde,std",
        "INPUT_RUST-TARGET": "x86_64-unknown-linux-gnu",
        "INPUT_STRUCTURED-OUTPUT": "TRUE",
    }
    config = load_action_config(environ=environ)
    assert config.cargo_semver_checks_version == "0.35.0"
    assert config.use_release_binary is False
    assert config.label_prefix == "api/"
    assert config.package == "my-crate"
    assert config.toolchain == "nightly"
    assert config.feature_group is FeatureGroup.ALL_FEATURES
    assert config.features == "serde,std"
    assert config.rust_target == "x86_64-unknown-linux-gnu"
    assert config.structured_output is True


def test_overrides_win_over_environment():
    environ = {"INPUT_GITHUB-TOKEN": "secret", "INPUT_PACKAGE": "from-env"}
    config = load_action_config({"package": "from-flag", "toolchain": None}, environ=environ)
    assert config.package == "from-flag"
    assert config.toolchain == ""


def test_missing_token():
    with pytest.raises(ConfigError, match="github-token"):
        load_action_config(environ={})


def test_invalid_feature_group():
    with pytest.raises(ConfigError, match="Invalid action inputs"):
        load_action_config(environ={"INPUT_GITHUB-TOKEN": "secret", "INPUT_FEATURE-GROUP": "some-features"})


def test_token_not_in_repr():
    config = load_action_config(environ={"INPUT_GITHUB-TOKEN": "secret"})
    assert "secret" not in repr(config)


def test_load_event_payload(tmp_path):
    path = tmp_path / "event.json"
    path.write_text(json.dumps({"pull_request": {"number": 1}}), encoding="utf-8")
    assert load_event_payload(str(path)) == {"pull_request": {"number": 1}}


def test_load_event_payload_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_event_payload(str(tmp_path / "missing.json"))
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_event_payload(str(broken))
