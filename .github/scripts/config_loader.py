#!/usr/bin/env python3

"""
Action Configuration Utilities
------------------------------
Loads the action inputs and validates them with Pydantic.

Key functionality:
- Reading inputs the way GitHub Actions passes them: INPUT_<NAME> environment
  variables, with the name upper-cased and hyphens kept (INPUT_LABEL-PREFIX)
- Letting explicit command-line values override the environment
- Loading the triggering event payload from GITHUB_EVENT_PATH
"""

import json
import logging
import os
from typing import Dict, Mapping, Optional
from pydantic import ValidationError
from semver_errors import ConfigError
from semver_models import DEFAULT_CARGO_SEMVER_CHECKS_VERSION, DEFAULT_LABEL_PREFIX, ActionConfig

logger = logging.getLogger(__name__)

INPUT_NAMES = (
    "github-token",
    "cargo-semver-checks-version",
    "use-release-binary",
    "label-prefix",
    "package",
    "toolchain",
    "feature-group",
    "features",
    "rust-target",
    "structured-output",
)

def get_input(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the trimmed value of an action input, or an empty string."""
    environ = os.environ if environ is None else environ
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return environ.get(key, "").strip()

def parse_bool_input(value: str, default: bool) -> bool:
    if value == "":
        return default
    return value.lower() == "true"

def load_action_config(overrides: Optional[Dict[str, Optional[str]]] = None,
                       environ: Optional[Mapping[str, str]] = None) -> ActionConfig:
    """Build the ActionConfig from action inputs, with non-None `overrides` taking precedence."""
    raw = {name: get_input(name, environ) for name in INPUT_NAMES}
    for name, value in (overrides or {}).items():
        if value is not None:
            raw[name] = value.strip()
    if not raw["github-token"]:
        raise ConfigError("Input required and not supplied: github-token")
    try:
        return ActionConfig(
            github_token=raw["github-token"],
            cargo_semver_checks_version=raw["cargo-semver-checks-version"] or DEFAULT_CARGO_SEMVER_CHECKS_VERSION,
            use_release_binary=parse_bool_input(raw["use-release-binary"], True),
            label_prefix=raw["label-prefix"] or DEFAULT_LABEL_PREFIX,
            package=raw["package"],
            toolchain=raw["toolchain"],
            feature_group=raw["feature-group"] or None,
            features=raw["features"],
            rust_target=raw["rust-target"],
            structured_output=parse_bool_input(raw["structured-output"], False),
        )
    except ValidationError as e:
        logger.error(f"Invalid action inputs: {e}")
        raise ConfigError(f"Invalid action inputs: {e}") from e

def load_event_payload(event_path: str) -> dict:
    """Load the webhook payload that triggered the workflow."""
    try:
        with open(event_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Failed to load event payload '{event_path}': {e}") from e
