#!/usr/bin/env python3

"""
Runs `cargo semver-checks` against the PR base SHA and returns the captured
outcome together with whether that outcome is JSON.
"""

import logging
from typing import List, Optional, Tuple
from command_runner import command_env, run_command
from semver_classifier import is_unsupported_output_format
from semver_models import ActionConfig, FeatureGroup, ProcessOutcome

logger = logging.getLogger(__name__)

OUTPUT_FORMAT_JSON = "--output-format=json"

_FEATURE_GROUP_FLAGS = {
    FeatureGroup.ALL_FEATURES: "--all-features",
    FeatureGroup.DEFAULT_FEATURES: "--default-features",
    FeatureGroup.ONLY_EXPLICIT_FEATURES: "--only-explicit-features",
}

def build_semver_checks_args(
    baseline: str,
    package: str = "",
    toolchain: str = "",
    feature_group: Optional[FeatureGroup] = None,
    features: str = "",
    rust_target: str = "",
    structured_output: bool = False,
) -> List[str]:
    """Build the cargo argument list (without the leading `cargo`)."""
    args = []
    if toolchain:
        args.append(f"+{toolchain}")
    args += ["semver-checks", "--baseline-rev", baseline, "--release-type=patch"]
    if package:
        args += ["-p", package]
    else:
        args.append("--workspace")
    if feature_group:
        args.append(_FEATURE_GROUP_FLAGS[feature_group])
    if features:
        args += ["--features", features]
    if rust_target:
        args += ["--target", rust_target]
    if structured_output:
        args.append(OUTPUT_FORMAT_JSON)
    return args

def _run(args: List[str], cwd: str) -> ProcessOutcome:
    logger.info(f"Running: cargo {' '.join(args)}")
    logger.info("---")
    outcome = run_command(["cargo"] + args, cwd=cwd, env=command_env(CARGO_TERM_COLOR="always"))
    if outcome.stdout:
        logger.info(outcome.stdout)
    if outcome.stderr:
        logger.info(outcome.stderr)
    logger.info("---")
    logger.info(f"Exit code: {outcome.returncode}")
    return outcome

def run_semver_checks(config: ActionConfig, baseline: str, cwd: str) -> Tuple[ProcessOutcome, bool]:
    """Run the checker. Returns the outcome and whether it was produced with JSON output."""
    args = build_semver_checks_args(
        baseline,
        package=config.package,
        toolchain=config.toolchain,
        feature_group=config.feature_group,
        features=config.features,
        rust_target=config.rust_target,
        structured_output=config.structured_output,
    )
    outcome = _run(args, cwd)
    if config.structured_output and is_unsupported_output_format(outcome):
        logger.warning("cargo semver-checks does not support JSON output; retrying with text output.")
        args = [arg for arg in args if arg != OUTPUT_FORMAT_JSON]
        return _run(args, cwd), False
    return outcome, config.structured_output
