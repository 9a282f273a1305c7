#!/usr/bin/env python3

"""
Semver Result Classifier
------------------------
Turns the captured output of `cargo semver-checks` into the single semver bump
the pull request requires.

cargo semver-checks reports each failed check group with a line such as:

    Summary semver requires new major version: 2 major and 0 minor checks failed

The output is colored (CARGO_TERM_COLOR=always), so escape sequences are
stripped before matching. When the run was asked for JSON output and the tool
accepted it, the parsed document is searched as well.

A non-zero exit status is expected when checks fail. It is only treated as a
tool failure when no required update was found and the output does not say
that there were no semver-relevant changes.
"""

import json
import logging
import re
from typing import Any, Set
from semver_errors import UnparseableOutput
from semver_models import ProcessOutcome, SemverClassification

logger = logging.getLogger(__name__)

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")
REQUIRED_UPDATE_RE = re.compile(r"semver requires new (major|minor|patch) version", re.IGNORECASE)
REQUIRED_UPDATE_KEY_RE = re.compile(r"^required[-_]?update$", re.IGNORECASE)
SUCCESS_RE = re.compile(r"no\s+(semver|public|api)", re.IGNORECASE)
SEVERITIES = frozenset(c.value for c in SemverClassification)
UNSUPPORTED_OUTPUT_FORMAT_RE = re.compile(
    r"(unknown|unexpected)\s+(argument|option|flag).*output.*format",
    re.IGNORECASE | re.DOTALL,
)

def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)

def extract_required_updates(text: str) -> Set[SemverClassification]:
    """Return every severity named by a 'semver requires new <x> version' phrase."""
    return {SemverClassification(m.group(1).lower()) for m in REQUIRED_UPDATE_RE.finditer(strip_ansi(text))}

def extract_required_updates_from_json(data: Any) -> Set[SemverClassification]:
    """Search a parsed JSON document for required updates.

    Values of keys named like `required_update` / `required-update` that name a
    severity are collected, and every string leaf is scanned for the text phrase.
    """
    found: Set[SemverClassification] = set()
    if isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, str) and REQUIRED_UPDATE_KEY_RE.match(str(key)):
                severity = value.strip().lower()
                if severity in SEVERITIES:
                    found.add(SemverClassification(severity))
            found |= extract_required_updates_from_json(value)
    elif isinstance(data, list):
        for item in data:
            found |= extract_required_updates_from_json(item)
    elif isinstance(data, str):
        found |= extract_required_updates(data)
    return found

def is_success_message(text: str) -> bool:
    """True when the output states there were no semver-relevant changes."""
    return SUCCESS_RE.search(strip_ansi(text)) is not None

def is_unsupported_output_format(outcome: ProcessOutcome) -> bool:
    """True when the tool failed because it does not know the output format flag."""
    if outcome.ok:
        return False
    return UNSUPPORTED_OUTPUT_FORMAT_RE.search(strip_ansi(outcome.combined)) is not None

def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        pass
    # JSON lines, as emitted by cargo message formats
    documents = []
    for line in text.splitlines():
        line = line.strip()
        if not line.startswith(("{", "[")):
            continue
        try:
            documents.append(json.loads(line))
        except ValueError:
            continue
    return documents or None

def classify(outcome: ProcessOutcome, structured: bool = False) -> SemverClassification:
    """Return the highest required semver bump found in `outcome`.

    Raises UnparseableOutput when the tool exited non-zero and its output
    neither names a required update nor reports the absence of changes.
    """
    combined = strip_ansi(outcome.combined).strip()
    required_updates = extract_required_updates(combined)
    if structured:
        data = _parse_json(strip_ansi(outcome.stdout).strip())
        if data is not None:
            required_updates |= extract_required_updates_from_json(data)
        else:
            logger.debug("Structured output requested but stdout is not JSON; using text matches only.")

    if not outcome.ok and not required_updates and not is_success_message(combined):
        raise UnparseableOutput(combined)

    rendered = ", ".join(sorted(c.value for c in required_updates)) or "none"
    logger.info(f"Detected required updates: {rendered}")
    return SemverClassification.highest(required_updates)
