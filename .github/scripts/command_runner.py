#!/usr/bin/env python3

"""
Command Runner
--------------
Runs external commands (git, cargo, tar) and captures their exit status and
text output as a ProcessOutcome. A non-zero exit status is returned to the
caller, not raised, since cargo semver-checks exits non-zero whenever a check
fails.

When doing manual testing, you can run the same commands directly in the
terminal. They are printed by the debug logging in debug mode.
"""

import logging
import os
import subprocess
from typing import Dict, List, Optional
from semver_errors import CommandError
from semver_models import ProcessOutcome

logger = logging.getLogger(__name__)

def run_command(cmd: List[str], cwd: Optional[str] = None, env: Optional[Dict[str, str]] = None) -> ProcessOutcome:
    """Run `cmd` to completion and return its outcome. Raises CommandError if it cannot be started."""
    logger.debug(f"Running command: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            env=env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise CommandError(f'Failed to run "{" ".join(cmd)}": {e}') from e
    return ProcessOutcome(returncode=result.returncode, stdout=result.stdout or "", stderr=result.stderr or "")

def command_env(**overrides: str) -> Dict[str, str]:
    """Return a copy of the process environment with `overrides` applied."""
    env = dict(os.environ)
    env.update(overrides)
    return env
