from __future__ import annotations

import os
import subprocess
from typing import Mapping, Sequence

from .types import ProcessResult, TaskExecutionFailure, TaskTimeoutError


def execute(
    command: str | Sequence[str],
    working_dir: str | None = None,
    env: Mapping[str, str] | None = None,
    timeout_s: float | None = None,
) -> ProcessResult:
    """Run ``command`` to completion and capture its output.

    A string is handed to the shell, a sequence is executed directly.
    ``env`` is layered over the current environment. There is no retry.
    """
    shell = isinstance(command, str)
    display = command if shell else " ".join(command)

    try:
        completed = subprocess.run(
            command,
            shell=shell,
            cwd=working_dir or None,
            env={**os.environ, **(env or {})},
            capture_output=True,
            text=True,
            timeout=timeout_s,
        )
    except subprocess.TimeoutExpired as exc:
        raise TaskTimeoutError(display, timeout_s or 0.0) from exc
    except OSError as exc:
        raise TaskExecutionFailure(f"could not start '{display}': {exc}") from exc

    return ProcessResult(completed.returncode, completed.stdout, completed.stderr)
