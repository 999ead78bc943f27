"""Common utilities and types for manifest reconciliation."""

import logging
import subprocess
from dataclasses import dataclass, field
from typing import Optional

from errors import InvocationFailure

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Result of a lifecycle verb, as reported at the CLI boundary."""
    success: bool
    message: str = ''
    duration: float = 0.0
    context_updates: dict = field(default_factory=dict)


@dataclass
class InvocationResult:
    """Outcome of one external command."""
    returncode: int
    stdout: bytes = b''
    stderr: bytes = b''


def run_command(
    cmd: list[str],
    stdin: Optional[bytes] = None,
    capture_stdout: bool = False,
) -> InvocationResult:
    """Run a command to completion and return its result.

    stdin is written in full before waiting on the process. stderr is always
    captured; stdout only when capture_stdout is set, otherwise the child
    inherits ours.

    Raises:
        InvocationFailure: On nonzero exit or when the command can't start
    """
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            input=stdin if stdin is not None else b'',
            stdout=subprocess.PIPE if capture_stdout else None,
            stderr=subprocess.PIPE,
            check=False  # We handle return codes explicitly
        )
    except OSError as e:
        raise InvocationFailure(cmd, cause=e) from e

    stdout = result.stdout if capture_stdout else b''
    if result.returncode != 0:
        raise InvocationFailure(cmd, returncode=result.returncode, stderr=result.stderr)
    return InvocationResult(result.returncode, stdout, result.stderr)
