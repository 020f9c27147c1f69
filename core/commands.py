"""
External command helpers for the host auditor
"""
from __future__ import annotations
import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

LOGGER = logging.getLogger(__name__)

# exit codes used when the command never produced one
RC_TIMEOUT = 124
RC_NOT_EXECUTABLE = 126
RC_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    """Exit status and decoded stdout of one command."""
    returncode: int
    stdout: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def lines(self) -> list[str]:
        return self.stdout.splitlines()


Runner = Callable[..., CommandResult]
Which = Callable[[str], bool]


def has(binary: str) -> bool:
    """True when ``binary`` resolves on PATH."""
    return shutil.which(binary) is not None


def run(cmd: Sequence[str], timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None) -> CommandResult:
    """
    Run ``cmd`` and capture stdout; never raises.

    stderr is discarded. A missing binary, a timeout or an OS error each map
    to a non-zero return code with empty output.
    """
    log = logger or LOGGER
    try:
        proc = subprocess.run(
            list(cmd),
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError:
        log.debug("command not found: %s", cmd[0])
        return CommandResult(RC_NOT_FOUND)
    except subprocess.TimeoutExpired:
        log.debug("command timed out after %ss: %s", timeout, " ".join(cmd))
        return CommandResult(RC_TIMEOUT)
    except OSError as exc:
        log.debug("command failed to start: %s (%s)", " ".join(cmd), exc)
        return CommandResult(RC_NOT_EXECUTABLE)

    out = proc.stdout.decode("utf-8", errors="replace")
    if proc.returncode != 0:
        log.debug("command exited %d: %s", proc.returncode, " ".join(cmd))
    return CommandResult(proc.returncode, out)
