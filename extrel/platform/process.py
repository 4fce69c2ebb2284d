"""External tool invocation for the release flows.

git and crx3 are the only programs extrel runs. Each call is labelled with
the tool it belongs to, so a failure reads "crx3 failed (exit 1): ..." in the
pipeline log rather than as a bare command line.

Usage:
    result = run(["git", "tag", "-l"], cwd=repo_root, timeout=30.0, tool="git")
    if isinstance(result, Err):
        console.error(f"{result.error}: {result.error.detail()}")
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from extrel.core.result import Err, Ok, Result

__all__ = ["NOT_COMPLETED", "ProcessError", "run"]

# Return code recorded when the tool never started or was killed on timeout.
NOT_COMPLETED = -1

_SHOWN_ARGS = 3


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A tool run that did not exit cleanly.

    ``tool`` defaults to the executable name when the caller gave no label.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    tool: str | None = None

    @property
    def label(self) -> str:
        if self.tool:
            return self.tool
        return self.command[0] if self.command else "process"

    @property
    def completed(self) -> bool:
        return self.returncode != NOT_COMPLETED

    def __str__(self) -> str:
        shown = " ".join(self.command[:_SHOWN_ARGS])
        if len(self.command) > _SHOWN_ARGS:
            shown += " ..."
        if not self.completed:
            return f"{self.label} did not complete: {shown}"
        return f"{self.label} failed (exit {self.returncode}): {shown}"

    def detail(self) -> str:
        """stderr, else stdout: whichever carries the tool's diagnostics."""
        return self.stderr.strip() or self.stdout.strip()


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
    tool: str | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its stdout.

    A non-zero exit, a timeout and a missing executable all come back as
    Err(ProcessError); nothing is raised.
    """
    command = tuple(cmd)
    label = tool or (cmd[0] if cmd else "process")

    def failure(returncode: int, stdout: str, stderr: str) -> Err[ProcessError]:
        return Err(ProcessError(command, returncode, stdout, stderr, tool=label))

    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return failure(NOT_COMPLETED, partial, f"{label} timed out after {timeout}s")
    except FileNotFoundError:
        return failure(NOT_COMPLETED, "", f"{label} not found: {cmd[0] if cmd else ''}")
    except OSError as e:
        return failure(NOT_COMPLETED, "", f"{label} could not be started: {e}")

    if proc.returncode != 0:
        return failure(proc.returncode, proc.stdout, proc.stderr)
    return Ok(proc.stdout)
