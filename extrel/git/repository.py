"""Git repository abstraction.

The Repository class wraps the handful of git commands a release needs.
Everything that can fail returns a Result carrying a ``GitError`` with the
command and git's own diagnostic text.

Usage:
    repo = Repository(Path("."))

    if not repo.is_clean():
        ...

    match repo.push("origin", "release/v1.3.0", set_upstream=True):
        case Ok(_):
            console.success("pushed")
        case Err(e):
            console.error(f"git {e.command}: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from extrel.core.result import Err, Ok, Result
from extrel.platform.process import ProcessError
from extrel.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone"})

__all__ = [
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand line that failed (without ``git``)
        message: git's diagnostic output
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1

    def __str__(self) -> str:
        return f"git {self.command} failed (exit {self.returncode}): {self.message}"


class Repository:
    """A local git checkout.

    Attributes:
        path: Path to the working tree root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def current_branch(self) -> Result[str, GitError]:
        """Name of the checked-out branch (``HEAD`` when detached)."""
        return self._git(["rev-parse", "--abbrev-ref", "HEAD"]).map(str.strip)

    def is_clean(self) -> bool:
        """True if tracked files have no uncommitted changes.

        Mirrors ``git diff-index --quiet HEAD --``: untracked files do not
        count. Returns False if the state cannot be determined.
        """
        # Refresh stat info so touched-but-unchanged files are not reported;
        # its exit status is irrelevant, diff-index decides.
        self._git(["update-index", "-q", "--refresh"])
        return isinstance(self._git(["diff-index", "--quiet", "HEAD", "--"]), Ok)

    def branch_exists(self, name: str) -> bool:
        """True if a local branch ``name`` exists."""
        result = self._git(["show-ref", "--verify", "--quiet", f"refs/heads/{name}"])
        return isinstance(result, Ok)

    def list_tags(self) -> Result[list[str], GitError]:
        result = self._git(["tag", "-l"])
        if isinstance(result, Err):
            return result
        return Ok([line.strip() for line in result.value.splitlines() if line.strip()])

    def has_commit(self, rev: str) -> bool:
        """True if ``rev`` resolves to a commit (e.g. ``HEAD~1``)."""
        result = self._git(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"])
        return isinstance(result, Ok)

    def show_file(self, rev: str, path: str) -> Result[str, GitError]:
        """Contents of ``path`` as of ``rev``."""
        return self._git(["show", f"{rev}:{path}"])

    def create_branch(self, name: str, start_point: str | None = None) -> Result[None, GitError]:
        """Create ``name`` and check it out (``git checkout -b``)."""
        args = ["checkout", "-b", name]
        if start_point is not None:
            args.append(start_point)
        return self._git(args).map(lambda _: None)

    def checkout(self, name: str) -> Result[None, GitError]:
        return self._git(["checkout", name]).map(lambda _: None)

    def fetch(self, remote: str, ref: str) -> Result[None, GitError]:
        return self._git(["fetch", remote, ref]).map(lambda _: None)

    def pull(self, remote: str, ref: str) -> Result[None, GitError]:
        return self._git(["pull", remote, ref]).map(lambda _: None)

    def add(self, paths: list[str]) -> Result[None, GitError]:
        return self._git(["add", "--", *paths]).map(lambda _: None)

    def commit(self, message: str) -> Result[None, GitError]:
        return self._git(["commit", "-m", message]).map(lambda _: None)

    def push(self, remote: str, ref: str, *, set_upstream: bool = False) -> Result[None, GitError]:
        """Push ``ref`` (a branch, ``HEAD`` or a tag) to ``remote``."""
        args = ["push"]
        if set_upstream:
            args.append("-u")
        args.extend([remote, ref])
        return self._git(args).map(lambda _: None)

    def create_annotated_tag(self, name: str, message: str) -> Result[None, GitError]:
        return self._git(["tag", "-a", name, "-m", message]).map(lambda _: None)

    def show_tag(self, name: str) -> Result[str, GitError]:
        """Ref names, date and message of tag ``name``."""
        return self._git(
            ["show", "--no-patch", "--format=Tag: %D%nDate: %ad%nMessage: %B", name]
        )

    def _git(self, args: list[str]) -> Result[str, GitError]:
        """Run a git command in this repository."""
        result = self._run(args)
        if isinstance(result, Err):
            return Err(self._to_git_error(args, result.error))
        return result

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout, tool="git"
        )

    @staticmethod
    def _to_git_error(args: list[str], error: ProcessError) -> GitError:
        # Keep commit and tag messages out of the reported command line.
        shown: list[str] = []
        skip_next = False
        for arg in args:
            if skip_next:
                skip_next = False
                continue
            shown.append(arg)
            if arg == "-m":
                shown.append("<message>")
                skip_next = True
        return GitError(
            command=" ".join(shown),
            message=error.detail() or f"git {args[0] if args else ''} failed",
            returncode=error.returncode,
        )
