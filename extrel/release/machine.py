"""Release lifecycle state machine.

One ``ReleaseMachine`` tracks one release attempt through its stages::

    IDLE -> BRANCH_REQUESTED -> BRANCH_CREATED -> COMMITTED -> PUSHED
         -> TAG_REQUESTED -> TAGGED -> PR_REQUESTED -> PR_CREATED

with ``FAILED`` and ``SKIPPED`` reachable from every non-terminal stage.
Flows enter the chain where their work starts (a tag flow goes straight from
IDLE to TAG_REQUESTED). Guards live in the flows; the machine only enforces
that stages are visited in a legal order and converts adapter failures into
``ReleaseError`` while recording the failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TypeVar

from extrel.core.result import Err, Ok, Result, Skipped
from extrel.git.repository import GitError
from extrel.release.errors import ReleaseError, ReleaseErrorKind
from extrel.release.model import ReleaseReport, ReleaseStage

__all__ = ["IllegalTransition", "ReleaseMachine", "ReleaseStage"]


_S = ReleaseStage

R = TypeVar("R")

_TRANSITIONS: dict[ReleaseStage, frozenset[ReleaseStage]] = {
    _S.IDLE: frozenset(
        {_S.BRANCH_REQUESTED, _S.COMMITTED, _S.TAG_REQUESTED, _S.PR_REQUESTED}
    ),
    _S.BRANCH_REQUESTED: frozenset({_S.BRANCH_CREATED}),
    # Branch-only flow pushes the fresh branch without a commit.
    _S.BRANCH_CREATED: frozenset({_S.COMMITTED, _S.PUSHED}),
    _S.COMMITTED: frozenset({_S.PUSHED}),
    _S.PUSHED: frozenset({_S.TAG_REQUESTED}),
    _S.TAG_REQUESTED: frozenset({_S.TAGGED}),
    _S.TAGGED: frozenset({_S.PR_REQUESTED}),
    _S.PR_REQUESTED: frozenset({_S.PR_CREATED}),
    _S.PR_CREATED: frozenset(),
    _S.FAILED: frozenset(),
    _S.SKIPPED: frozenset(),
}


class IllegalTransition(RuntimeError):
    """A flow tried to move the machine along an edge that does not exist."""

    def __init__(self, source: ReleaseStage, target: ReleaseStage) -> None:
        super().__init__(f"illegal release transition: {source.value} -> {target.value}")
        self.source = source
        self.target = target


def _empty_history() -> list[ReleaseStage]:
    return [ReleaseStage.IDLE]


def _empty_warnings() -> list[str]:
    return []


@dataclass
class ReleaseMachine:
    stage: ReleaseStage = ReleaseStage.IDLE
    history: list[ReleaseStage] = field(default_factory=_empty_history)
    warnings: list[str] = field(default_factory=_empty_warnings)
    error: ReleaseError | None = None
    skip_reason: str | None = None

    def can_advance(self, target: ReleaseStage) -> bool:
        if target.is_terminal:
            return not self.stage.is_terminal
        return target in _TRANSITIONS[self.stage]

    def advance(self, target: ReleaseStage) -> None:
        if not self.can_advance(target):
            raise IllegalTransition(self.stage, target)
        self.stage = target
        self.history.append(target)

    def fail(self, error: ReleaseError) -> Err[ReleaseError]:
        self.advance(ReleaseStage.FAILED)
        self.error = error
        return Err(error)

    def skip(self, reason: str) -> Skipped:
        self.advance(ReleaseStage.SKIPPED)
        self.skip_reason = reason
        return Skipped(reason)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def guard(
        self, condition: bool, *, kind: ReleaseErrorKind, message: str, hint: str | None = None
    ) -> Err[ReleaseError] | None:
        """Fail the machine unless ``condition`` holds.

        Returns the Err to propagate, or None when the guard passes.
        """
        if condition:
            return None
        return self.fail(ReleaseError(kind=kind, message=message, hint=hint))

    def call(self, result: Result[R, GitError], *, message: str) -> Result[R, ReleaseError]:
        """Unwrap a git adapter result, failing the machine on error."""
        if isinstance(result, Err):
            return self.fail(
                ReleaseError(kind="git_failed", message=message, hint=str(result.error))
            )
        return result

    def check(self, result: Result[R, ReleaseError]) -> Result[R, ReleaseError]:
        """Propagate a ReleaseError from a non-git step, failing the machine."""
        if isinstance(result, Err):
            return self.fail(result.error)
        return result

    def finish(self, report: ReleaseReport) -> Ok[ReleaseReport]:
        if self.warnings:
            report = replace(report, warnings=tuple(self.warnings))
        return Ok(report)
