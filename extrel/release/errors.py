"""Error payload for release flows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from extrel.core.errors import ErrorCode

ReleaseErrorKind = Literal[
    # validation
    "invalid_version",
    "invalid_increment",
    "missing_config",
    # precondition
    "wrong_branch",
    "dirty_tree",
    "branch_exists",
    "missing_file",
    # adapter
    "git_failed",
    "api_failed",
    "packaging_failed",
    "io_failed",
]

ErrorCategory = Literal["validation", "precondition", "adapter"]

_CATEGORIES: dict[str, ErrorCategory] = {
    "invalid_version": "validation",
    "invalid_increment": "validation",
    "missing_config": "validation",
    "wrong_branch": "precondition",
    "dirty_tree": "precondition",
    "branch_exists": "precondition",
    "missing_file": "precondition",
    "git_failed": "adapter",
    "api_failed": "adapter",
    "packaging_failed": "adapter",
    "io_failed": "adapter",
}

_EXIT_CODES: dict[str, ErrorCode] = {
    "git_failed": ErrorCode.GIT_ERROR,
    "api_failed": ErrorCode.NETWORK_ERROR,
    "packaging_failed": ErrorCode.IO_ERROR,
    "io_failed": ErrorCode.IO_ERROR,
}


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """A failed release step.

    ``message`` names the failed precondition or adapter; ``hint`` carries
    the offending value or the adapter's raw output.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self.kind]

    @property
    def exit_code(self) -> ErrorCode:
        match self.category:
            case "validation":
                return ErrorCode.VALIDATION_ERROR
            case "precondition":
                return ErrorCode.PRECONDITION_ERROR
            case "adapter":
                return _EXIT_CODES[self.kind]

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
