"""Exit codes for CLI commands.

Every command maps its outcome to one of these codes. A deliberate skip is a
success and exits with ``OK``.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    These values are part of the pipeline contract and should remain stable:
    - 0: Success, or an idempotent skip
    - 1: Validation error (malformed version, bad TYPE, missing config)
    - 2: Precondition error (wrong branch, dirty tree, target exists)
    - 3: Git error (commit, tag, push rejected)
    - 4: Network error (pull request API unreachable or refused)
    - 5: I/O error (manifest unreadable, packaging failed)
    """

    OK = 0
    VALIDATION_ERROR = 1
    PRECONDITION_ERROR = 2
    GIT_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
