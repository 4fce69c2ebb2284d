"""Result types for explicit error handling.

Every fallible operation in extrel returns a ``Result[T, E]`` instead of
raising. Release flows additionally return ``Skipped`` when a step is already
satisfied (tag exists, version unchanged, not a release PR), which is neither
a success value nor an error.

Usage:
    def parse_port(text: str) -> Result[int, str]:
        if not text.isdigit():
            return Err(f"not a port: {text}")
        return Ok(int(text))

    match tag_on_version_change(...):
        case Ok(report):
            console.success(report.summary)
        case Skipped(reason):
            console.info(reason)
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeGuard, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result carrying ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Apply ``f`` to the value and wrap the result in Ok."""
        return Ok(f(self.value))

    def map_err(self, f: Callable[[E], F]) -> Ok[T]:
        return self

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain another fallible step onto this value."""
        return f(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result carrying ``error``."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> None:
        """Raises ValueError: there is no value to unwrap.

        Raises:
            ValueError: Always.
        """
        raise ValueError(f"called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, f: Callable[[T], U]) -> Err[E]:
        return self

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        """Apply ``f`` to the error and wrap the result in Err."""
        return Err(f(self.error))

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Err[E]:
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


@dataclass(frozen=True, slots=True)
class Skipped:
    """A deliberate no-op: the requested step was already satisfied.

    Attributes:
        reason: Human-readable explanation shown to the operator.
    """

    reason: str

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Skipped({self.reason!r})"


Result = Union[Ok[T], Err[E]]

# Outcome of a release flow: done, deliberately skipped, or failed.
Outcome = Union[Ok[T], Skipped, Err[E]]


def is_ok(result: Result[T, E] | Outcome[T, E]) -> TypeGuard[Ok[T]]:
    """Type guard that narrows a Result or Outcome to Ok."""
    return isinstance(result, Ok)


def is_err(result: Result[T, E] | Outcome[T, E]) -> TypeGuard[Err[E]]:
    """Type guard that narrows a Result or Outcome to Err."""
    return isinstance(result, Err)


def is_skipped(result: Outcome[T, E]) -> TypeGuard[Skipped]:
    """Type guard that narrows an Outcome to Skipped."""
    return isinstance(result, Skipped)
