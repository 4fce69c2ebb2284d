from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from extrel.core.result import Err, Ok, Result
from extrel.release.errors import ReleaseError

RELEASE_BRANCH_PREFIX = "release/v"
TAG_PREFIX = "v"

_NUM = r"(0|[1-9][0-9]*)"
_VERSION_RE = re.compile(rf"{_NUM}\.{_NUM}\.{_NUM}")
_RELEASE_BRANCH_RE = re.compile(rf"release/v{_NUM}\.{_NUM}\.{_NUM}")


class IncrementKind(Enum):
    MAJOR = "Major"
    MINOR = "Minor"
    PATCH = "Patch"


@dataclass(frozen=True, slots=True, order=True)
class SemanticVersion:
    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise ValueError(f"version components must be non-negative: {self!r}")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def increment(self, kind: IncrementKind) -> SemanticVersion:
        match kind:
            case IncrementKind.MAJOR:
                return SemanticVersion(self.major + 1, 0, 0)
            case IncrementKind.MINOR:
                return SemanticVersion(self.major, self.minor + 1, 0)
            case IncrementKind.PATCH:
                return SemanticVersion(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected increment kind: {kind}")

    @property
    def branch_name(self) -> str:
        return f"{RELEASE_BRANCH_PREFIX}{self}"

    @property
    def tag_name(self) -> str:
        return f"{TAG_PREFIX}{self}"


def parse_version(text: str) -> Result[SemanticVersion, ReleaseError]:
    m = _VERSION_RE.fullmatch(text)
    if m is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"invalid version format: {text!r}",
                hint="expected major.minor.patch, e.g. 1.2.3",
            )
        )
    return Ok(SemanticVersion(int(m.group(1)), int(m.group(2)), int(m.group(3))))


def _invalid_increment(value: object) -> Err[ReleaseError]:
    return Err(
        ReleaseError(
            kind="invalid_increment",
            message=f"invalid increment type: {value!r}",
            hint="TYPE must be one of: Major, Minor, Patch",
        )
    )


def parse_increment_kind(text: str) -> Result[IncrementKind, ReleaseError]:
    for kind in IncrementKind:
        if kind.value == text:
            return Ok(kind)
    return _invalid_increment(text)


def increment(
    version: SemanticVersion, kind: IncrementKind | str
) -> Result[SemanticVersion, ReleaseError]:
    """Increment ``version``; ``kind`` may be given in its config spelling."""
    if isinstance(kind, str):
        parsed = parse_increment_kind(kind)
        if isinstance(parsed, Err):
            return parsed
        kind = parsed.value
    elif not isinstance(kind, IncrementKind):
        return _invalid_increment(kind)
    return Ok(version.increment(kind))


def branch_name(version: SemanticVersion) -> str:
    return version.branch_name


def tag_name(version: SemanticVersion) -> str:
    return version.tag_name


def parse_release_branch(name: str) -> SemanticVersion | None:
    """Return the version a release branch encodes, or None if ``name`` is not one."""
    m = _RELEASE_BRANCH_RE.fullmatch(name)
    if m is None:
        return None
    return SemanticVersion(int(m.group(1)), int(m.group(2)), int(m.group(3)))
