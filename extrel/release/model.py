from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from extrel.release.version import SemanticVersion

_PR_DESCRIPTION = """Automated release for version {version}

This PR merges the release branch back into {trunk} to keep version numbers synchronized.

## Changes
- Version bumped to {version}
- Extension built and packaged
- Deployed to dev and prod environments

Please review and merge to complete the release process."""


@dataclass(frozen=True, slots=True)
class PullRequestSpec:
    title: str
    description: str
    source_branch: str
    destination_branch: str
    close_source_branch: bool = False

    @classmethod
    def merge_back(cls, version: SemanticVersion, *, trunk: str) -> PullRequestSpec:
        """The PR that merges ``release/vX.Y.Z`` back into trunk."""
        return cls(
            title=f"Release v{version}",
            description=_PR_DESCRIPTION.format(version=version, trunk=trunk),
            source_branch=version.branch_name,
            destination_branch=trunk,
            close_source_branch=False,
        )


@dataclass(frozen=True, slots=True)
class CreatedPullRequest:
    # Either may be missing when the API response body cannot be parsed.
    id: int | None
    url: str | None


@dataclass(frozen=True, slots=True)
class PullRequestEvent:
    """PR metadata of the merge that triggered a trunk pipeline."""

    pr_id: str | None
    destination_branch: str | None
    source_branch: str | None

    @property
    def has_metadata(self) -> bool:
        return bool(self.pr_id and self.destination_branch)


class ReleaseStage(Enum):
    IDLE = "idle"
    BRANCH_REQUESTED = "branch_requested"
    BRANCH_CREATED = "branch_created"
    COMMITTED = "committed"
    PUSHED = "pushed"
    TAG_REQUESTED = "tag_requested"
    TAGGED = "tagged"
    PR_REQUESTED = "pr_requested"
    PR_CREATED = "pr_created"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (ReleaseStage.FAILED, ReleaseStage.SKIPPED)


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Facts observed once per invocation, before any decision is made.

    ``previous_version`` is None when there is no parent commit, the parent
    commit has no manifest (first release ever), or its version is unreadable.
    ``stage`` is the machine stage at the moment the facts were read.
    """

    current_branch: str
    current_version: SemanticVersion
    previous_version: SemanticVersion | None = None
    stage: ReleaseStage = ReleaseStage.IDLE


@dataclass(frozen=True, slots=True)
class ReleaseReport:
    """What a completed flow did.

    Attributes:
        summary: One line for the operator.
        version: The version the flow acted on.
        branch: Release branch created or used, if any.
        tag: Tag created, if any.
        pull_request: Pull request created, if any.
        warnings: Soft failures (e.g. a push that can be retried by hand).
    """

    summary: str
    version: SemanticVersion
    branch: str | None = None
    tag: str | None = None
    pull_request: CreatedPullRequest | None = None
    warnings: tuple[str, ...] = ()
