from __future__ import annotations

from extrel.core.config import ReleaseConfig
from extrel.core.result import Err, Outcome, Result
from extrel.output.console import ConsoleProtocol, Style
from extrel.release.adapters import PullRequestAdapter
from extrel.release.errors import ReleaseError
from extrel.release.machine import ReleaseMachine, ReleaseStage
from extrel.release.model import PullRequestSpec, ReleaseReport
from extrel.release.version import SemanticVersion, parse_version


def require_version(config: ReleaseConfig) -> Result[SemanticVersion, ReleaseError]:
    if not config.version:
        return Err(
            ReleaseError(
                kind="missing_config",
                message="VERSION environment variable not set",
                hint="VERSION=<major.minor.patch>",
            )
        )
    return parse_version(config.version)


def open_release_pull_request(
    config: ReleaseConfig,
    version: SemanticVersion,
    prs: PullRequestAdapter,
    console: ConsoleProtocol,
    *,
    machine: ReleaseMachine | None = None,
) -> Outcome[ReleaseReport, ReleaseError]:
    """Open the merge-back pull request ``release/vX.Y.Z`` -> trunk."""
    machine = machine or ReleaseMachine()
    spec = PullRequestSpec.merge_back(version, trunk=config.trunk_branch)

    console.header("Creating pull request")
    console.print(f"  Source branch: {spec.source_branch}")
    console.print(f"  Target branch: {spec.destination_branch}")
    console.print(f"  Title: {spec.title}")
    machine.advance(ReleaseStage.PR_REQUESTED)

    created = machine.check(prs.create_pull_request(spec))
    if isinstance(created, Err):
        return created
    machine.advance(ReleaseStage.PR_CREATED)

    pr = created.value
    console.success("Pull request created")
    if pr.id is None and pr.url is None:
        console.print("  (could not parse response for details)", Style.DIM)
    if pr.id is not None:
        console.print(f"  PR ID: {pr.id}")
    if pr.url is not None:
        console.print(f"  PR URL: {pr.url}")

    return machine.finish(
        ReleaseReport(
            summary=f"pull request {spec.title!r} created",
            version=version,
            branch=spec.source_branch,
            pull_request=pr,
        )
    )
