from __future__ import annotations

from pathlib import Path

from extrel.core.config import ReleaseConfig
from extrel.core.result import Err, Ok
from extrel.output.console import MockConsole
from extrel.release.errors import ReleaseError
from extrel.release.machine import ReleaseMachine, ReleaseStage
from extrel.release.model import CreatedPullRequest
from extrel.release.pull_request import open_release_pull_request, require_version
from extrel.release.version import SemanticVersion

from ..fakes import FakePullRequests

VERSION = SemanticVersion(1, 3, 0)


def test_require_version(tmp_path: Path) -> None:
    assert require_version(ReleaseConfig(root=tmp_path, version="1.3.0")) == Ok(VERSION)

    missing = require_version(ReleaseConfig(root=tmp_path))
    assert isinstance(missing, Err)
    assert missing.error.message == "VERSION environment variable not set"

    malformed = require_version(ReleaseConfig(root=tmp_path, version="v1.3"))
    assert isinstance(malformed, Err)
    assert malformed.error.kind == "invalid_version"


def test_opens_merge_back_pr(tmp_path: Path) -> None:
    prs = FakePullRequests()
    machine = ReleaseMachine()
    console = MockConsole()

    result = open_release_pull_request(
        ReleaseConfig(root=tmp_path), VERSION, prs, console, machine=machine
    )

    assert isinstance(result, Ok)
    assert result.value.pull_request == CreatedPullRequest(id=7, url="https://example.test/pr/7")
    spec = prs.specs[0]
    assert spec.title == "Release v1.3.0"
    assert spec.source_branch == "release/v1.3.0"
    assert spec.destination_branch == "main"
    assert machine.history == [
        ReleaseStage.IDLE,
        ReleaseStage.PR_REQUESTED,
        ReleaseStage.PR_CREATED,
    ]
    assert console.find("PR ID: 7")
    assert console.find("PR URL: https://example.test/pr/7")


def test_custom_trunk(tmp_path: Path) -> None:
    prs = FakePullRequests()
    config = ReleaseConfig(root=tmp_path, trunk_branch="master")

    open_release_pull_request(config, VERSION, prs, MockConsole())

    assert prs.specs[0].destination_branch == "master"
    assert "back into master" in prs.specs[0].description


def test_unparseable_response_still_succeeds(tmp_path: Path) -> None:
    prs = FakePullRequests(Ok(CreatedPullRequest(id=None, url=None)))
    console = MockConsole()

    result = open_release_pull_request(ReleaseConfig(root=tmp_path), VERSION, prs, console)

    assert isinstance(result, Ok)
    assert console.find("(could not parse response for details)")


def test_api_failure(tmp_path: Path) -> None:
    error = ReleaseError(kind="api_failed", message="failed to create pull request: HTTP 409")
    machine = ReleaseMachine()

    prs = FakePullRequests(Err(error))

    result = open_release_pull_request(
        ReleaseConfig(root=tmp_path), VERSION, prs, MockConsole(), machine=machine
    )

    assert result == Err(error)
    assert machine.stage == ReleaseStage.FAILED
    assert machine.history[-2] == ReleaseStage.PR_REQUESTED
