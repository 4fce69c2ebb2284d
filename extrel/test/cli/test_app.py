from __future__ import annotations

from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from extrel import __version__
from extrel.cli.app import TRUNK_BRANCH_ENV, _main, app
from extrel.cli.context import REPO_ROOT_ENV, build_context
from extrel.core.errors import ErrorCode

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_commands_are_registered() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for name in (
        "create-release-branch",
        "release",
        "bump-version",
        "create-pr",
        "tag-on-version-change",
        "handle-pr-merge",
        "generate-update-xml",
        "package-extension",
    ):
        assert name in result.stdout


def test_repo_must_exist(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(REPO_ROOT_ENV, str(tmp_path))

    result = runner.invoke(app, ["--repo", str(tmp_path / "missing"), "tag-on-version-change"])

    assert result.exit_code == int(ErrorCode.PRECONDITION_ERROR)


def test_options_feed_build_context(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # Registered so monkeypatch restores them after the callback writes them.
    monkeypatch.setenv(REPO_ROOT_ENV, "unused")
    monkeypatch.setenv(TRUNK_BRANCH_ENV, "unused")

    _main(version=False, repo=tmp_path, trunk="master")
    ctx = build_context()

    assert ctx.config.root == tmp_path.resolve()
    assert ctx.config.trunk_branch == "master"


def test_build_context_rejects_bad_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "extrel.toml").write_text("[release\n", encoding="utf-8")
    monkeypatch.setenv(REPO_ROOT_ENV, str(tmp_path))

    with pytest.raises(typer.Exit) as exc:
        build_context()

    assert exc.value.exit_code == int(ErrorCode.VALIDATION_ERROR)
