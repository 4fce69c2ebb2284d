from __future__ import annotations

from pathlib import Path

from extrel.core.result import Err, Ok, Skipped
from extrel.output.console import MockConsole
from extrel.release.machine import ReleaseMachine, ReleaseStage
from extrel.release.model import PullRequestEvent
from extrel.release.tagging import (
    handle_pr_merge,
    previous_version,
    previous_version_text,
    release_context,
    tag_on_version_change,
    tag_release_pr,
)
from extrel.release.version import SemanticVersion

from ..fakes import FakeVcs, git_error, make_repo, package_json

S = ReleaseStage


def _vcs(previous: str | None = "1.2.3", **kwargs: object) -> FakeVcs:
    vcs = FakeVcs(**kwargs)  # type: ignore[arg-type]
    if previous is not None:
        vcs.files["HEAD~1:package.json"] = package_json(previous)
    return vcs


def _release_pr(source: str = "release/v1.3.0", destination: str = "main") -> PullRequestEvent:
    return PullRequestEvent(pr_id="42", destination_branch=destination, source_branch=source)


class TestPreviousVersion:
    def test_reads_parent_commit(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path)
        assert previous_version(config, _vcs("1.0.0"), MockConsole()) == SemanticVersion(1, 0, 0)

    def test_no_parent_commit(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path)
        assert previous_version(config, _vcs(has_parent=False), MockConsole()) is None

    def test_file_absent_in_parent(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path)
        assert previous_version(config, _vcs(None), MockConsole()) is None

    def test_unparseable_previous_is_ignored(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path)
        console = MockConsole()

        assert previous_version(config, _vcs("next"), console) is None
        assert console.has_warning()

    def test_raw_text_is_not_validated(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path)
        console = MockConsole()

        assert previous_version_text(config, _vcs("1.3"), console) == "1.3"
        assert not console.has_warning()

    def test_unreadable_parent_manifest(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path)
        vcs = _vcs(None)
        vcs.files["HEAD~1:package.json"] = "{not json"
        console = MockConsole()

        assert previous_version_text(config, vcs, console) is None
        assert console.has_warning()


class TestReleaseContext:
    def test_records_stage(self) -> None:
        result = release_context("main", "1.3.0", "1.2.3", MockConsole(), stage=S.TAG_REQUESTED)

        assert isinstance(result, Ok)
        assert result.value.current_version == SemanticVersion(1, 3, 0)
        assert result.value.previous_version == SemanticVersion(1, 2, 3)
        assert result.value.stage == S.TAG_REQUESTED

    def test_defaults_to_idle(self) -> None:
        result = release_context("main", "1.3.0", None, MockConsole())

        assert isinstance(result, Ok)
        assert result.value.previous_version is None
        assert result.value.stage == S.IDLE

    def test_invalid_current_fails(self) -> None:
        result = release_context("main", "1.3", "1.2.3", MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"


class TestTagOnVersionChange:
    def test_tags_changed_version(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        vcs = _vcs("1.2.3")
        machine = ReleaseMachine()

        result = tag_on_version_change(config, vcs, MockConsole(), machine=machine)

        assert isinstance(result, Ok)
        assert result.value.tag == "v1.3.0"
        [(_, name, message)] = vcs.called("tag")
        assert name == "v1.3.0"
        assert message.startswith("Release version 1.3.0\n\n")
        assert "Previous version: 1.2.3" in message
        assert message.endswith("detected on main branch.")
        assert vcs.called("push") == [("push", "origin", "v1.3.0", "")]
        assert machine.history == [S.IDLE, S.TAG_REQUESTED, S.TAGGED]

    def test_unchanged_version_skips(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        vcs = _vcs("1.3.0")
        machine = ReleaseMachine()

        result = tag_on_version_change(config, vcs, MockConsole(), machine=machine)

        assert result == Skipped("version unchanged (1.3.0); no tag needed")
        assert vcs.called("tag") == []
        assert machine.stage == S.SKIPPED

    def test_first_release_is_tagged(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="0.1.0")
        vcs = _vcs(has_parent=False)

        result = tag_on_version_change(config, vcs, MockConsole())

        assert isinstance(result, Ok)
        [(_, _, message)] = vcs.called("tag")
        assert "Previous version: none" in message

    def test_existing_tag_skips(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        vcs = _vcs("1.2.3", tags={"v1.3.0"})

        result = tag_on_version_change(config, vcs, MockConsole())

        assert result == Skipped("tag v1.3.0 already exists")
        assert vcs.called("tag") == []
        assert vcs.called("push") == []

    def test_must_run_on_trunk(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")

        result = tag_on_version_change(config, _vcs(branch="release/v1.3.0"), MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "wrong_branch"

    def test_tag_listing_failure_propagates(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        vcs = _vcs(fail={"tag_exists": git_error("tag -l", "not a git repository")})

        result = tag_on_version_change(config, vcs, MockConsole())

        assert isinstance(result, Err)
        assert result.error.message == "failed to list tags"

    def test_tag_push_failure(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        machine = ReleaseMachine()

        result = tag_on_version_change(
            config, _vcs(fail={"push": git_error()}), MockConsole(), machine=machine
        )

        assert isinstance(result, Err)
        assert result.error.kind == "git_failed"
        assert machine.history == [S.IDLE, S.TAG_REQUESTED, S.TAGGED, S.FAILED]

    def test_invalid_current_version(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3")

        result = tag_on_version_change(config, _vcs(), MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"

    def test_unchanged_malformed_version_skips(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3")
        vcs = _vcs("1.3")
        machine = ReleaseMachine()

        result = tag_on_version_change(config, vcs, MockConsole(), machine=machine)

        assert result == Skipped("version unchanged (1.3); no tag needed")
        assert vcs.called("tag") == []
        assert machine.stage == S.SKIPPED

    def test_prints_tag_details(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        console = MockConsole()

        result = tag_on_version_change(config, _vcs("1.2.3"), console)

        assert isinstance(result, Ok)
        assert console.find("Tag: tag: v1.3.0")

    def test_tag_details_failure_only_warns(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        vcs = _vcs("1.2.3", fail={"describe_tag": git_error("show", "bad object")})
        console = MockConsole()

        result = tag_on_version_change(config, vcs, console)

        assert isinstance(result, Ok)
        assert result.value.tag == "v1.3.0"
        assert console.find("could not show tag details")


class TestTagReleasePr:
    def test_tags_branch_version(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        vcs = _vcs(branch="release/v1.3.0")

        result = tag_release_pr(config, _release_pr(), vcs, MockConsole())

        assert isinstance(result, Ok)
        assert result.value.warnings == ()
        assert vcs.calls[:2] == [("checkout", "main"), ("pull", "origin", "main")]
        [(_, name, message)] = vcs.called("tag")
        assert name == "v1.3.0"
        assert message == (
            "Release version 1.3.0\n\n"
            "Automatically created after merging release PR #42\n"
            "Source branch: release/v1.3.0\n"
            "Merged to: main"
        )

    def test_divergent_manifest_warns(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.2.3")
        console = MockConsole()

        result = tag_release_pr(config, _release_pr(), _vcs(), console)

        assert isinstance(result, Ok)
        assert result.value.tag == "v1.3.0"
        assert len(result.value.warnings) == 1
        assert "release branch encodes 1.3.0" in result.value.warnings[0]
        assert console.has_warning()

    def test_non_release_source_skips(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path)
        vcs = _vcs()

        result = tag_release_pr(config, _release_pr(source="feature/login"), vcs, MockConsole())

        assert result == Skipped("not a release PR")
        assert vcs.calls == []

    def test_pull_failure(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        vcs = _vcs(fail={"pull": git_error("pull", "conflict")})

        result = tag_release_pr(config, _release_pr(), vcs, MockConsole())

        assert isinstance(result, Err)
        assert result.error.message == "failed to pull origin/main"


class TestHandlePrMerge:
    def test_release_pr_uses_branch_version(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        # Parent commit has the same version: diffing alone would skip.
        vcs = _vcs("1.3.0")

        result = handle_pr_merge(config, _release_pr(), vcs, MockConsole())

        assert isinstance(result, Ok)
        assert result.value.tag == "v1.3.0"

    def test_rerun_of_same_merge_skips(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.4.0")
        vcs = _vcs("1.3.0")
        event = _release_pr(source="release/v1.4.0")

        first = handle_pr_merge(config, event, vcs, MockConsole())
        second = handle_pr_merge(config, event, vcs, MockConsole())

        assert isinstance(first, Ok)
        assert first.value.tag == "v1.4.0"
        assert second == Skipped("tag v1.4.0 already exists")
        assert len(vcs.called("tag")) == 1
        assert len(vcs.called("push")) == 1

    def test_other_destination_skips(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path)
        vcs = _vcs()

        result = handle_pr_merge(config, _release_pr(destination="develop"), vcs, MockConsole())

        assert result == Skipped("PR not merging to main; skipping tag creation")
        assert vcs.calls == []

    def test_non_release_pr_falls_back_to_version_diff(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        vcs = _vcs("1.2.3")
        console = MockConsole()

        result = handle_pr_merge(config, _release_pr(source="feature/login"), vcs, console)

        assert isinstance(result, Ok)
        assert result.value.tag == "v1.3.0"
        assert vcs.called("checkout") == []
        assert console.find("falling back to version change detection")

    def test_without_pr_metadata(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0")
        event = PullRequestEvent(pr_id=None, destination_branch=None, source_branch=None)

        result = handle_pr_merge(config, event, _vcs("1.3.0"), MockConsole())

        assert result == Skipped("version unchanged (1.3.0); no tag needed")

    def test_custom_trunk(self, tmp_path: Path) -> None:
        config = make_repo(tmp_path, version="1.3.0", trunk_branch="master")
        vcs = _vcs(branch="master")

        result = handle_pr_merge(config, _release_pr(destination="master"), vcs, MockConsole())

        assert isinstance(result, Ok)
        assert vcs.calls[0] == ("checkout", "master")
