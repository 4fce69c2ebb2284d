"""Release branch flows: cut a branch from trunk, bump manifests, commit, push."""

from __future__ import annotations

from extrel.core.config import ReleaseConfig
from extrel.core.result import Err, Ok, Outcome, Result
from extrel.output.console import ConsoleProtocol, Style
from extrel.release.adapters import VcsAdapter
from extrel.release.errors import ReleaseError
from extrel.release.machine import ReleaseMachine, ReleaseStage
from extrel.release.manifest import (
    parse_manifest_text,
    read_manifest_version,
    version_field,
    write_manifest_version,
    write_version_env,
)
from extrel.release.model import ReleaseReport
from extrel.release.version import (
    IncrementKind,
    SemanticVersion,
    parse_increment_kind,
    parse_version,
)


def require_increment(config: ReleaseConfig) -> Result[IncrementKind, ReleaseError]:
    if not config.increment:
        return Err(
            ReleaseError(
                kind="missing_config",
                message="TYPE environment variable not set",
                hint="TYPE=<Major|Minor|Patch>",
            )
        )
    return parse_increment_kind(config.increment)


def require_trunk(
    machine: ReleaseMachine, vcs: VcsAdapter, config: ReleaseConfig
) -> Result[str, ReleaseError]:
    branch = machine.call(vcs.current_branch(), message="could not determine current branch")
    if isinstance(branch, Err):
        return branch
    failed = machine.guard(
        branch.value == config.trunk_branch,
        kind="wrong_branch",
        message=f"must run from {config.trunk_branch}",
        hint=f"current branch: {branch.value}",
    )
    return failed or branch


def require_clean(machine: ReleaseMachine, vcs: VcsAdapter) -> Err[ReleaseError] | None:
    return machine.guard(
        vcs.is_working_tree_clean(),
        kind="dirty_tree",
        message="uncommitted changes present",
        hint="commit or stash your changes first",
    )


def _current_version(config: ReleaseConfig) -> Result[SemanticVersion, ReleaseError]:
    text = read_manifest_version(config.path(config.paths.package_json))
    if isinstance(text, Err):
        return text
    return parse_version(text.value)


def _write_manifests(
    config: ReleaseConfig, version: SemanticVersion, console: ConsoleProtocol
) -> Result[list[str], ReleaseError]:
    """Set the version in package.json and, if present, the extension manifest.

    Returns the repository-relative paths that were written.
    """
    previous = write_manifest_version(config.path(config.paths.package_json), version)
    if isinstance(previous, Err):
        return previous
    console.print(f"Current version: {previous.value or 'unknown'}", Style.DIM)
    console.print(f"Updated {config.paths.package_json}")
    written = [config.paths.package_json]

    manifest_path = config.path(config.paths.extension_manifest)
    if not manifest_path.is_file():
        console.warning(f"{config.paths.extension_manifest} not found, skipping manifest update")
        return Ok(written)

    updated = write_manifest_version(manifest_path, version)
    if isinstance(updated, Err):
        return updated
    console.print(f"Updated {config.paths.extension_manifest}")
    written.append(config.paths.extension_manifest)
    return Ok(written)


def _commit_bump(
    machine: ReleaseMachine,
    vcs: VcsAdapter,
    paths: list[str],
    version: SemanticVersion,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    staged = machine.call(vcs.stage(paths), message="failed to stage version files")
    if isinstance(staged, Err):
        return staged
    committed = machine.call(
        vcs.commit(f"Bump version to {version}"), message="failed to commit changes"
    )
    if isinstance(committed, Err):
        return committed
    machine.advance(ReleaseStage.COMMITTED)
    console.print(f"Committed version bump to {version}")
    return Ok(None)


def _push_after_commit(
    machine: ReleaseMachine,
    vcs: VcsAdapter,
    remote: str,
    ref: str,
    console: ConsoleProtocol,
    *,
    set_upstream: bool,
) -> None:
    """Push once the local commit exists; a failure here is only a warning."""
    pushed = vcs.push(remote, ref, set_upstream=set_upstream)
    if isinstance(pushed, Err):
        message = f"failed to push {ref} to {remote}; push manually ({pushed.error.message})"
        machine.warn(message)
        console.warning(message)
        return
    machine.advance(ReleaseStage.PUSHED)
    console.print(f"Pushed {ref} to {remote}")


def create_release_branch(
    config: ReleaseConfig,
    vcs: VcsAdapter,
    console: ConsoleProtocol,
    *,
    machine: ReleaseMachine | None = None,
) -> Outcome[ReleaseReport, ReleaseError]:
    """Create ``release/vX.Y.Z`` from trunk and push it with upstream tracking.

    The version is the one in ``package.json`` incremented by ``TYPE``; it is
    exported to ``version.env`` for later pipeline steps.
    """
    machine = machine or ReleaseMachine()

    kind = machine.check(require_increment(config))
    if isinstance(kind, Err):
        return kind
    branch = require_trunk(machine, vcs, config)
    if isinstance(branch, Err):
        return branch
    if failed := require_clean(machine, vcs):
        return failed

    current = machine.check(_current_version(config))
    if isinstance(current, Err):
        return current
    version = current.value.increment(kind.value)
    release_branch = version.branch_name

    console.print(f"Current version on {config.trunk_branch}: {current.value}")
    console.print(f"New version: {version}")
    machine.advance(ReleaseStage.BRANCH_REQUESTED)

    if failed := machine.guard(
        not vcs.branch_exists(release_branch),
        kind="branch_exists",
        message=f"branch {release_branch} already exists",
    ):
        return failed

    console.print(f"Creating release branch: {release_branch}")
    created = machine.call(
        vcs.create_and_checkout_branch(release_branch),
        message=f"failed to create branch {release_branch}",
    )
    if isinstance(created, Err):
        return created
    machine.advance(ReleaseStage.BRANCH_CREATED)

    # Nothing is committed yet, so a failed push leaves nothing worth keeping.
    pushed = machine.call(
        vcs.push(config.remote, release_branch, set_upstream=True),
        message=f"failed to push {release_branch} to {config.remote}",
    )
    if isinstance(pushed, Err):
        return pushed
    machine.advance(ReleaseStage.PUSHED)

    exported = machine.check(write_version_env(config.version_env_path, version))
    if isinstance(exported, Err):
        return exported

    console.success(f"Created and pushed branch: {release_branch}")
    console.print("Next steps:", Style.INFO)
    console.print("  1. Run the version bump to update version numbers")
    console.print("  2. Build and package the extension")
    console.print("  3. Deploy and create the merge-back PR")
    return machine.finish(
        ReleaseReport(
            summary=f"release branch {release_branch} created",
            version=version,
            branch=release_branch,
        )
    )


def cut_release(
    config: ReleaseConfig,
    vcs: VcsAdapter,
    console: ConsoleProtocol,
    *,
    machine: ReleaseMachine | None = None,
) -> Outcome[ReleaseReport, ReleaseError]:
    """Branch from the latest remote trunk and commit the version bump on it.

    The next version is computed from the remote trunk's ``package.json`` so
    a stale local trunk cannot produce an already-released version.
    """
    machine = machine or ReleaseMachine()

    kind = machine.check(require_increment(config))
    if isinstance(kind, Err):
        return kind
    branch = require_trunk(machine, vcs, config)
    if isinstance(branch, Err):
        return branch
    if failed := require_clean(machine, vcs):
        return failed

    console.print(f"git fetch {config.remote} {config.trunk_branch}", Style.DIM)
    fetched = machine.call(
        vcs.fetch(config.remote, config.trunk_branch),
        message=f"failed to fetch {config.remote}/{config.trunk_branch}",
    )
    if isinstance(fetched, Err):
        return fetched

    upstream = f"{config.remote}/{config.trunk_branch}"
    raw = machine.call(
        vcs.show_file(upstream, config.paths.package_json),
        message=f"could not read {config.paths.package_json} from {upstream}",
    )
    if isinstance(raw, Err):
        return raw
    current = machine.check(
        parse_manifest_text(raw.value, source=config.paths.package_json)
        .flat_map(lambda data: version_field(data, source=config.paths.package_json))
        .flat_map(parse_version)
    )
    if isinstance(current, Err):
        return current

    version = current.value.increment(kind.value)
    release_branch = version.branch_name
    console.print(f"Bumping version ({kind.value.value.lower()}): {current.value} -> {version}")
    machine.advance(ReleaseStage.BRANCH_REQUESTED)

    if failed := machine.guard(
        not vcs.branch_exists(release_branch),
        kind="branch_exists",
        message=f"branch {release_branch} already exists",
    ):
        return failed

    created = machine.call(
        vcs.create_and_checkout_branch(release_branch, upstream),
        message=f"failed to create branch {release_branch} from {upstream}",
    )
    if isinstance(created, Err):
        return created
    machine.advance(ReleaseStage.BRANCH_CREATED)

    written = machine.check(_write_manifests(config, version, console))
    if isinstance(written, Err):
        return written
    committed = _commit_bump(machine, vcs, written.value, version, console)
    if isinstance(committed, Err):
        return committed

    _push_after_commit(machine, vcs, config.remote, release_branch, console, set_upstream=True)

    console.success(f"Release branch {release_branch} created")
    console.print(f"The release pipeline will now run on {release_branch}", Style.DIM)
    console.print("The tag is created after the production deployment", Style.DIM)
    return machine.finish(
        ReleaseReport(
            summary=f"release branch {release_branch} created",
            version=version,
            branch=release_branch,
        )
    )


def bump_version(
    config: ReleaseConfig,
    version_text: str,
    vcs: VcsAdapter,
    console: ConsoleProtocol,
    *,
    machine: ReleaseMachine | None = None,
) -> Outcome[ReleaseReport, ReleaseError]:
    """Write ``version_text`` into the manifests, commit, and push ``HEAD``."""
    machine = machine or ReleaseMachine()

    version = machine.check(parse_version(version_text))
    if isinstance(version, Err):
        return version
    console.print(f"Setting version to: {version.value}")

    written = machine.check(_write_manifests(config, version.value, console))
    if isinstance(written, Err):
        return written
    committed = _commit_bump(machine, vcs, written.value, version.value, console)
    if isinstance(committed, Err):
        return committed

    _push_after_commit(machine, vcs, config.remote, "HEAD", console, set_upstream=False)

    return machine.finish(
        ReleaseReport(summary=f"version bumped to {version.value}", version=version.value)
    )
