"""Release tag flows.

Two independent detectors decide that trunk now holds a release:

- the PR path reads the merged pull request's source branch
  (``release/vX.Y.Z`` into trunk) and tags the version it encodes;
- the version-change path compares ``package.json`` at ``HEAD`` with
  ``HEAD~1`` and tags the new version.

Both end in ``_create_tag``, which is idempotent: an existing tag turns the
step into a skip.
"""

from __future__ import annotations

from extrel.core.config import ReleaseConfig
from extrel.core.result import Err, Ok, Outcome, Result
from extrel.output.console import ConsoleProtocol, Style
from extrel.release.adapters import VcsAdapter
from extrel.release.branching import require_trunk
from extrel.release.errors import ReleaseError
from extrel.release.machine import ReleaseMachine, ReleaseStage
from extrel.release.manifest import parse_manifest_text, read_manifest_version, version_field
from extrel.release.model import PullRequestEvent, ReleaseContext, ReleaseReport
from extrel.release.version import SemanticVersion, parse_release_branch, parse_version


def previous_version_text(
    config: ReleaseConfig, vcs: VcsAdapter, console: ConsoleProtocol
) -> str | None:
    """Raw ``package.json`` version as of ``HEAD~1``, or None on a first release."""
    if not vcs.has_parent_commit():
        console.print("No previous commit found - treating as initial version", Style.DIM)
        return None

    shown = vcs.show_file("HEAD~1", config.paths.package_json)
    if isinstance(shown, Err):
        console.print(
            f"No {config.paths.package_json} in previous commit - treating as initial version",
            Style.DIM,
        )
        return None

    text = parse_manifest_text(
        shown.value, source=f"HEAD~1:{config.paths.package_json}"
    ).flat_map(lambda data: version_field(data, source=config.paths.package_json))
    if isinstance(text, Err):
        console.warning(f"ignoring previous version: {text.error.message}")
        return None
    return text.value


def _lenient_version(text: str | None, console: ConsoleProtocol) -> SemanticVersion | None:
    if text is None:
        return None
    parsed = parse_version(text)
    if isinstance(parsed, Err):
        console.warning(f"ignoring previous version: {parsed.error.message}")
        return None
    return parsed.value


def previous_version(
    config: ReleaseConfig, vcs: VcsAdapter, console: ConsoleProtocol
) -> SemanticVersion | None:
    """Version in ``package.json`` as of ``HEAD~1``, or None on a first release."""
    return _lenient_version(previous_version_text(config, vcs, console), console)


def release_context(
    branch: str,
    current_text: str,
    previous_text: str | None,
    console: ConsoleProtocol,
    *,
    stage: ReleaseStage = ReleaseStage.IDLE,
) -> Result[ReleaseContext, ReleaseError]:
    """Validate raw manifest versions into a ReleaseContext.

    Only the current version must be well formed; an unreadable previous
    version is treated like a first release.
    """
    current = parse_version(current_text)
    if isinstance(current, Err):
        return current
    return Ok(
        ReleaseContext(
            current_branch=branch,
            current_version=current.value,
            previous_version=_lenient_version(previous_text, console),
            stage=stage,
        )
    )


def _create_tag(
    machine: ReleaseMachine,
    config: ReleaseConfig,
    vcs: VcsAdapter,
    console: ConsoleProtocol,
    *,
    version: SemanticVersion,
    message: str,
) -> Outcome[ReleaseReport, ReleaseError]:
    tag = version.tag_name
    machine.advance(ReleaseStage.TAG_REQUESTED)

    exists = machine.call(vcs.tag_exists(tag), message="failed to list tags")
    if isinstance(exists, Err):
        return exists
    if exists.value:
        return machine.skip(f"tag {tag} already exists")

    console.print(f"Creating release tag: {tag}")
    created = machine.call(
        vcs.create_annotated_tag(tag, message), message=f"failed to create tag {tag}"
    )
    if isinstance(created, Err):
        return created
    machine.advance(ReleaseStage.TAGGED)

    pushed = machine.call(
        vcs.push(config.remote, tag, set_upstream=False),
        message=f"failed to push tag {tag} to {config.remote}",
    )
    if isinstance(pushed, Err):
        return pushed

    console.success(f"Created and pushed tag: {tag}")
    details = vcs.describe_tag(tag)
    if isinstance(details, Ok):
        console.print(details.value.strip(), Style.DIM)
    else:
        console.warning(f"could not show tag details: {details.error}")
    return machine.finish(ReleaseReport(summary=f"tag {tag} created", version=version, tag=tag))


def tag_on_version_change(
    config: ReleaseConfig,
    vcs: VcsAdapter,
    console: ConsoleProtocol,
    *,
    machine: ReleaseMachine | None = None,
) -> Outcome[ReleaseReport, ReleaseError]:
    """Tag trunk when its last commit changed the ``package.json`` version."""
    machine = machine or ReleaseMachine()

    branch = require_trunk(machine, vcs, config)
    if isinstance(branch, Err):
        return branch

    current_text = machine.check(
        read_manifest_version(config.path(config.paths.package_json))
    )
    if isinstance(current_text, Err):
        return current_text
    console.print(f"Current version in {config.paths.package_json}: {current_text.value}")
    previous_text = previous_version_text(config, vcs, console)
    if previous_text is not None:
        console.print(f"Previous version in {config.paths.package_json}: {previous_text}")

    # Raw text: an unchanged malformed version is a no-op, not an error.
    if previous_text == current_text.value:
        return machine.skip(f"version unchanged ({current_text.value}); no tag needed")

    ctx = machine.check(
        release_context(
            branch.value, current_text.value, previous_text, console, stage=machine.stage
        )
    )
    if isinstance(ctx, Err):
        return ctx
    current = ctx.value.current_version
    previous = ctx.value.previous_version

    console.print(f"Version changed from '{previous or ''}' to '{current}'")
    message = (
        f"Release version {current}\n\n"
        f"This tag marks the release of version {current}.\n"
        f"Previous version: {previous or 'none'}\n\n"
        f"Created automatically after version change detected on {config.trunk_branch} branch."
    )
    return _create_tag(machine, config, vcs, console, version=current, message=message)


def tag_release_pr(
    config: ReleaseConfig,
    event: PullRequestEvent,
    vcs: VcsAdapter,
    console: ConsoleProtocol,
    *,
    machine: ReleaseMachine | None = None,
) -> Outcome[ReleaseReport, ReleaseError]:
    """Tag the version of a merged ``release/vX.Y.Z`` -> trunk pull request."""
    machine = machine or ReleaseMachine()

    version = parse_release_branch(event.source_branch or "")
    if event.destination_branch != config.trunk_branch or version is None:
        return machine.skip("not a release PR")

    console.success(f"Detected release PR from branch: {event.source_branch}")
    console.print(f"Release version: {version}")

    checked_out = machine.call(
        vcs.checkout(config.trunk_branch), message=f"failed to check out {config.trunk_branch}"
    )
    if isinstance(checked_out, Err):
        return checked_out
    pulled = machine.call(
        vcs.pull(config.remote, config.trunk_branch),
        message=f"failed to pull {config.remote}/{config.trunk_branch}",
    )
    if isinstance(pulled, Err):
        return pulled

    _warn_on_divergence(machine, config, version, console)

    message = (
        f"Release version {version}\n\n"
        f"Automatically created after merging release PR #{event.pr_id}\n"
        f"Source branch: {event.source_branch}\n"
        f"Merged to: {event.destination_branch}"
    )
    return _create_tag(machine, config, vcs, console, version=version, message=message)


def _warn_on_divergence(
    machine: ReleaseMachine,
    config: ReleaseConfig,
    version: SemanticVersion,
    console: ConsoleProtocol,
) -> None:
    """Both detectors must agree on the tag; report when trunk says otherwise."""
    text = read_manifest_version(config.path(config.paths.package_json))
    if isinstance(text, Err):
        message = f"cannot cross-check release version: {text.error.message}"
    else:
        manifest_version = parse_version(text.value)
        if isinstance(manifest_version, Ok) and manifest_version.value == version:
            return
        message = (
            f"{config.paths.package_json} on {config.trunk_branch} has version {text.value}, "
            f"but the release branch encodes {version}"
        )
    machine.warn(message)
    console.warning(message)


def handle_pr_merge(
    config: ReleaseConfig,
    event: PullRequestEvent,
    vcs: VcsAdapter,
    console: ConsoleProtocol,
    *,
    machine: ReleaseMachine | None = None,
) -> Outcome[ReleaseReport, ReleaseError]:
    """Tag after a merge to trunk, preferring PR metadata over version diffing."""
    machine = machine or ReleaseMachine()
    console.header("Checking if this is a release PR merge")

    if event.has_metadata:
        console.print(f"PR ID: {event.pr_id}")
        console.print(f"Destination branch: {event.destination_branch}")
        if event.destination_branch != config.trunk_branch:
            return machine.skip(f"PR not merging to {config.trunk_branch}; skipping tag creation")
        if event.source_branch and parse_release_branch(event.source_branch) is not None:
            return tag_release_pr(config, event, vcs, console, machine=machine)

    console.info("Not a release PR merge; falling back to version change detection")
    return tag_on_version_change(config, vcs, console, machine=machine)
