from __future__ import annotations

from dataclasses import replace

import typer

from extrel.cli.commands._helpers import finish
from extrel.cli.context import build_context
from extrel.core.config import ReleaseConfig
from extrel.release.branching import bump_version, create_release_branch, cut_release

_TYPE_HELP = "Increment kind: Major|Minor|Patch (defaults to $TYPE)"


def _with_increment(config: ReleaseConfig, increment: str | None) -> ReleaseConfig:
    if increment is None:
        return config
    return replace(config, increment=increment)


def create_branch(
    increment: str | None = typer.Option(None, "--type", help=_TYPE_HELP),
) -> None:
    """Create and push release/vX.Y.Z from trunk; export the version to version.env."""
    ctx = build_context()
    config = _with_increment(ctx.config, increment)
    finish(create_release_branch(config, ctx.vcs, ctx.console), ctx)


def release(
    increment: str | None = typer.Option(None, "--type", help=_TYPE_HELP),
) -> None:
    """Branch from the remote trunk and commit the version bump there."""
    ctx = build_context()
    config = _with_increment(ctx.config, increment)
    finish(cut_release(config, ctx.vcs, ctx.console), ctx)


def bump(
    version: str = typer.Argument(..., help="New version (major.minor.patch)"),
) -> None:
    """Write the version into package.json and the extension manifest, commit, push."""
    ctx = build_context()
    finish(bump_version(ctx.config, version, ctx.vcs, ctx.console), ctx)
