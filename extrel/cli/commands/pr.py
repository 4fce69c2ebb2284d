from __future__ import annotations

from dataclasses import replace

import typer

from extrel.cli.commands._helpers import finish, unwrap_or_exit
from extrel.cli.context import build_context
from extrel.release.bitbucket import BitbucketClient
from extrel.release.pull_request import open_release_pull_request, require_version


def create_pr(
    version: str | None = typer.Argument(None, help="Release version (defaults to $VERSION)"),
) -> None:
    """Open the merge-back pull request release/vX.Y.Z -> trunk on Bitbucket."""
    ctx = build_context()
    config = ctx.config if version is None else replace(ctx.config, version=version)

    release_version = unwrap_or_exit(require_version(config), ctx)
    client = unwrap_or_exit(BitbucketClient.from_config(config.bitbucket, ctx.http), ctx)
    finish(open_release_pull_request(config, release_version, client, ctx.console), ctx)
