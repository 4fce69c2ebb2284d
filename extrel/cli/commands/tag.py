from __future__ import annotations

from extrel.cli.commands._helpers import finish
from extrel.cli.context import build_context
from extrel.release.tagging import handle_pr_merge, tag_on_version_change


def tag() -> None:
    """Tag trunk as vX.Y.Z when the last commit changed the package.json version."""
    ctx = build_context()
    finish(tag_on_version_change(ctx.config, ctx.vcs, ctx.console), ctx)


def tag_merge() -> None:
    """Tag after a merged pull request (BITBUCKET_PR_* variables)."""
    ctx = build_context()
    finish(handle_pr_merge(ctx.config, ctx.pr_event, ctx.vcs, ctx.console), ctx)
