from __future__ import annotations

import os
from pathlib import Path

import typer

from extrel import __version__
from extrel.cli.commands.branch import bump, create_branch, release
from extrel.cli.commands.extension import package, update_xml
from extrel.cli.commands.pr import create_pr
from extrel.cli.commands.tag import tag, tag_merge
from extrel.cli.context import REPO_ROOT_ENV
from extrel.core.errors import ErrorCode

TRUNK_BRANCH_ENV = "EXTREL_TRUNK_BRANCH"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Release branches
app.command("create-release-branch")(create_branch)
app.command()(release)
app.command("bump-version")(bump)

# Tags and pull requests
app.command("tag-on-version-change")(tag)
app.command("handle-pr-merge")(tag_merge)
app.command("create-pr")(create_pr)

# Extension artifacts
app.command("generate-update-xml")(update_xml)
app.command("package-extension")(package)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Repository root (defaults to the current directory)",
    ),
    trunk: str | None = typer.Option(
        None,
        "--trunk",
        help="Trunk branch name (overrides extrel.toml)",
    ),
) -> None:
    if repo is not None:
        try:
            root = repo.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --repo: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.VALIDATION_ERROR))

        if not root.is_dir():
            typer.echo(f"error: --repo '{root}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.PRECONDITION_ERROR))

        os.environ[REPO_ROOT_ENV] = str(root)

    if trunk:
        os.environ[TRUNK_BRANCH_ENV] = trunk


def main() -> None:
    app()
