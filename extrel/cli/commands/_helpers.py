"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from extrel.core.result import Err, Ok, Outcome, Result, Skipped
from extrel.output.console import Style
from extrel.release.errors import ReleaseError
from extrel.release.model import ReleaseReport

if TYPE_CHECKING:
    from extrel.cli.context import CLIContext

T = TypeVar("T")


def fail(error: ReleaseError, ctx: CLIContext) -> NoReturn:
    """Print ``error`` and exit with the code for its kind."""
    ctx.console.error(error.message)
    if error.hint:
        ctx.console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(error.exit_code))


def unwrap_or_exit(result: Result[T, ReleaseError], ctx: CLIContext) -> T:
    """Return the Ok value, or exit on Err.

    Reduces the boilerplate for setup steps that run before a flow:
        version = unwrap_or_exit(require_version(ctx.config), ctx)
    """
    if isinstance(result, Err):
        fail(result.error, ctx)
    return result.value


def finish(outcome: Outcome[ReleaseReport, ReleaseError], ctx: CLIContext) -> None:
    """Render a flow outcome. Skips are successes; errors exit non-zero."""
    match outcome:
        case Ok(report):
            for warning in report.warnings:
                ctx.console.print(f"pending: {warning}", Style.DIM)
            ctx.console.success(report.summary)
        case Skipped(reason):
            ctx.console.info(f"{reason} (skipped)")
        case Err(error):
            fail(error, ctx)
