from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from extrel.core.config import ReleaseConfig, load_config
from extrel.core.errors import ErrorCode
from extrel.core.result import Err
from extrel.git.repository import Repository
from extrel.output.console import ConsoleProtocol, RichConsole
from extrel.platform.http import HttpClient, RealHttpClient
from extrel.release.adapters import GitVcs, VcsAdapter
from extrel.release.model import PullRequestEvent

REPO_ROOT_ENV = "EXTREL_REPO_ROOT"


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: ReleaseConfig
    console: ConsoleProtocol
    vcs: VcsAdapter
    http: HttpClient

    @property
    def pr_event(self) -> PullRequestEvent:
        event = self.config.pr_event
        return PullRequestEvent(
            pr_id=event.pr_id,
            destination_branch=event.destination_branch,
            source_branch=event.source_branch,
        )


def repo_root() -> Path:
    override = os.environ.get(REPO_ROOT_ENV)
    if override:
        return Path(override).expanduser().resolve()
    return Path.cwd().resolve()


def build_context() -> CLIContext:
    """Assemble config and adapters once, at the process boundary."""
    root = repo_root()
    config_result = load_config(root, os.environ)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.VALIDATION_ERROR))

    return CLIContext(
        config=config_result.value,
        console=RichConsole(),
        vcs=GitVcs(Repository(root)),
        http=RealHttpClient(),
    )
