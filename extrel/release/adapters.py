"""Capabilities the release flows consume.

Flows depend only on these protocols. ``GitVcs`` is the production
implementation backed by ``extrel.git.Repository``; tests substitute
in-memory fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from extrel.core.result import Err, Ok, Result
from extrel.git.repository import GitError, Repository
from extrel.release.errors import ReleaseError
from extrel.release.model import CreatedPullRequest, PullRequestSpec

__all__ = ["GitVcs", "PullRequestAdapter", "VcsAdapter"]


@runtime_checkable
class VcsAdapter(Protocol):
    """Version control operations on the local checkout."""

    def current_branch(self) -> Result[str, GitError]: ...

    def is_working_tree_clean(self) -> bool: ...

    def branch_exists(self, name: str) -> bool: ...

    def create_and_checkout_branch(
        self, name: str, start_point: str | None = None
    ) -> Result[None, GitError]: ...

    def checkout(self, name: str) -> Result[None, GitError]: ...

    def fetch(self, remote: str, ref: str) -> Result[None, GitError]: ...

    def pull(self, remote: str, ref: str) -> Result[None, GitError]: ...

    def stage(self, paths: list[str]) -> Result[None, GitError]: ...

    def commit(self, message: str) -> Result[None, GitError]: ...

    def push(self, remote: str, ref: str, *, set_upstream: bool) -> Result[None, GitError]: ...

    def tag_exists(self, name: str) -> Result[bool, GitError]: ...

    def create_annotated_tag(self, name: str, message: str) -> Result[None, GitError]: ...

    def has_parent_commit(self) -> bool: ...

    def show_file(self, rev: str, path: str) -> Result[str, GitError]: ...

    def describe_tag(self, name: str) -> Result[str, GitError]: ...


@runtime_checkable
class PullRequestAdapter(Protocol):
    """Pull request creation on the hosting service."""

    def create_pull_request(
        self, spec: PullRequestSpec
    ) -> Result[CreatedPullRequest, ReleaseError]: ...


class GitVcs:
    """VcsAdapter over a local git checkout."""

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def current_branch(self) -> Result[str, GitError]:
        return self._repo.current_branch()

    def is_working_tree_clean(self) -> bool:
        return self._repo.is_clean()

    def branch_exists(self, name: str) -> bool:
        return self._repo.branch_exists(name)

    def create_and_checkout_branch(
        self, name: str, start_point: str | None = None
    ) -> Result[None, GitError]:
        return self._repo.create_branch(name, start_point)

    def checkout(self, name: str) -> Result[None, GitError]:
        return self._repo.checkout(name)

    def fetch(self, remote: str, ref: str) -> Result[None, GitError]:
        return self._repo.fetch(remote, ref)

    def pull(self, remote: str, ref: str) -> Result[None, GitError]:
        return self._repo.pull(remote, ref)

    def stage(self, paths: list[str]) -> Result[None, GitError]:
        return self._repo.add(paths)

    def commit(self, message: str) -> Result[None, GitError]:
        return self._repo.commit(message)

    def push(self, remote: str, ref: str, *, set_upstream: bool) -> Result[None, GitError]:
        return self._repo.push(remote, ref, set_upstream=set_upstream)

    def tag_exists(self, name: str) -> Result[bool, GitError]:
        tags = self._repo.list_tags()
        if isinstance(tags, Err):
            return tags
        return Ok(name in tags.value)

    def create_annotated_tag(self, name: str, message: str) -> Result[None, GitError]:
        return self._repo.create_annotated_tag(name, message)

    def has_parent_commit(self) -> bool:
        return self._repo.has_commit("HEAD~1")

    def show_file(self, rev: str, path: str) -> Result[str, GitError]:
        return self._repo.show_file(rev, path)

    def describe_tag(self, name: str) -> Result[str, GitError]:
        return self._repo.show_tag(name)
