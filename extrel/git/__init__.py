"""Git operations module.

Usage:
    from extrel.git import Repository

    repo = Repository(Path("."))
    branch = repo.current_branch()
"""

from extrel.git.repository import GitError, Repository

__all__ = ["GitError", "Repository"]
