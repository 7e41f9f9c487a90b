"""Queries against the tracked git repository."""

import logging
from pathlib import Path
from typing import Optional

import git
from git import Repo

logger = logging.getLogger(__name__)


def find_project_root(start: Optional[Path] = None) -> Optional[Path]:
    """Find the nearest directory containing a .git directory."""
    current_dir = Path(start or Path.cwd()).resolve()

    for parent in [current_dir] + list(current_dir.parents):
        if (parent / ".git").exists():
            return parent

    return None


def current_author_name(project_root: Path) -> Optional[str]:
    """Get ``user.name`` from the git configuration."""
    try:
        name = git.Git(str(project_root)).config("--get", "user.name")
    except git.exc.CommandError as e:
        logger.warning("git config user.name failed. %s", e)
        return None

    name = name.strip()
    return name or None


def commit_message(project_root: Path, commit_hash: str) -> Optional[str]:
    """Get the full message of a commit."""
    try:
        repo = Repo(project_root)
        message = repo.commit(commit_hash).message
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
        logger.warning("Not a git repository: %s", e)
        return None
    except (git.exc.ODBError, ValueError) as e:
        logger.warning("Could not read commit %s: %s", commit_hash, e)
        return None

    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    return message.rstrip("\n")


def current_branch(project_root: Path) -> Optional[str]:
    """Get the name of the checked out branch, None on a detached HEAD."""
    try:
        return Repo(project_root).active_branch.name
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
        return None
    except TypeError:
        # Detached HEAD
        return None
