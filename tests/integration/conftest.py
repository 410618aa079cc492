"""Shared helpers for tests that run real git."""

import subprocess
from pathlib import Path


def git(repo: Path, *args: str) -> str:
    """Run git in ``repo`` and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def init_git_repo(repo: Path, branch: str) -> None:
    """Create a repository on ``branch`` with one initial commit."""
    git(repo, "init", "--quiet", "--initial-branch", branch)
    (repo / "README.md").write_text("# Project\n", encoding="utf-8")
    git(repo, "add", "README.md")
    git(repo, "commit", "--quiet", "-m", "Initial commit")


def head(repo: Path) -> str:
    return git(repo, "rev-parse", "HEAD")


def parents(repo: Path, rev: str) -> list[str]:
    return git(repo, "rev-list", "--parents", "-n", "1", rev).split()[1:]
