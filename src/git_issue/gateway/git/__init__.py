from git_issue.gateway.git.abc import Git
from git_issue.gateway.git.real import RealGit

__all__ = [
    "Git",
    "RealGit",
]
