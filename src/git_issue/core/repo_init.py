"""Creating the `.issues` directory of a new issues repository."""

import logging
from pathlib import Path

from git_issue.core.errors import (
    CommitWriteError,
    GitRepoNotFoundError,
    IssuesDirExistsError,
    WritePropertyError,
)
from git_issue.core.source import ISSUES_DIRNAME
from git_issue.gateway.git.abc import Git
from git_issue.gateway.git.errors import CommitError, StagingError

logger = logging.getLogger(__name__)

DESCRIPTION_TEMPLATE = """

# Start with a one-line summary of the issue.  Leave a blank line and
# continue with the issue's detailed description.
#
# Remember:
# - Be precise
# - Be clear: explain how to reproduce the problem, step by step,
#   so others can reproduce the issue
# - Include only one problem per issue report
#
# Lines starting with '#' will be ignored, and an empty message aborts
# the issue addition.
"""

COMMENT_TEMPLATE = """

# Please write here a comment regarding the issue.
# Keep the conversation constructive and polite.
# Lines starting with '#' will be ignored, and an empty message aborts
# the issue addition.
"""

README = """This is an distributed issue tracking repository based on Git.
Visit [git-issue](https://github.com/dspinellis/git-issue) for more information.
"""

INIT_MESSAGE = "gi: Initialize issues repository\n\ngi init"


def create(path: Path, *, existing: bool, git: Git) -> Path:
    """Create and commit `path/.issues`.

    Args:
        path: Directory that receives `.issues`
        existing: Track `.issues` in the repository already containing
            ``path`` instead of giving it a repository of its own
        git: Git gateway

    Returns:
        The new `.issues` directory

    Raises:
        IssuesDirExistsError: If `.issues` is already present
        GitRepoNotFoundError: If ``existing`` and ``path`` is not in a work tree
        WritePropertyError: If a file could not be written or staged
        CommitWriteError: If the initial commit failed
    """
    issues_dir = path / ISSUES_DIRNAME
    if issues_dir.exists():
        raise IssuesDirExistsError(path)

    if existing:
        repo_root = git.get_repository_root(path)
        if repo_root is None:
            raise GitRepoNotFoundError()
        issues_dir.mkdir(parents=True)
    else:
        issues_dir.mkdir(parents=True)
        git.init_repository(issues_dir)
        repo_root = issues_dir

    files = {
        issues_dir / "config": "",
        issues_dir / "templates" / "description": DESCRIPTION_TEMPLATE,
        issues_dir / "templates" / "comment": COMMENT_TEMPLATE,
        issues_dir / "README.md": README,
    }
    for file_path, content in files.items():
        logger.debug("Writing %s", file_path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
            git.stage(repo_root, file_path)
        except OSError as e:
            raise WritePropertyError.from_os_error(e) from e
        except StagingError as e:
            raise WritePropertyError.from_staging(e) from e

    try:
        git.commit(repo_root, INIT_MESSAGE, allow_empty=False, no_verify=False)
    except CommitError as e:
        raise CommitWriteError.from_commit(e) from e
    return issues_dir
