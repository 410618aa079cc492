from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from git_issue.cli.cli import cli
from git_issue.core.context import IssueContext
from git_issue.gateway.git.real import RealGit
from git_issue.gateway.time.fake import FakeTime
from tests.fakes.editor import FakeEditor
from tests.integration.conftest import init_git_repo


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A git repository whose issues are tracked in the same repository."""
    repo = tmp_path / "repo"
    repo.mkdir()
    init_git_repo(repo, "main")
    result = invoke(repo, ["init", "--existing"])
    assert result.exit_code == 0, result.output
    return repo


def invoke(cwd: Path, args: list[str], *, editor: FakeEditor | None = None) -> Result:
    ctx = IssueContext.for_test(git=RealGit(FakeTime()), editor=editor, cwd=cwd)
    return CliRunner().invoke(cli, args, obj=ctx)


def new_issue(repo: Path, summary: str, *extra: str) -> str:
    result = invoke(repo, ["new", "-s", summary, *extra])
    assert result.exit_code == 0, result.output
    return result.output.strip().splitlines()[-1]
