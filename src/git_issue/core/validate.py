"""Checking property files for a missing newline at end of file."""

from dataclasses import dataclass
from pathlib import Path

from git_issue.core.issue_id import IssueId, list_issue_ids


@dataclass(frozen=True)
class ValidationProblem:
    """A property file that does not end with a newline."""

    issue_id: IssueId
    path: Path
    fixed: bool

    @property
    def label(self) -> str:
        return f"{self.issue_id.short}/{self.path.name}"


def validate(issues_dir: Path, *, fix: bool) -> list[ValidationProblem]:
    """Find (and with ``fix`` repair) files lacking a trailing newline.

    Comment files are checked like the other property files. Empty files have
    no last line and are not reported. Repaired files are left unstaged for
    the user to review and commit.
    """
    problems: list[ValidationProblem] = []
    for issue_id in list_issue_ids(issues_dir):
        issue_dir = issue_id.path(issues_dir)
        for path in sorted(p for p in issue_dir.rglob("*") if p.is_file()):
            text = path.read_text(encoding="utf-8")
            if not text or text.endswith("\n"):
                continue
            if fix:
                path.write_text(text + "\n", encoding="utf-8")
            problems.append(ValidationProblem(issue_id=issue_id, path=path, fixed=fix))
    return problems
