"""Collecting free text from the user's editor."""

from abc import ABC, abstractmethod
from pathlib import Path

import click

from git_issue.core.errors import EditorError

COMMENT_PREFIX = "#"


def strip_comments(text: str) -> str:
    """Drop template lines starting with '#' and surrounding blank lines."""
    lines = [line for line in text.splitlines() if not line.startswith(COMMENT_PREFIX)]
    return "\n".join(lines).strip()


class Editor(ABC):
    """Abstract interface for interactive text entry."""

    @abstractmethod
    def edit(self, template: str) -> str | None:
        """Open ``template`` for editing.

        Returns:
            The edited text, or None if the user quit without saving
        """
        ...


class ClickEditor(Editor):
    """Production editor using $VISUAL or $EDITOR through click."""

    def edit(self, template: str) -> str | None:
        try:
            return click.edit(template, extension=".txt", require_save=True)
        except click.ClickException as e:
            raise EditorError(e.format_message()) from e


def compose(editor: Editor, template: str, *, what: str) -> str:
    """Run the editor and return the text without template comments.

    Raises:
        EditorError: If the editor failed, was quit, or left no text
    """
    edited = editor.edit(template)
    if edited is None:
        raise EditorError(f"Editor aborted, no {what} saved")
    text = strip_comments(edited)
    if not text:
        raise EditorError(f"Aborting due to empty {what}")
    return text


def read_template(issues_dir: Path, name: str) -> str:
    """Contents of `.issues/templates/<name>`, or an empty string."""
    path = issues_dir / "templates" / name
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")
