"""Waiting for git's index.lock before touching the index.

Staging and committing both take the index lock of the checkout. A git
process started by an editor integration or a hook can still hold it when
the next property write runs, so writes poll until it is gone and give up
after a bounded wait.
"""

from pathlib import Path

from git_issue.gateway.time.abc import Time

# git itself exits 128 when it can not create index.lock
INDEX_LOCKED_EXIT_CODE = 128

DEFAULT_MAX_WAIT_SECONDS = 5.0


def index_locked_message(lock_path: Path, waited: float) -> str:
    return (
        f"{lock_path} is held by another git process (waited {waited:g}s).\n"
        "If no git process is running, remove the file and try again."
    )


def wait_for_index_lock(
    lock_path: Path,
    time: Time,
    *,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    poll_interval: float = 0.5,
) -> bool:
    """Wait for ``lock_path`` to disappear.

    ``lock_path`` is the checkout's own index.lock as reported by
    ``git rev-parse --git-path index.lock``; linked worktrees keep theirs
    below ``.git/worktrees/<name>``.

    Returns:
        True if the lock was released (or never existed), False if timed out.
    """
    elapsed = 0.0

    while lock_path.exists() and elapsed < max_wait_seconds:
        time.sleep(poll_interval)
        elapsed += poll_interval

    return not lock_path.exists()
