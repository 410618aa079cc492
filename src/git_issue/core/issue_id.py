"""Issue identifiers and prefix resolution.

An identifier is the full hash of the empty commit that created the issue.
On disk it fans out into a two-character shard directory and a leaf
directory holding the rest of the hash:

    .issues/issues/2d/9deaf1b8b146d7e3c4c92133532b314da3e350/

Resolution of user-supplied prefixes is split in two: ``list_issue_ids``
scans the shard directories once, and ``resolve_prefix`` is a pure function
over that sorted listing.
"""

from __future__ import annotations

import bisect
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from git_issue.core.errors import IssueNotFoundError, MultipleIssuesFoundError

SHORT_ID_LENGTH = 8
SHARD_LENGTH = 2


@dataclass(frozen=True, order=True)
class IssueId:
    """Full identifier of one issue."""

    id: str

    def __str__(self) -> str:
        return self.id

    @property
    def short(self) -> str:
        """First eight characters, for display only."""
        return self.id[:SHORT_ID_LENGTH]

    @property
    def shard(self) -> str:
        return self.id[:SHARD_LENGTH]

    def path(self, issues_dir: Path) -> Path:
        """Directory holding this issue's property files."""
        return issues_dir / "issues" / self.id[:SHARD_LENGTH] / self.id[SHARD_LENGTH:]

    @classmethod
    def from_path(cls, path: Path) -> IssueId:
        """Rebuild an identifier from a ``<shard>/<leaf>`` directory."""
        return cls(path.parent.name + path.name)


def _list_dirs(path: Path) -> list[Path]:
    if not path.is_dir():
        return []
    return sorted(p for p in path.iterdir() if p.is_dir())


def list_issue_ids(issues_dir: Path) -> list[IssueId]:
    """All issue identifiers under ``issues_dir``, sorted."""
    ids = [
        IssueId.from_path(leaf)
        for shard in _list_dirs(issues_dir / "issues")
        for leaf in _list_dirs(shard)
    ]
    ids.sort()
    return ids


def _single(needle: str, candidates: list[IssueId]) -> IssueId:
    if not candidates:
        raise IssueNotFoundError(needle)
    if len(candidates) > 1:
        raise MultipleIssuesFoundError(needle, candidates)
    return candidates[0]


def resolve_prefix(needle: str, listing: Sequence[IssueId]) -> IssueId:
    """Resolve a possibly abbreviated identifier against a sorted listing.

    - One character lists every shard. A single shard is resolved as a
      two-character needle; otherwise every issue is a candidate.
    - Two characters name a shard exactly.
    - Three or more characters match an identifier exactly, or else act as a
      prefix. An exact match wins even when longer identifiers share it.

    Raises:
        IssueNotFoundError: If no identifier matches
        MultipleIssuesFoundError: If more than one identifier matches
    """
    if not needle:
        raise IssueNotFoundError(needle)

    if len(needle) == 1:
        shards = sorted({issue_id.shard for issue_id in listing})
        if len(shards) == 1:
            return resolve_prefix(shards[0], listing)
        if not shards:
            raise IssueNotFoundError(needle)
        raise MultipleIssuesFoundError(needle, list(listing))

    if len(needle) == SHARD_LENGTH:
        return _single(needle, [i for i in listing if i.shard == needle])

    ids = [issue_id.id for issue_id in listing]
    start = bisect.bisect_left(ids, needle)
    if start < len(ids) and ids[start] == needle:
        return listing[start]

    candidates = []
    for position in range(start, len(ids)):
        if not ids[position].startswith(needle):
            break
        candidates.append(listing[position])
    return _single(needle, candidates)


def resolve(needle: str, issues_dir: Path) -> IssueId:
    """Resolve a needle against the issues stored under ``issues_dir``.

    An existing ``<shard>/<leaf>`` directory spelled by the needle is trusted
    without scanning the shard.
    """
    if len(needle) > SHARD_LENGTH:
        candidate = IssueId(needle)
        if candidate.path(issues_dir).is_dir():
            return candidate
    return resolve_prefix(needle, list_issue_ids(issues_dir))
