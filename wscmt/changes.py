"""Change-set detection for a single repository."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .git import GitRepo


@dataclass(frozen=True)
class FileStat:
    """Insertions and deletions for one changed file."""

    path: str
    insertions: int
    deletions: int


@dataclass
class ChangeSet:
    """Pending changes of a working tree at the moment of detection."""

    dirty: bool
    diff: Optional[str] = None
    summary: List[FileStat] = field(default_factory=list)

    @property
    def insertions(self) -> int:
        return sum(s.insertions for s in self.summary)

    @property
    def deletions(self) -> int:
        return sum(s.deletions for s in self.summary)

    def describe(self) -> str:
        if not self.dirty:
            return "clean"
        return "{} file(s) changed, {} insertion(s)(+), {} deletion(s)(-)".format(
            len(self.summary), self.insertions, self.deletions
        )


def _count(raw: str) -> int:
    # Binary files are reported as "-".
    return int(raw) if raw.isdigit() else 0


def parse_numstat(output: str) -> List[FileStat]:
    """Parse ``git diff --numstat`` output into file stats.

    A path that appears twice (once from the index diff, once from the
    working tree diff) is merged into a single entry.
    """
    stats: dict[str, FileStat] = {}
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t", 2)
        if len(parts) != 3:
            continue
        added, removed, path = parts
        path = path.strip()
        previous = stats.get(path)
        if previous is None:
            stats[path] = FileStat(path, _count(added), _count(removed))
        else:
            stats[path] = FileStat(
                path,
                previous.insertions + _count(added),
                previous.deletions + _count(removed),
            )
    return list(stats.values())


async def detect_changes(repo: GitRepo) -> ChangeSet:
    """Return the pending change set of ``repo``.

    A clean tree short-circuits: no diff or summary is computed. Untracked
    files are marked intent-to-add first so they show up in both.
    """
    if not await repo.has_changes():
        return ChangeSet(dirty=False)
    await repo.add_untracked_intent()
    diff = await repo.get_diff()
    summary = parse_numstat(await repo.get_numstat())
    return ChangeSet(dirty=True, diff=diff, summary=summary)
