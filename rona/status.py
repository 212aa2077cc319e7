"""
Status reconciliation: turns a repository status snapshot into the lists of
paths to stage, to delete from the index, and already deleted.
"""

import enum
import logging
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Sequence, Tuple

if TYPE_CHECKING:
    from .core import GitBackend

logger = logging.getLogger(__name__)


class FileStatus(enum.Flag):
    CURRENT = 0
    INDEX_NEW = enum.auto()
    INDEX_MODIFIED = enum.auto()
    INDEX_DELETED = enum.auto()
    INDEX_RENAMED = enum.auto()
    INDEX_TYPECHANGE = enum.auto()
    WT_NEW = enum.auto()
    WT_MODIFIED = enum.auto()
    WT_DELETED = enum.auto()
    WT_TYPECHANGE = enum.auto()
    WT_RENAMED = enum.auto()
    CONFLICTED = enum.auto()


INDEX_CHANGES = (
    FileStatus.INDEX_NEW
    | FileStatus.INDEX_MODIFIED
    | FileStatus.INDEX_RENAMED
    | FileStatus.INDEX_TYPECHANGE
)
STAGEABLE = (
    INDEX_CHANGES
    | FileStatus.WT_NEW
    | FileStatus.WT_MODIFIED
    | FileStatus.WT_TYPECHANGE
    | FileStatus.WT_RENAMED
    | FileStatus.CONFLICTED
)

# Porcelain v1 status letters, index column then worktree column.
_INDEX_CODES = {
    "A": FileStatus.INDEX_NEW,
    "C": FileStatus.INDEX_NEW,
    "M": FileStatus.INDEX_MODIFIED,
    "D": FileStatus.INDEX_DELETED,
    "R": FileStatus.INDEX_RENAMED,
    "T": FileStatus.INDEX_TYPECHANGE,
}
_WORKTREE_CODES = {
    "A": FileStatus.WT_NEW,
    "M": FileStatus.WT_MODIFIED,
    "D": FileStatus.WT_DELETED,
    "R": FileStatus.WT_RENAMED,
    "T": FileStatus.WT_TYPECHANGE,
}
_UNMERGED_CODES = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}


@dataclass(frozen=True)
class StatusEntry:
    """One path of a status snapshot. For renames, `path` is the new name."""

    path: str
    status: FileStatus
    original_path: str | None = None


@dataclass(frozen=True)
class FileStatusSet:
    to_stage: Tuple[str, ...] = ()
    to_delete: Tuple[str, ...] = ()
    already_deleted: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StageResult:
    staged: Tuple[str, ...] = ()
    deleted: Tuple[str, ...] = ()
    excluded: Tuple[str, ...] = ()
    dry_run: bool = False

    @property
    def staged_count(self) -> int:
        return len(self.staged)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)

    @property
    def excluded_count(self) -> int:
        return len(self.excluded)

    @property
    def is_empty(self) -> bool:
        return not self.staged and not self.deleted


def parse_porcelain_status(output: str) -> List[StatusEntry]:
    """
    Parses `git status --porcelain=v1 -z` output.
    Entries reported twice for the same path (e.g. a staged deletion and an
    untracked re-creation) are merged into one entry.
    """
    merged: Dict[str, StatusEntry] = {}
    fields = output.split("\0")
    index = 0
    while index < len(fields):
        record = fields[index]
        index += 1
        if len(record) < 4:
            continue

        code, path = record[:2], record[3:]
        original_path = None
        if "R" in code or "C" in code:
            original_path = fields[index] if index < len(fields) else None
            index += 1

        status = _status_from_code(code)
        if status is None:
            continue

        previous = merged.get(path)
        if previous is not None:
            status |= previous.status
            original_path = original_path or previous.original_path
        merged[path] = StatusEntry(path, status, original_path)

    return list(merged.values())


def _status_from_code(code: str) -> FileStatus | None:
    if code == "!!":
        return None
    if code == "??":
        return FileStatus.WT_NEW
    if code in _UNMERGED_CODES:
        return FileStatus.CONFLICTED

    status = FileStatus.CURRENT
    status |= _INDEX_CODES.get(code[0], FileStatus.CURRENT)
    status |= _WORKTREE_CODES.get(code[1], FileStatus.CURRENT)
    return status


def classify(entries: Iterable[StatusEntry]) -> FileStatusSet:
    """
    Splits a status snapshot into three disjoint path lists.

    to_stage:        new, modified, type-changed, renamed or conflicted paths;
                     a staged deletion only counts when the path was re-created.
    to_delete:       deleted in the worktree, deletion not yet in the index.
    already_deleted: deletion already recorded in the index.
    """
    to_stage: Dict[str, None] = {}
    to_delete: Dict[str, None] = {}
    already_deleted: Dict[str, None] = {}

    for entry in entries:
        status = entry.status

        if FileStatus.INDEX_DELETED in status:
            already_deleted[entry.path] = None
        elif FileStatus.WT_DELETED in status:
            to_delete[entry.path] = None

        if FileStatus.WT_DELETED in status:
            continue
        if FileStatus.INDEX_DELETED in status and not status & (
            FileStatus.WT_NEW | FileStatus.WT_MODIFIED
        ):
            continue
        if status & STAGEABLE:
            to_stage[entry.path] = None

    return FileStatusSet(
        to_stage=tuple(to_stage),
        to_delete=tuple(to_delete),
        already_deleted=tuple(already_deleted),
    )


def staged_changes(entries: Iterable[StatusEntry]) -> List[str]:
    """Paths added, modified, renamed or type-changed in the index."""
    return [entry.path for entry in entries if entry.status & INDEX_CHANGES]


def count_renamed(entries: Iterable[StatusEntry]) -> int:
    return sum(1 for entry in entries if FileStatus.INDEX_RENAMED in entry.status)


def _globstar_variants(pattern: str) -> Iterator[str]:
    """Yields the pattern with each `**/` independently kept or removed."""
    head, separator, tail = pattern.partition("**/")
    if not separator:
        yield pattern
        return
    for rest in _globstar_variants(tail):
        yield f"{head}**/{rest}"
        yield head + rest


def matches_any(path: str, patterns: Sequence[str]) -> bool:
    """
    Glob match where '*' also crosses directory separators.
    Every `**/` may also match nothing, so 'a/**/b' matches 'a/b'.
    """
    return any(
        fnmatchcase(path, variant)
        for pattern in patterns
        for variant in _globstar_variants(pattern)
    )


def stage(
    backend: "GitBackend",
    status_set: FileStatusSet,
    exclude_patterns: Sequence[str],
    dry_run: bool = False,
) -> StageResult:
    """
    Adds every `to_stage` path not matching an exclusion pattern and stages
    every `to_delete` deletion, in one backend call.
    Nothing is written in dry-run mode or when there is nothing to do.
    """
    staged: List[str] = []
    excluded: List[str] = []
    for path in status_set.to_stage:
        if matches_any(path, exclude_patterns):
            excluded.append(path)
        else:
            staged.append(path)

    result = StageResult(
        staged=tuple(staged),
        deleted=tuple(status_set.to_delete),
        excluded=tuple(excluded),
        dry_run=dry_run,
    )

    if dry_run or result.is_empty:
        return result

    logger.info(
        f"Staging {result.staged_count} paths, removing {result.deleted_count}, "
        f"excluding {result.excluded_count}"
    )
    backend.update_index(add=result.staged, remove=result.deleted)
    return result
