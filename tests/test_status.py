# tests/test_status.py
from unittest.mock import MagicMock

import pytest

from rona.status import (
    FileStatus,
    FileStatusSet,
    StatusEntry,
    classify,
    count_renamed,
    matches_any,
    parse_porcelain_status,
    stage,
    staged_changes,
)


def porcelain(*records):
    return "".join(f"{record}\0" for record in records)


# --- parse_porcelain_status ---


def test_parse_untracked_and_modified():
    entries = parse_porcelain_status(porcelain("?? a.txt", " M b.txt", "M  c.txt"))
    assert entries == [
        StatusEntry("a.txt", FileStatus.WT_NEW),
        StatusEntry("b.txt", FileStatus.WT_MODIFIED),
        StatusEntry("c.txt", FileStatus.INDEX_MODIFIED),
    ]


def test_parse_both_columns():
    (entry,) = parse_porcelain_status(porcelain("AM new.py"))
    assert entry.status == FileStatus.INDEX_NEW | FileStatus.WT_MODIFIED


def test_parse_rename_reads_original_path():
    entries = parse_porcelain_status(porcelain("R  new.txt", "old.txt", "?? other.txt"))
    assert entries[0] == StatusEntry("new.txt", FileStatus.INDEX_RENAMED, "old.txt")
    assert entries[1].path == "other.txt"


def test_parse_conflicts_and_ignored():
    entries = parse_porcelain_status(porcelain("UU merge.txt", "!! build/"))
    assert entries == [StatusEntry("merge.txt", FileStatus.CONFLICTED)]


def test_parse_paths_with_spaces():
    (entry,) = parse_porcelain_status(porcelain("?? my file.txt"))
    assert entry.path == "my file.txt"


def test_parse_merges_duplicate_paths():
    entries = parse_porcelain_status(porcelain("D  a.txt", "?? a.txt"))
    assert entries == [
        StatusEntry("a.txt", FileStatus.INDEX_DELETED | FileStatus.WT_NEW)
    ]


def test_parse_empty_output():
    assert parse_porcelain_status("") == []


# --- classify ---


def test_classify_new_worktree_deleted_and_index_deleted(mixed_status_entries):
    result = classify(mixed_status_entries)
    assert result == FileStatusSet(
        to_stage=("a.txt",), to_delete=("b.txt",), already_deleted=("c.txt",)
    )


def test_classify_lists_are_disjoint(mixed_status_entries):
    result = classify(mixed_status_entries)
    assert not set(result.to_stage) & set(result.to_delete)
    assert not set(result.to_delete) & set(result.already_deleted)


def test_classify_stageable_kinds():
    entries = [
        StatusEntry("new.txt", FileStatus.INDEX_NEW),
        StatusEntry("mod.txt", FileStatus.WT_MODIFIED),
        StatusEntry("type.txt", FileStatus.WT_TYPECHANGE),
        StatusEntry("renamed.txt", FileStatus.INDEX_RENAMED, "orig.txt"),
        StatusEntry("conflict.txt", FileStatus.CONFLICTED),
    ]
    result = classify(entries)
    assert result.to_stage == (
        "new.txt",
        "mod.txt",
        "type.txt",
        "renamed.txt",
        "conflict.txt",
    )
    assert "orig.txt" not in result.to_stage


def test_classify_recreated_file_is_staged_and_already_deleted():
    entries = [StatusEntry("a.txt", FileStatus.INDEX_DELETED | FileStatus.WT_NEW)]
    result = classify(entries)
    assert result.to_stage == ("a.txt",)
    assert result.already_deleted == ("a.txt",)
    assert result.to_delete == ()


def test_classify_index_deleted_not_in_to_delete():
    entries = [StatusEntry("a.txt", FileStatus.INDEX_DELETED | FileStatus.WT_DELETED)]
    result = classify(entries)
    assert result.to_delete == ()
    assert result.already_deleted == ("a.txt",)


def test_classify_modified_then_deleted_in_worktree():
    entries = [StatusEntry("a.txt", FileStatus.INDEX_MODIFIED | FileStatus.WT_DELETED)]
    result = classify(entries)
    assert result.to_stage == ()
    assert result.to_delete == ("a.txt",)


def test_classify_deduplicates_preserving_order():
    entries = [
        StatusEntry("b.txt", FileStatus.WT_NEW),
        StatusEntry("a.txt", FileStatus.WT_MODIFIED),
        StatusEntry("b.txt", FileStatus.WT_MODIFIED),
    ]
    assert classify(entries).to_stage == ("b.txt", "a.txt")


def test_classify_empty():
    assert classify([]) == FileStatusSet()


# --- staged_changes / count_renamed ---


def test_staged_changes_only_index_side():
    entries = [
        StatusEntry("new.txt", FileStatus.INDEX_NEW),
        StatusEntry("wt.txt", FileStatus.WT_MODIFIED),
        StatusEntry("gone.txt", FileStatus.INDEX_DELETED),
        StatusEntry("moved.txt", FileStatus.INDEX_RENAMED, "old.txt"),
    ]
    assert staged_changes(entries) == ["new.txt", "moved.txt"]
    assert count_renamed(entries) == 1


# --- matches_any ---


@pytest.mark.parametrize(
    "path, patterns, expected",
    [
        ("b.md", ["*.md"], True),
        ("docs/b.md", ["*.md"], True),
        ("a.txt", ["*.md"], False),
        ("a1.txt", ["a?.txt"], True),
        ("src/x.py", ["src/**/*.py"], True),
        ("src/pkg/x.py", ["src/**/*.py"], True),
        ("file.c", ["file.[ch]"], True),
        ("a/x/b/c", ["a/**/b/**/c"], True),
        ("a/b/x/c", ["a/**/b/**/c"], True),
        ("a/b/c", ["a/**/b/**/c"], True),
        ("a/x/c", ["a/**/b/**/c"], False),
        ("a.txt", [], False),
    ],
)
def test_matches_any(path, patterns, expected):
    assert matches_any(path, patterns) is expected


# --- stage ---


def test_stage_skips_excluded_paths():
    backend = MagicMock()
    status_set = FileStatusSet(to_stage=("a.txt", "b.md"))

    result = stage(backend, status_set, ["*.md"])

    assert result.staged == ("a.txt",)
    assert result.excluded_count == 1
    backend.update_index.assert_called_once_with(add=("a.txt",), remove=())


def test_stage_removes_deletions():
    backend = MagicMock()
    status_set = FileStatusSet(to_stage=("a.txt",), to_delete=("b.txt",))

    result = stage(backend, status_set, [])

    assert result.deleted == ("b.txt",)
    backend.update_index.assert_called_once_with(add=("a.txt",), remove=("b.txt",))


def test_stage_dry_run_does_not_touch_index():
    backend = MagicMock()
    status_set = FileStatusSet(to_stage=("a.txt", "b.md"), to_delete=("c.txt",))

    result = stage(backend, status_set, ["*.md"], dry_run=True)

    assert result.dry_run
    assert result.staged == ("a.txt",)
    assert result.deleted == ("c.txt",)
    assert result.excluded == ("b.md",)
    backend.update_index.assert_not_called()


def test_stage_nothing_to_do_is_noop():
    backend = MagicMock()

    result = stage(backend, FileStatusSet(to_stage=("b.md",)), ["*.md"])

    assert result.is_empty
    assert result.excluded_count == 1
    backend.update_index.assert_not_called()
