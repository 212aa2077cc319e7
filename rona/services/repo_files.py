import logging
import re
from pathlib import Path
from typing import List, Sequence

from rona.constants import (
    COMMIT_MESSAGE_FILE_NAME,
    COMMITIGNORE_FILE_NAME,
    GIT_EXCLUDE_MARKER,
    GITIGNORE_FILE_NAME,
)

logger = logging.getLogger(__name__)

# One path per line, comments and lines containing whitespace are skipped.
IGNORE_LINE_PATTERN = re.compile(r"^([^#]\S*)$")


def add_to_git_exclude(git_dir: Path, paths: Sequence[str]) -> List[str]:
    """
    Appends paths to `.git/info/exclude` under a rona marker, skipping the ones
    already listed. Returns the paths actually added.
    """
    info_dir = git_dir / "info"
    exclude_file = info_dir / "exclude"
    info_dir.mkdir(parents=True, exist_ok=True)

    content = exclude_file.read_text(encoding="utf-8") if exclude_file.is_file() else ""
    existing = {
        line.strip()
        for line in content.splitlines()
        if line.strip() and not line.startswith("#")
    }

    to_add = [path for path in paths if path not in existing]
    if not to_add:
        return []

    with exclude_file.open("a", encoding="utf-8") as f:
        if GIT_EXCLUDE_MARKER not in content:
            if content and not content.endswith("\n"):
                f.write("\n")
            if content:
                f.write("\n")
            f.write(f"{GIT_EXCLUDE_MARKER}\n")
        for path in to_add:
            f.write(f"{path}\n")

    logger.info(f"Added {to_add} to {exclude_file}")
    return to_add


def create_needed_files(project_root: Path, git_dir: Path) -> None:
    """Creates the commit message and .commitignore files and hides them from git."""
    for name in (COMMIT_MESSAGE_FILE_NAME, COMMITIGNORE_FILE_NAME):
        path = project_root / name
        if not path.exists():
            path.touch()
            logger.info(f"Created {path}")

    add_to_git_exclude(git_dir, [COMMIT_MESSAGE_FILE_NAME, COMMITIGNORE_FILE_NAME])


def extract_ignore_entries(content: str) -> List[str]:
    return [
        match.group(1)
        for match in map(IGNORE_LINE_PATTERN.match, content.splitlines())
        if match
    ]


def get_ignore_patterns(project_root: Path) -> List[str]:
    """
    Entries of .commitignore followed by those of .gitignore.
    Nothing is ignored unless a .commitignore file exists.
    """
    commitignore = project_root / COMMITIGNORE_FILE_NAME
    if not commitignore.is_file():
        return []

    patterns = extract_ignore_entries(commitignore.read_text(encoding="utf-8"))
    gitignore = project_root / GITIGNORE_FILE_NAME
    if gitignore.is_file():
        patterns += extract_ignore_entries(gitignore.read_text(encoding="utf-8"))
    return patterns
