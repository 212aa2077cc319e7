import logging
import shlex
import subprocess
from pathlib import Path

from rona.errors import CommitMessageNotFound, RonaError

logger = logging.getLogger(__name__)


def save_message_to_file(message: str, filepath: Path) -> None:
    """Writes the message verbatim, replacing any previous content."""
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(message)
    logger.info(f"Wrote commit message to {filepath}")


def read_message_file(filepath: Path) -> str:
    if not filepath.is_file():
        raise CommitMessageNotFound(filepath)
    with open(filepath, "r", encoding="utf-8") as f:
        return f.read()


def open_in_editor(editor: str, filepath: Path) -> int:
    """Opens the file in the editor and waits for it to exit."""
    command = [*shlex.split(editor), str(filepath)]
    logger.info(f"Launching editor: {command}")
    try:
        return subprocess.run(command, check=False).returncode
    except OSError as e:
        logger.error(f"Failed to launch editor '{editor}': {e}", exc_info=True)
        raise RonaError(f"Failed to launch editor '{editor}': {e}") from e
