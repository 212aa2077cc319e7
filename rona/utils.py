import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path, PurePosixPath

from rich.console import Console

from .constants import LOG_FORMAT, LOG_MAX_BYTES


def setup_logging(log_path: Path, verbose: bool = False):
    """Configures application-wide logging with rotation and UTF-8 support."""
    log_path.parent.mkdir(parents=True, exist_ok=True)
    log_handler = RotatingFileHandler(
        log_path, maxBytes=LOG_MAX_BYTES, backupCount=1, encoding="utf-8"
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=[log_handler],
    )
    return logging.getLogger("Rona")


def print_error(console: Console, title: str, details: str, suggestion: str = ""):
    """Prints an error as a short title plus its reason, never a traceback."""
    console.print(f"\n🚨 ERROR: {title}", style="bold red")
    for line in details.splitlines():
        if line.strip():
            console.print(line.strip(), markup=False)
    if suggestion:
        console.print(f"\n{suggestion}", style="yellow")


def check_for_file_in_folder(file_path: str, folder_path: str) -> bool:
    """
    True if the file's parent directory is, or is below, folder_path.
    Raises ValueError on empty paths.
    """
    if not file_path:
        raise ValueError("File path is empty")
    if not folder_path:
        raise ValueError("Folder path is empty")

    file_parent = PurePosixPath(file_path).parent
    folder = PurePosixPath(folder_path)
    return file_parent == folder or folder in file_parent.parents
