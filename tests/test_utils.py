import logging
from unittest.mock import MagicMock, patch

import pytest

from rona.utils import check_for_file_in_folder, print_error, setup_logging

# --- setup_logging ---


@patch("rona.utils.logging.basicConfig")
@patch("rona.utils.RotatingFileHandler")
def test_setup_logging(mock_handler_cls, mock_basic_config, tmp_path):
    """Test logging writes to a rotating file inside the given directory."""
    log_path = tmp_path / "logs" / "rona.log"

    logger = setup_logging(log_path)

    assert log_path.parent.is_dir()
    mock_handler_cls.assert_called_once_with(
        log_path, maxBytes=5 * 1024 * 1024, backupCount=1, encoding="utf-8"
    )
    mock_basic_config.assert_called_once()
    assert mock_basic_config.call_args.kwargs["level"] == logging.INFO
    assert logger.name == "Rona"


@patch("rona.utils.logging.basicConfig")
@patch("rona.utils.RotatingFileHandler")
def test_setup_logging_verbose(mock_handler_cls, mock_basic_config, tmp_path):
    setup_logging(tmp_path / "rona.log", verbose=True)
    assert mock_basic_config.call_args.kwargs["level"] == logging.DEBUG


# --- print_error ---


def test_print_error():
    console = MagicMock()

    print_error(console, "Git error", "Git push failed\nfatal: no remote\n", "Add a remote")

    printed = [call.args[0] for call in console.print.call_args_list]
    assert printed == [
        "\n🚨 ERROR: Git error",
        "Git push failed",
        "fatal: no remote",
        "\nAdd a remote",
    ]


# --- check_for_file_in_folder ---


@pytest.mark.parametrize(
    "file_path, folder, expected",
    [
        ("folder/file.txt", "folder", True),
        ("folder/sub/file.txt", "folder", True),
        ("other/file.txt", "folder", False),
        ("file.txt", "folder", False),
        ("folderx/file.txt", "folder", False),
    ],
)
def test_check_for_file_in_folder(file_path, folder, expected):
    assert check_for_file_in_folder(file_path, folder) is expected


def test_check_for_file_in_folder_empty_paths():
    with pytest.raises(ValueError):
        check_for_file_in_folder("", "folder")
    with pytest.raises(ValueError):
        check_for_file_in_folder("file.txt", "")
