# rona/constants.py

"""
Central configuration for application constants, file names, and UI strings.
Avoids circular imports and keeps every magic string in one place.
"""

# --- Application ---
APP_NAME = "rona"
APP_VERSION = "0.1.0"

# --- File System Constants ---
COMMIT_MESSAGE_FILE_NAME = "commit_message.md"
COMMITIGNORE_FILE_NAME = ".commitignore"
GITIGNORE_FILE_NAME = ".gitignore"
PROJECT_CONFIG_FILE_NAME = ".rona.toml"
GIT_EXCLUDE_MARKER = "# Added by rona"

# --- Configuration Defaults ---
DEFAULT_EDITOR = "nano"
DEFAULT_COMMIT_TYPES = ("feat", "fix", "docs", "test", "chore")

# --- Logging ---
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5 MB

# --- CLI ---
# Short flags accepted in place of a subcommand name (e.g. `rona -a "*.md"`).
SHORT_COMMAND_FLAGS = {
    "-a": "add-with-exclude",
    "-c": "commit",
    "-g": "generate",
    "-i": "init",
    "-l": "list-status",
    "-p": "push",
    "-s": "set-editor",
}
COMPLETION_SHELLS = ("bash", "zsh", "fish", "tcsh", "powershell")

# --- Config location choices (Single Source of Truth) ---
OPT_PROJECT_CONFIG = f"Project (./{PROJECT_CONFIG_FILE_NAME})"
OPT_GLOBAL_CONFIG = "Global (user config directory)"
