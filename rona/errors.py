"""
Error hierarchy shared by every rona module.
The CLI catches RonaError at the top level and prints it without a traceback.
"""


class RonaError(Exception):
    """Base class for all errors rona reports to the user."""

    title = "Error"


class UserCancelled(RonaError):
    title = "Cancelled"

    def __init__(self):
        super().__init__("Operation cancelled by user")


# --- Configuration ---


class ConfigError(RonaError):
    title = "Configuration error"


class ConfigNotFound(ConfigError):
    def __init__(self, path=None):
        self.path = path
        detail = f" at {path}" if path else " at expected location"
        super().__init__(f"Configuration file not found{detail}")


class ConfigAlreadyExists(ConfigError):
    def __init__(self, path):
        self.path = path
        super().__init__(
            f"A configuration file already exists at {path} - "
            "use 'rona set-editor' to modify it"
        )


class InvalidConfig(ConfigError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid configuration: {reason}")


# --- Git ---


class GitError(RonaError):
    title = "Git error"


class RepositoryNotFound(GitError):
    def __init__(self, path: str = "."):
        self.path = path
        super().__init__(
            f"'{path}' is not inside a git repository - "
            "please run this command from within a git repository"
        )


class GitCommandFailed(GitError):
    def __init__(self, command: str, output: str = ""):
        self.command = command
        self.output = output
        message = f"Git {command} failed"
        if output.strip():
            message += f"\n{output.strip()}"
        super().__init__(message)


class CommitMessageNotFound(GitError):
    def __init__(self, path):
        self.path = path
        super().__init__(
            f"Commit message file '{path}' not found - run 'rona generate' first"
        )


class StagingError(GitError):
    """Index mutation failed; the index state is unknown."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            f"Failed to update the index ({reason}). "
            "Index state unknown - re-run the command."
        )
