import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence, Tuple

import git

from .errors import GitCommandFailed, RepositoryNotFound, StagingError
from .status import StatusEntry, parse_porcelain_status

# Initialize module-level logger
logger = logging.getLogger(__name__)


class GitBackend(ABC):
    """Every repository read and mutation rona performs goes through this interface."""

    @abstractmethod
    def status_entries(self) -> List[StatusEntry]:
        """HEAD / index / worktree comparison for every changed path, with renames."""

    @abstractmethod
    def get_current_branch(self) -> str:
        pass

    @abstractmethod
    def get_commit_count(self) -> int:
        pass

    @abstractmethod
    def get_author_identity(self) -> Tuple[str, str]:
        pass

    @abstractmethod
    def get_top_level_path(self) -> Path:
        pass

    @abstractmethod
    def get_git_dir(self) -> Path:
        pass

    @abstractmethod
    def update_index(self, add: Sequence[str], remove: Sequence[str]) -> None:
        """Stages `add` (resolving conflicts) and the deletion of `remove`."""

    @abstractmethod
    def is_signing_available(self) -> bool:
        pass

    @abstractmethod
    def commit(self, message: str, args: Sequence[str] = (), sign: bool = False) -> str:
        pass

    @abstractmethod
    def push(self, args: Sequence[str] = ()) -> str:
        pass


class GitRepositoryContext:
    def __init__(self, repo_path: str):
        self.repo_path = repo_path
        self._repo: git.Repo | None = None

    def __enter__(self) -> git.Repo:
        try:
            self._repo = git.Repo(self.repo_path, search_parent_directories=True)
            return self._repo
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            raise RepositoryNotFound(self.repo_path)

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._repo:
            self._repo.close()


def _command_output(error: git.exc.GitCommandError) -> str:
    """Extracts the readable part of a GitCommandError."""
    stderr = error.stderr or ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", "replace")
    stderr = stderr.strip()
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:") :].strip().strip("'")
    return stderr or str(error)


class GitPythonBackend(GitBackend):
    """GitBackend backed by GitPython. A Repo is opened per call and closed after it."""

    def __init__(self, repo_path: str = "."):
        self.repo_path = repo_path

    def status_entries(self) -> List[StatusEntry]:
        with GitRepositoryContext(self.repo_path) as repo:
            try:
                output = repo.git.status(
                    "--porcelain=v1", "-z", "--untracked-files=all"
                )
            except git.exc.GitCommandError as e:
                logger.error(f"Failed to read git status: {e}", exc_info=True)
                raise GitCommandFailed("status", _command_output(e)) from e
        return parse_porcelain_status(output)

    def get_current_branch(self) -> str:
        with GitRepositoryContext(self.repo_path) as repo:
            if repo.head.is_detached:
                return "HEAD"
            try:
                return repo.active_branch.name
            except (TypeError, ValueError) as e:
                logger.warning(f"Could not resolve active branch: {e}")
                default = repo.config_reader().get_value(
                    "init", "defaultBranch", "main"
                )
                return str(default)

    def get_commit_count(self) -> int:
        with GitRepositoryContext(self.repo_path) as repo:
            for revision in ("HEAD", "--all"):
                try:
                    return int(repo.git.rev_list("--count", revision) or 0)
                except git.exc.GitCommandError:
                    # unborn HEAD, try every ref instead
                    logger.debug(f"rev-list --count {revision} failed")
            return 0

    def get_author_identity(self) -> Tuple[str, str]:
        with GitRepositoryContext(self.repo_path) as repo:
            reader = repo.config_reader()
            name = reader.get_value("user", "name", "")
            email = reader.get_value("user", "email", "")
        return str(name).strip(), str(email).strip()

    def get_top_level_path(self) -> Path:
        with GitRepositoryContext(self.repo_path) as repo:
            if not repo.working_tree_dir:
                raise RepositoryNotFound(self.repo_path)
            return Path(repo.working_tree_dir)

    def get_git_dir(self) -> Path:
        with GitRepositoryContext(self.repo_path) as repo:
            return Path(repo.git_dir).resolve()

    def update_index(self, add: Sequence[str], remove: Sequence[str]) -> None:
        # git add also drops the unmerged stages of conflicted paths
        with GitRepositoryContext(self.repo_path) as repo:
            try:
                if remove:
                    repo.git(literal_pathspecs=True).rm(
                        "--cached", "--quiet", "--", *remove
                    )
                if add:
                    repo.git(literal_pathspecs=True).add("--", *add)
            except git.exc.GitCommandError as e:
                logger.error(f"Index update failed: {e}", exc_info=True)
                raise StagingError(_command_output(e)) from e

    def is_signing_available(self) -> bool:
        """
        True when a signing key is configured and gpg can use it.
        Falls back to checking that the configured (or default) gpg program runs.
        """
        with GitRepositoryContext(self.repo_path) as repo:
            reader = repo.config_reader()
            signing_key = str(reader.get_value("user", "signingkey", "")).strip()
            gpg_program = str(reader.get_value("gpg", "program", "")).strip()

        if not signing_key:
            return False

        if _run_succeeds(["gpg", "--list-secret-keys", signing_key]):
            return True
        if gpg_program:
            return _run_succeeds([gpg_program, "--version"])
        return _run_succeeds(["gpg", "--version"])

    def commit(self, message: str, args: Sequence[str] = (), sign: bool = False) -> str:
        command_args = ["-S"] if sign else []
        command_args += ["-m", message, *args]
        with GitRepositoryContext(self.repo_path) as repo:
            try:
                return repo.git.commit(*command_args)
            except git.exc.GitCommandError as e:
                logger.error(f"git commit failed: {e}", exc_info=True)
                raise GitCommandFailed("commit", _command_output(e)) from e

    def push(self, args: Sequence[str] = ()) -> str:
        with GitRepositoryContext(self.repo_path) as repo:
            try:
                # push progress is reported on stderr
                _, stdout, stderr = repo.git.push(*args, with_extended_output=True)
                return "\n".join(part for part in (stdout, stderr) if part)
            except git.exc.GitCommandError as e:
                logger.error(f"git push failed: {e}", exc_info=True)
                raise GitCommandFailed("push", _command_output(e)) from e


def _run_succeeds(command: List[str]) -> bool:
    try:
        completed = subprocess.run(command, capture_output=True, check=False)
    except OSError:
        return False
    return completed.returncode == 0
