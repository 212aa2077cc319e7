import pytest
import git
from pathlib import Path

from rona.core import GitBackend
from rona.status import FileStatus, StatusEntry


class FakeBackend(GitBackend):
    """In-memory repository used by the engine and workflow tests."""

    def __init__(self, root: Path, entries=(), branch="main", commit_count=0):
        self.root = root
        self.entries = list(entries)
        self.branch = branch
        self.commit_count = commit_count
        self.identity = ("Test Bot", "test@bot.com")
        self.signing = False
        self.index_updates = []
        self.commits = []
        self.pushes = []

    def status_entries(self):
        return list(self.entries)

    def get_current_branch(self):
        return self.branch

    def get_commit_count(self):
        return self.commit_count

    def get_author_identity(self):
        return self.identity

    def get_top_level_path(self):
        return self.root

    def get_git_dir(self):
        return self.root / ".git"

    def update_index(self, add, remove):
        self.index_updates.append((list(add), list(remove)))

    def is_signing_available(self):
        return self.signing

    def commit(self, message, args=(), sign=False):
        self.commits.append((message, list(args), sign))
        return ""

    def push(self, args=()):
        self.pushes.append(list(args))
        return ""


@pytest.fixture
def temp_git_repo(tmp_path):
    """
    Creates a temporary git repo with some commits.
    returns the path to the repo.
    """
    repo_dir = tmp_path / "test_repo"
    repo_dir.mkdir()

    repo = git.Repo.init(repo_dir)

    # Configure author (required for commits)
    repo.config_writer().set_value("user", "name", "Test Bot").release()
    repo.config_writer().set_value("user", "email", "test@bot.com").release()

    # Create a file and commit it (History)
    file_path = repo_dir / "hello.py"
    file_path.write_text("print('Hello World')")
    repo.index.add(["hello.py"])
    repo.index.commit("Initial commit")

    repo.close()
    return repo_dir


@pytest.fixture
def fake_backend(tmp_path):
    (tmp_path / ".git").mkdir()
    return FakeBackend(tmp_path)


@pytest.fixture
def mixed_status_entries():
    """New a.txt, b.txt deleted in the worktree only, c.txt deleted in the index."""
    return [
        StatusEntry("a.txt", FileStatus.WT_NEW),
        StatusEntry("b.txt", FileStatus.WT_DELETED),
        StatusEntry("c.txt", FileStatus.INDEX_DELETED),
    ]
