from datetime import datetime

import pytest

from rona.schemas import TemplateVariables
from rona.services.message_builder import (
    build_commit_message,
    format_branch_name,
    should_ignore_file,
)

COMMIT_TYPES = ["feat", "fix", "docs", "test", "chore"]


@pytest.fixture
def variables():
    return TemplateVariables(
        commit_number=5,
        commit_type="feat",
        branch_name="login",
        message="",
        date="2024-01-15",
        time="10:30:00",
        author="Test Bot",
        email="test@bot.com",
    )


@pytest.mark.parametrize(
    "branch, expected",
    [
        ("feat/login", "login"),
        ("fix/docs/typo", "typo"),
        ("user/feat/login", "user/login"),
        ("main", "main"),
        ("feature/new-feature", "feature/new-feature"),
    ],
)
def test_format_branch_name(branch, expected):
    assert format_branch_name(branch, COMMIT_TYPES) == expected


def test_format_branch_name_custom_types():
    assert format_branch_name("perf/cache", ["perf"]) == "cache"
    assert format_branch_name("perf/cache", COMMIT_TYPES) == "perf/cache"


@pytest.mark.parametrize(
    "path, patterns, expected",
    [
        ("notes.md", ["notes.md"], True),
        ("build/out.js", ["build"], True),
        ("build/deep/out.js", ["build/"], True),
        ("src/app.py", ["build"], False),
        ("buildx/app.py", ["build"], False),
        ("app.py", [], False),
    ],
)
def test_should_ignore_file(path, patterns, expected):
    assert should_ignore_file(path, patterns) is expected


def test_build_commit_message(variables):
    message = build_commit_message(
        variables, ["src/app.py", "README.md"], ["old.py"], ignore_patterns=["README.md"]
    )

    assert message == (
        "[5] (feat on login)\n\n\n"
        "- `src/app.py`:\n\n\t\n\n"
        "- `old.py`: deleted\n\n"
    )


def test_build_commit_message_without_number(variables):
    variables = variables.model_copy(update={"commit_number": None})

    message = build_commit_message(variables, [], [])

    assert message == "(feat on login)\n\n\n"


def test_build_commit_message_header_uses_variables():
    variables = TemplateVariables.create(
        backend=_Identity(),
        commit_number=None,
        commit_type="docs",
        branch_name="readme",
        message="ignored",
        now=datetime(2024, 1, 15, 10, 30),
    )
    assert build_commit_message(variables, [], []).startswith("(docs on readme)\n")


class _Identity:
    def get_author_identity(self):
        return ("A", "a@example.com")
