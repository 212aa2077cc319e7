from typing import Iterable, List, Sequence

from rona.schemas import TemplateVariables
from rona.template import HEADER_TEMPLATE, render_template
from rona.utils import check_for_file_in_folder


def format_branch_name(branch: str, commit_types: Iterable[str]) -> str:
    """Removes every `<type>/` segment, e.g. `feat/login` -> `login`."""
    formatted = branch
    for commit_type in commit_types:
        formatted = formatted.replace(f"{commit_type}/", "")
    return formatted


def should_ignore_file(path: str, ignore_patterns: Sequence[str]) -> bool:
    """A file is ignored when listed verbatim or when it lives inside a listed folder."""
    if path in ignore_patterns:
        return True
    return any(
        check_for_file_in_folder(path, pattern) for pattern in ignore_patterns if pattern
    )


def build_commit_message(
    variables: TemplateVariables,
    modified_files: Iterable[str],
    deleted_files: Iterable[str],
    ignore_patterns: Sequence[str] = (),
) -> str:
    """
    Builds the commit message skeleton: a header line followed by one entry
    per staged file, to be filled in by the user in their editor.
    """
    lines: List[str] = [render_template(HEADER_TEMPLATE, variables), "\n\n\n"]

    for path in modified_files:
        if not should_ignore_file(path, ignore_patterns):
            lines.append(f"- `{path}`:\n\n\t\n\n")

    for path in deleted_files:
        lines.append(f"- `{path}`: deleted\n\n")

    return "".join(lines)
