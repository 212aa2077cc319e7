import logging
from pathlib import Path
from typing import List, Sequence

from rich.console import Console

# Internal Imports
from rona.config import ProjectConfig, RuntimeOptions
from rona.constants import COMMIT_MESSAGE_FILE_NAME, COMMITIGNORE_FILE_NAME
from rona.core import GitBackend
from rona.schemas import TemplateVariables
from rona.services.message_builder import build_commit_message, format_branch_name
from rona.services.output_handler import (
    open_in_editor,
    read_message_file,
    save_message_to_file,
)
from rona.services.repo_files import create_needed_files, get_ignore_patterns
from rona.status import (
    StageResult,
    classify,
    count_renamed,
    stage,
    staged_changes,
)
from rona.template import (
    TemplateValidationError,
    fallback_message,
    render_template,
    validate_template,
)

logger = logging.getLogger(__name__)


class RonaEngine:
    """
    The Central Processing Unit of the application.
    Orchestrates repository reads -> reconciliation / templating -> git writes.
    """

    def __init__(
        self,
        console: Console,
        backend: GitBackend,
        project_config: ProjectConfig,
        options: RuntimeOptions,
    ):
        self.console = console
        self.backend = backend
        self.project_config = project_config
        self.options = options

    def _verbose(self, message: str):
        if self.options.verbose:
            self.console.print(message, style="dim")

    @property
    def commit_message_path(self) -> Path:
        return self.backend.get_top_level_path() / COMMIT_MESSAGE_FILE_NAME

    # --- Status / staging ---

    def list_status_files(self) -> List[str]:
        """Paths that add-with-exclude would consider, one per line for completions."""
        return list(classify(self.backend.status_entries()).to_stage)

    def add_with_exclude(self, exclude_patterns: Sequence[str]) -> StageResult:
        """Workflow: Status -> Classify -> Stage (or preview)."""
        self._verbose("Adding files...")
        status_set = classify(self.backend.status_entries())
        result = stage(
            self.backend, status_set, exclude_patterns, dry_run=self.options.dry_run
        )

        if result.is_empty:
            self.console.print("No files to add or delete")
        elif result.dry_run:
            self._print_dry_run_summary(result)
        else:
            renamed = count_renamed(self.backend.status_entries())
            self.console.print(
                f"Added {result.staged_count} files, deleted {result.deleted_count}, "
                f"renamed {renamed} while excluding {result.excluded_count} files "
                "for commit.",
                style="green",
            )
        return result

    def _print_dry_run_summary(self, result: StageResult):
        self.console.print(f"Would add {result.staged_count} files:")
        for path in result.staged:
            self.console.print(f"  + {path}", style="green", markup=False)
        self.console.print(f"Would delete {result.deleted_count} files:")
        for path in result.deleted:
            self.console.print(f"  - {path}", style="red", markup=False)
        self.console.print(f"Would exclude {result.excluded_count} files")

    # --- Commit message generation ---

    def prepare_files(self):
        create_needed_files(self.backend.get_top_level_path(), self.backend.get_git_dir())

    def current_branch_name(self) -> str:
        return format_branch_name(
            self.backend.get_current_branch(), self.project_config.commit_types
        )

    def next_commit_number(self, no_commit_number: bool) -> int | None:
        if no_commit_number:
            return None
        return self.backend.get_commit_count() + 1

    def build_variables(
        self, commit_type: str, message: str = "", no_commit_number: bool = False
    ) -> TemplateVariables:
        return TemplateVariables.create(
            self.backend,
            commit_number=self.next_commit_number(no_commit_number),
            commit_type=commit_type,
            branch_name=self.current_branch_name(),
            message=message,
        )

    def generate_commit_message(
        self, commit_type: str, no_commit_number: bool = False
    ) -> Path:
        """Writes the commit message skeleton listing staged files and deletions."""
        project_root = self.backend.get_top_level_path()
        entries = self.backend.status_entries()
        variables = self.build_variables(commit_type, no_commit_number=no_commit_number)

        message = build_commit_message(
            variables,
            staged_changes(entries),
            classify(entries).already_deleted,
            get_ignore_patterns(project_root),
        )
        path = project_root / COMMIT_MESSAGE_FILE_NAME
        save_message_to_file(message, path)
        self._verbose(f"{path} created ✅")
        return path

    def render_message(
        self, commit_type: str, message: str, no_commit_number: bool = False
    ) -> str:
        """
        Renders the configured template. A template that fails validation is
        reported and replaced by the literal fallback format.
        """
        variables = self.build_variables(commit_type, message, no_commit_number)
        template = self.project_config.template

        try:
            validate_template(template)
        except TemplateValidationError as e:
            logger.warning(f"Template validation failed: {e}")
            self.console.print(f"⚠️  Template validation error: {e}", style="yellow")
            self.console.print("Using fallback format...", style="yellow")
            return fallback_message(
                variables.commit_type,
                variables.branch_name,
                variables.message,
                variables.commit_number,
            )

        return render_template(template, variables)

    def write_interactive_message(
        self, commit_type: str, message: str, no_commit_number: bool = False
    ) -> str:
        rendered = self.render_message(commit_type, message, no_commit_number)
        save_message_to_file(rendered, self.commit_message_path)
        return rendered

    def open_editor(self) -> int:
        return open_in_editor(self.project_config.editor, self.commit_message_path)

    def describe_generate_dry_run(self):
        self.console.print(
            f"Would create files: {COMMIT_MESSAGE_FILE_NAME}, {COMMITIGNORE_FILE_NAME}"
        )
        self.console.print("Would add files to .git/info/exclude")

    # --- Commit / push ---

    def commit(self, args: Sequence[str] = (), unsigned: bool = False) -> bool:
        """
        Commits with the content of the commit message file.
        Signs with -S when a usable GPG key is configured, unless unsigned.
        Returns whether the commit was (or would be) signed.
        """
        self._verbose("Committing files...")
        message = read_message_file(self.commit_message_path)
        filtered_args = [
            arg for arg in args if not arg.startswith(("-c", "--commit"))
        ]

        signing_available = False if unsigned else self.backend.is_signing_available()
        sign = not unsigned and signing_available

        if self.options.dry_run:
            self.console.print("Would commit with message:")
            self.console.print("---")
            self.console.print(message.strip(), markup=False)
            self.console.print("---")
            if unsigned:
                self.console.print("Would create unsigned commit")
            elif sign:
                self.console.print("Would sign commit with -S flag")
            else:
                self.console.print(
                    "Would create unsigned commit (GPG signing not available)"
                )
                self._warn_unsigned()
            if filtered_args:
                self.console.print(f"With additional args: {filtered_args}", markup=False)
            return sign

        if not unsigned and not sign:
            self._warn_unsigned()

        output = self.backend.commit(message, filtered_args, sign=sign)
        self._verbose("commit successful!")
        if output.strip():
            self.console.print(output.strip(), markup=False)
        return sign

    def _warn_unsigned(self):
        self.console.print(
            "⚠️  Warning: GPG signing not available or not configured. "
            "Creating unsigned commit.",
            style="yellow",
        )
        self.console.print(
            "   To suppress this warning, use the --unsigned (-u) flag.", style="yellow"
        )

    def push(self, args: Sequence[str] = ()):
        self._verbose("Pushing...")
        if self.options.dry_run:
            self.console.print("Would push to remote repository")
            if args:
                self.console.print(f"With args: {list(args)}", markup=False)
            return

        output = self.backend.push(args)
        self._verbose("push successful!")
        if output.strip():
            self.console.print(output.strip(), markup=False)

