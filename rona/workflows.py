# rona/workflows.py
from abc import ABC, abstractmethod
from pathlib import Path

import argcomplete
from rich.console import Console

from rona.config import RonaSettings, create_config_file, set_editor
from rona.constants import DEFAULT_EDITOR, PROJECT_CONFIG_FILE_NAME
from rona.engine import RonaEngine
from rona.errors import UserCancelled


def _require(answer):
    """questionary returns None when a prompt is aborted."""
    if answer is None:
        raise UserCancelled()
    return answer


class WorkflowHandler(ABC):
    """Abstract base class for all workflow handlers."""

    def __init__(self, engine: RonaEngine, console: Console, tui_module):
        self.engine = engine
        self.console = console
        self.tui = tui_module

    @property
    def dry_run(self) -> bool:
        return self.engine.options.dry_run

    @abstractmethod
    def execute(self, **kwargs):
        """Execute the specific workflow."""
        pass


class AddWithExcludeWorkflowHandler(WorkflowHandler):
    def execute(self, patterns=(), **kwargs):
        return self.engine.add_with_exclude(list(patterns))


class CommitWorkflowHandler(WorkflowHandler):
    def execute(self, args=(), push=False, unsigned=False, **kwargs):
        self.engine.commit(list(args), unsigned=unsigned)
        if push:
            self.engine.push(list(args))


class PushWorkflowHandler(WorkflowHandler):
    def execute(self, args=(), **kwargs):
        self.engine.push(list(args))


class ListStatusWorkflowHandler(WorkflowHandler):
    def execute(self, **kwargs):
        # One path per line, consumed by shell completion scripts
        for path in self.engine.list_status_files():
            self.console.print(path, markup=False, highlight=False, soft_wrap=True)


class CompletionWorkflowHandler(WorkflowHandler):
    def execute(self, shell="bash", prog="rona", **kwargs):
        script = argcomplete.shellcode([prog], shell=shell)
        self.console.print(script, markup=False, highlight=False, soft_wrap=True)


class GenerateWorkflowHandler(WorkflowHandler):
    def execute(self, interactive=False, no_commit_number=False, **kwargs):
        if self.dry_run:
            self.engine.describe_generate_dry_run()
            return

        self.engine.prepare_files()

        commit_type = _require(
            self.tui.select_commit_type(self.engine.project_config.commit_types)
        )
        self.engine.generate_commit_message(commit_type, no_commit_number)

        if interactive:
            self._write_interactive_message(commit_type, no_commit_number)
        else:
            self.engine.open_editor()

    def _write_interactive_message(self, commit_type: str, no_commit_number: bool):
        self.console.print("📝 Interactive mode: Enter your commit message.")
        self.console.print("💡 Tip: Keep it concise and descriptive.", style="dim")

        message = _require(self.tui.get_commit_message())
        if not message.strip():
            self.console.print("⚠️  Empty message provided. Exiting.", style="yellow")
            return

        rendered = self.engine.write_interactive_message(
            commit_type, message.strip(), no_commit_number
        )
        self.console.print("\n✅ Commit message created!", style="bold green")
        self.console.print(f"📄 Message: {rendered}", markup=False)


class InitWorkflowHandler(WorkflowHandler):
    def execute(
        self,
        editor=DEFAULT_EDITOR,
        settings: RonaSettings | None = None,
        project_dir: Path | None = None,
        **kwargs,
    ):
        if self.dry_run:
            self.console.print(f"Would create config file with editor: {editor}")
            return

        settings = settings or RonaSettings()
        location = _require(self.tui.select_config_location("initialize the config"))
        if location == "project":
            path = (project_dir or Path.cwd()) / PROJECT_CONFIG_FILE_NAME
        else:
            path = settings.global_config_file

        create_config_file(path, editor, base=self.engine.project_config)
        self.console.print(f"✅ Config created in: {path}", style="green")


class SetEditorWorkflowHandler(WorkflowHandler):
    def execute(self, editor, settings: RonaSettings | None = None, **kwargs):
        if self.dry_run:
            self.console.print(f"Would set editor to: {editor}")
            return

        settings = settings or RonaSettings()
        location = _require(self.tui.select_config_location("set the editor"))
        if location == "project":
            path = self.engine.backend.get_top_level_path() / PROJECT_CONFIG_FILE_NAME
        else:
            path = settings.global_config_file

        set_editor(path, editor)
        self.console.print(f"Editor set in: {path}", style="green")
