# PYTHON_ARGCOMPLETE_OK
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Sequence

import argcomplete
from rich.console import Console

import rona.tui as tui
from rona.config import (
    ProjectConfig,
    RonaSettings,
    RuntimeOptions,
    load_project_config,
)
from rona.constants import (
    APP_NAME,
    APP_VERSION,
    COMPLETION_SHELLS,
    DEFAULT_EDITOR,
    SHORT_COMMAND_FLAGS,
)
from rona.core import GitPythonBackend
from rona.engine import RonaEngine
from rona.errors import InvalidConfig, RonaError
from rona.status import classify
from rona.utils import print_error, setup_logging
from rona.workflows import (
    AddWithExcludeWorkflowHandler,
    CommitWorkflowHandler,
    CompletionWorkflowHandler,
    GenerateWorkflowHandler,
    InitWorkflowHandler,
    ListStatusWorkflowHandler,
    PushWorkflowHandler,
    SetEditorWorkflowHandler,
)

# Commands whose unknown options are forwarded to git
PASSTHROUGH_COMMANDS = ("commit", "push")


def status_files_completer(prefix, **kwargs):
    try:
        files = classify(GitPythonBackend().status_entries()).to_stage
    except RonaError:
        return []
    return [f for f in files if f.startswith(prefix)]


def expand_short_command(argv: Sequence[str]) -> List[str]:
    """
    Replaces a short command flag (`-a`, `-c`, ...) with its command name
    when it is the first argument after the global options.
    """
    argv = list(argv)
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--config":
            i += 2
            continue
        if arg in ("-v", "--verbose") or arg.startswith("--config="):
            i += 1
            continue
        if arg in SHORT_COMMAND_FLAGS:
            argv[i] = SHORT_COMMAND_FLAGS[arg]
        break
    return argv


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Git helper: stage with exclusions, draft commit messages, commit and push.",
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {APP_VERSION}"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show detailed output"
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="Use this config file instead of the global one",
    )

    dry_run = argparse.ArgumentParser(add_help=False)
    dry_run.add_argument(
        "--dry-run", action="store_true", help="Show what would happen, change nothing"
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    add = commands.add_parser(
        "add-with-exclude",
        parents=[dry_run],
        help="Add all changed files except those matching the patterns (-a)",
    )
    patterns = add.add_argument(
        "patterns", nargs="*", metavar="PATTERN", help="Glob patterns to exclude"
    )
    patterns.completer = status_files_completer

    commit = commands.add_parser(
        "commit",
        parents=[dry_run],
        help="Commit with the content of commit_message.md (-c)",
    )
    commit.add_argument(
        "-p", "--push", action="store_true", help="Push after committing"
    )
    commit.add_argument(
        "-u", "--unsigned", action="store_true", help="Create an unsigned commit"
    )
    commit.add_argument(
        "args", nargs="*", metavar="ARGS", help="Extra arguments passed to git commit"
    )

    completion = commands.add_parser(
        "completion", help="Print the shell completion script"
    )
    completion.add_argument("shell", choices=COMPLETION_SHELLS)

    generate = commands.add_parser(
        "generate",
        parents=[dry_run],
        help="Create or update commit_message.md (-g)",
    )
    generate.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Type the message in the terminal instead of the editor",
    )
    generate.add_argument(
        "-n",
        "--no-commit-number",
        action="store_true",
        help="Leave the commit number out of the message",
    )

    init = commands.add_parser(
        "init", parents=[dry_run], help="Create a config file (-i)"
    )
    init.add_argument("editor", nargs="?", default=DEFAULT_EDITOR)

    commands.add_parser(
        "list-status", help="Print the files add-with-exclude would consider (-l)"
    )

    push = commands.add_parser(
        "push", parents=[dry_run], help="Push to the remote repository (-p)"
    )
    push.add_argument(
        "args", nargs="*", metavar="ARGS", help="Extra arguments passed to git push"
    )

    set_editor = commands.add_parser(
        "set-editor", parents=[dry_run], help="Change the editor in a config file (-s)"
    )
    set_editor.add_argument("editor")

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)

    argv = expand_short_command(sys.argv[1:] if argv is None else argv)
    namespace, extras = parser.parse_known_args(argv)
    if extras:
        if namespace.command not in PASSTHROUGH_COMMANDS:
            parser.error(f"unrecognized arguments: {' '.join(extras)}")
        namespace.args = [*namespace.args, *extras]
    return namespace


def load_config_or_defaults(
    settings: RonaSettings, config_path: Path | None, console: Console
) -> ProjectConfig:
    """A malformed config file is reported and replaced by the defaults."""
    try:
        return load_project_config(settings, config_path=config_path)
    except InvalidConfig as e:
        logging.getLogger(__name__).warning(f"Falling back to default config: {e}")
        console.print(f"⚠️  {e}. Using default configuration.", style="yellow")
        return ProjectConfig()


def start_logging(settings: RonaSettings, verbose: bool, console: Console):
    """An unwritable log file disables logging instead of aborting the command."""
    try:
        return setup_logging(settings.log_path, verbose)
    except OSError as e:
        console.print(
            f"⚠️  Cannot write log file {settings.log_path}: {e.strerror or e}. "
            "Logging disabled.",
            style="yellow",
            markup=False,
        )
        logging.basicConfig(handlers=[logging.NullHandler()])
        return logging.getLogger("Rona")


class App:
    def __init__(
        self,
        console: Console,
        settings: RonaSettings,
        project_config: ProjectConfig,
        options: RuntimeOptions,
        backend=None,
    ):
        self.console = console
        self.settings = settings
        self.engine = RonaEngine(
            self.console, backend or GitPythonBackend(), project_config, options
        )
        # For dependency injection into handlers
        self.tui = tui

        self.handlers = {
            "add-with-exclude": AddWithExcludeWorkflowHandler,
            "commit": CommitWorkflowHandler,
            "completion": CompletionWorkflowHandler,
            "generate": GenerateWorkflowHandler,
            "init": InitWorkflowHandler,
            "list-status": ListStatusWorkflowHandler,
            "push": PushWorkflowHandler,
            "set-editor": SetEditorWorkflowHandler,
        }

    def run(self, namespace: argparse.Namespace):
        handler_class = self.handlers[namespace.command]
        handler = handler_class(self.engine, self.console, self.tui)
        kwargs = {k: v for k, v in vars(namespace).items() if k != "command"}
        return handler.execute(settings=self.settings, **kwargs)


def main(argv: Sequence[str] | None = None) -> int:
    namespace = parse_args(argv)

    console = Console()
    settings = RonaSettings()
    logger = start_logging(settings, namespace.verbose, console)
    logger.info(f"Running command: {namespace.command}")

    options = RuntimeOptions(
        verbose=namespace.verbose, dry_run=getattr(namespace, "dry_run", False)
    )

    try:
        project_config = load_config_or_defaults(settings, namespace.config, console)
        App(console, settings, project_config, options).run(namespace)
    except RonaError as e:
        logger.error(f"{e.title}: {e}", exc_info=True)
        print_error(console, e.title, str(e))
        return 1
    except KeyboardInterrupt:
        console.print("\nGoodbye!", style="bold blue")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
