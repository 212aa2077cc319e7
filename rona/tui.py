# rona/tui.py

"""
Terminal User Interface (TUI) components for user interaction.
Every prompt returns None when the user aborts (Ctrl-C).
"""

import questionary

from rona.constants import OPT_GLOBAL_CONFIG, OPT_PROJECT_CONFIG


def select_commit_type(commit_types):
    return questionary.select(
        "Select commit type:", choices=list(commit_types)
    ).ask()


def get_commit_message():
    """Asks for the free-text part of the commit message."""
    return questionary.text("Message:").ask()


def select_config_location(action: str):
    """
    Asks where a config change should be written.
    Returns 'project', 'global' or None.
    """
    return questionary.select(
        f"Where do you want to {action}?",
        choices=[
            questionary.Choice(OPT_PROJECT_CONFIG, value="project"),
            questionary.Choice(OPT_GLOBAL_CONFIG, value="global"),
        ],
    ).ask()
