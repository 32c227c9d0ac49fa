"""
main:
    Main CLI entry point for dotai
"""

import click

from dotai import __version__, ui
from dotai.cli import (
    assistants_cmd,
    bridge_cmd,
    index_cmd,
    install_cmd,
    installed_cmd,
    lint_cmd,
    list_cmd,
    outdated_cmd,
    prefs_cmd,
    search_cmd,
    show_cmd,
    uninstall_cmd,
)


def ver():
    """Show version."""
    ui.console.print(f"dotai {__version__}")


@click.group(invoke_without_command=True, no_args_is_help=True)
@click.option("-v", "--version", is_flag=True, help="Show version")
@click.option("--debug", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx, version, debug):
    """
    dotai - AI assistant configuration scaffolder

    Install skills, agents, commands, rules and prompts into a single
    .ai/ directory, and point Claude Code, Cursor, Copilot, Gemini CLI
    and others at it with small bridge files.

    \b
    Quick start:
        dotai list                                Browse the catalog
        dotai install skills/code-review          Install an item
        dotai bridge -a claude -a cursor          Write bridge files

    \b
    For more help on any command:
        dotai [command] --help
    """
    ctx.ensure_object(dict)
    ui.configure_logging(debug)
    if version:
        ver()


# Catalog
main.add_command(list_cmd)
main.add_command(search_cmd)
main.add_command(show_cmd)
main.add_command(lint_cmd)
main.add_command(index_cmd)

# Installation
main.add_command(install_cmd)
main.add_command(uninstall_cmd)
main.add_command(installed_cmd)
main.add_command(outdated_cmd)

# Assistants
main.add_command(assistants_cmd)
main.add_command(bridge_cmd)
main.add_command(prefs_cmd)


if __name__ == "__main__":
    main()
