"""
Assistant CLI commands.

Commands for listing supported assistants, writing bridge files and
managing default preferences.
"""

from typing import Optional

import click
from rich.table import Table

from dotai import config, ui
from dotai.assistants import content_type_display_name, get_registry
from dotai.bridge import bridge_family, generate_bridge_files, write_bridge_files
from dotai.cli.install import (
    handle_dotai_error,
    load_preferences,
    project_option,
    resolve_assistants,
    resolve_project,
)
from dotai.config import METHODS, SCOPES
from dotai.exceptions import DotAIError
from dotai.lock import get_lock_store
from dotai.models import Preferences


@click.command(name="assistants")
@click.option("--detected", is_flag=True, help="Only show assistants found on this machine")
def assistants_cmd(detected: bool):
    """List supported AI assistants."""
    registry = get_registry(config.get_environment())
    found = {a.id for a in registry.detect_installed()}
    assistants = [a for a in registry if a.id in found] if detected else registry.all()

    if not assistants:
        ui.warning("No assistants detected")
        ui.hint("Use 'dotai install <item> -a <assistant>' to pick one explicitly")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Content")
    table.add_column("Bridge")
    table.add_column("Detected")

    for assistant in assistants:
        table.add_row(
            assistant.id,
            assistant.name,
            ", ".join(content_type_display_name(t) for t in assistant.paths),
            bridge_family(assistant.id) or "-",
            f"[green]{ui.Icons.SUCCESS}[/green]" if assistant.id in found else "",
        )

    ui.console.print(table)
    ui.console.print(
        f"[dim]{ui.count_summary('assistants', len(assistants))}, "
        f"{len(found)} detected[/dim]"
    )


@click.command(name="bridge")
@click.option(
    "-a",
    "--assistant",
    "assistant_ids",
    multiple=True,
    help="Assistant to write a bridge file for (repeatable)",
)
@click.option("--overwrite", is_flag=True, help="Replace existing bridge files")
@project_option
def bridge_cmd(assistant_ids: tuple[str, ...], overwrite: bool, project_path: str):
    """
    Write bridge files that point each assistant at .ai/.

    AGENTS.md is always written. Existing files are kept unless
    --overwrite is given.

    \b
    Examples:
        dotai bridge
        dotai bridge -a claude -a cursor --overwrite
    """
    project_root = resolve_project(project_path)

    try:
        registry = get_registry(config.get_environment())
        assistants = resolve_assistants(
            registry, assistant_ids, load_preferences(project_root)
        )
    except DotAIError as e:
        handle_dotai_error(e)

    files = generate_bridge_files(assistants, project_root)
    try:
        result = write_bridge_files(files, project_root, overwrite=overwrite)
    except OSError as e:
        ui.error(f"Cannot write bridge files: {e}")
        raise SystemExit(1)

    ui.header(f"Bridge files {ui.Icons.ARROW} {project_root}")
    for bridge in files:
        if bridge.file_path in result.written:
            ui.item_result(bridge.file_path, ok=True, note=bridge.description)
        else:
            ui.console.print(f"  [dim]{ui.Icons.SKIP} {bridge.file_path} (exists)[/dim]")

    if result.skipped:
        ui.blank()
        ui.hint("Use --overwrite to replace existing files")


@click.command(name="prefs")
@click.option(
    "-a",
    "--assistant",
    "assistant_ids",
    multiple=True,
    help="Default assistant (repeatable)",
)
@click.option("-s", "--scope", "default_scope", type=click.Choice(SCOPES), default=None)
@click.option(
    "-m", "--method", "default_method", type=click.Choice(METHODS), default=None
)
@click.option(
    "--global",
    "use_global",
    is_flag=True,
    help="Store in the global lock file instead of the project's",
)
@project_option
def prefs_cmd(
    assistant_ids: tuple[str, ...],
    default_scope: Optional[str],
    default_method: Optional[str],
    use_global: bool,
    project_path: str,
):
    """
    Show or set default install preferences.

    Project preferences override global ones.

    \b
    Examples:
        dotai prefs
        dotai prefs -a claude -a cursor --global
        dotai prefs -m symlink
    """
    project_root = resolve_project(project_path)
    env = config.get_environment()
    store = get_lock_store("global" if use_global else "project", project_root, env)

    update = Preferences(
        default_assistants=list(assistant_ids) if assistant_ids else None,
        default_scope=default_scope,
        default_method=default_method,
    )

    if update.is_empty():
        current = load_preferences(project_root)
        ui.header("Preferences")
        ui.kv("Assistants", ", ".join(current.default_assistants or []) or "(auto)")
        ui.kv("Scope", current.default_scope or f"({config.DEFAULT_SCOPE})")
        ui.kv("Method", current.default_method or f"({config.DEFAULT_METHOD})")
        return

    try:
        registry = get_registry(env)
        for assistant_id in assistant_ids:
            registry.require(assistant_id)
        saved = store.save_preferences(update)
    except DotAIError as e:
        handle_dotai_error(e)

    ui.success(f"Saved preferences to {store.path}")
    if saved.default_assistants:
        ui.kv("Assistants", ", ".join(saved.default_assistants))
    if saved.default_scope:
        ui.kv("Scope", saved.default_scope)
    if saved.default_method:
        ui.kv("Method", saved.default_method)
