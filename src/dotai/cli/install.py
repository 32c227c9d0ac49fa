"""
Install CLI commands.

Commands for installing, uninstalling, listing and checking installed
catalog items.
"""

from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.markup import escape
from rich.table import Table

from dotai import config, ui
from dotai.assistants import AssistantConfig, AssistantRegistry, get_registry
from dotai.bridge import generate_bridge_files, write_bridge_files
from dotai.catalog import get_catalog, is_valid_item_id
from dotai.config import CONTENT_TYPES, METHODS, SCOPES
from dotai.exceptions import AmbiguousItemError, DotAIError, ItemNotFoundError
from dotai.installer import (
    catalog_hash_resolver,
    install_items,
    is_item_installed,
    uninstall_item,
)
from dotai.lock import LockStore, get_lock_store
from dotai.models import CatalogItem, Preferences


# =============================================================================
# Shared helpers
# =============================================================================


def handle_dotai_error(e: DotAIError) -> NoReturn:
    """Print a DotAIError and exit."""
    ui.error(escape(str(e)))
    raise SystemExit(1)


def project_option(f):
    return click.option(
        "-p",
        "--project",
        "project_path",
        default=".",
        show_default=True,
        type=click.Path(file_okay=False),
        help="Project root for project scope",
    )(f)


def resolve_project(project_path: str) -> Path:
    """Resolve and check the project root."""
    root = Path(project_path).resolve()
    if not root.is_dir():
        ui.error(f"Project path does not exist: {root}")
        raise SystemExit(1)
    return root


def load_preferences(project_root: Path) -> Preferences:
    """Global preferences, overridden by the project's own."""
    env = config.get_environment()
    merged = Preferences()
    for store in (
        get_lock_store("global", env=env),
        get_lock_store("project", project_root),
    ):
        stored = store.get_preferences()
        if stored:
            merged = merged.merged(stored)
    return merged


def resolve_assistants(
    registry: AssistantRegistry,
    assistant_ids: tuple[str, ...],
    preferences: Preferences,
) -> list[AssistantConfig]:
    """
    Pick the assistants to act for.

    Explicit ids win, then saved default assistants, then whatever is
    detected on this machine, then the universal assistants.
    """
    if assistant_ids:
        return [registry.require(a) for a in assistant_ids]

    if preferences.default_assistants:
        return [
            a
            for a in (registry.get(i) for i in preferences.default_assistants)
            if a is not None
        ]

    detected = registry.detect_installed()
    if detected:
        return detected
    return registry.universal()


def _entry_for_ref(ref: str, store: LockStore) -> tuple[str, str]:
    """Find the (type, id) of an installed item from a ref."""
    if "/" in ref:
        content_type, item_id = ref.split("/", 1)
        if content_type not in CONTENT_TYPES or not is_valid_item_id(item_id):
            raise ItemNotFoundError(ref, f"Invalid item reference '{ref}'")
        return content_type, item_id

    matches = [i for i in store.installed_items() if i.id == ref]
    if not matches:
        raise ItemNotFoundError(ref, f"Item '{ref}' is not installed")
    if len(matches) > 1:
        raise AmbiguousItemError(ref, [m.key for m in matches])
    return matches[0].type, matches[0].id


def _detach(
    store: LockStore,
    content_type: str,
    item_id: str,
    assistant_ids: tuple[str, ...],
) -> list[str]:
    """Drop assistants from a lock entry and return those still using it."""
    if not assistant_ids:
        store.forget(content_type, item_id)
        return []

    for assistant_id in assistant_ids:
        store.remove(content_type, item_id, assistant_id)
    entry = store.get_install_info(content_type, item_id)
    return entry.assistants if entry else []


def _write_bridges(assistants: list[AssistantConfig], project_root: Path) -> None:
    result = write_bridge_files(
        generate_bridge_files(assistants, project_root), project_root
    )
    for written in result.written:
        ui.item_result(written, ok=True, note="bridge written")
    for skipped in result.skipped:
        ui.console.print(
            f"  [dim]{ui.Icons.SKIP} {skipped} (exists, use 'dotai bridge --overwrite')[/dim]"
        )


# =============================================================================
# Commands
# =============================================================================


@click.command(name="install")
@click.argument("refs", nargs=-1, required=True)
@click.option(
    "-a",
    "--assistant",
    "assistant_ids",
    multiple=True,
    help="Assistant to install for (repeatable; default: preferences, then detected)",
)
@click.option(
    "-s", "--scope", type=click.Choice(SCOPES), default=None, help="Installation scope"
)
@click.option(
    "-m", "--method", type=click.Choice(METHODS), default=None, help="Installation method"
)
@click.option("--no-bridge", is_flag=True, help="Do not write bridge files")
@project_option
def install_cmd(
    refs: tuple[str, ...],
    assistant_ids: tuple[str, ...],
    scope: Optional[str],
    method: Optional[str],
    no_bridge: bool,
    project_path: str,
):
    """
    Install catalog items into the canonical .ai/ directory.

    Items are referenced as TYPE/ID (e.g. skills/code-review) or by a
    bare ID when it is unique across content types.

    \b
    Examples:
        dotai install skills/code-review
        dotai install code-review rules/no-secrets -a claude -a cursor
        dotai install skills/code-review -s global
    """
    project_root = resolve_project(project_path)
    env = config.get_environment()
    catalog = get_catalog()

    try:
        registry = get_registry(env)
        preferences = load_preferences(project_root)
        assistants = resolve_assistants(registry, assistant_ids, preferences)
        items = [catalog.resolve(ref) for ref in refs]
    except DotAIError as e:
        handle_dotai_error(e)

    if not assistants:
        ui.error("No assistants selected")
        ui.hint("Use -a <assistant> or 'dotai prefs -a <assistant>'")
        raise SystemExit(1)

    scope = scope or preferences.default_scope or config.DEFAULT_SCOPE
    method = method or preferences.default_method or config.DEFAULT_METHOD
    location = str(project_root) if scope == "project" else "~/.ai (global scope)"

    ui.header(
        f"Installing {ui.count_summary('items', len(items))} {ui.Icons.ARROW} {location}"
    )
    ui.console.print(f"  [dim]for {', '.join(a.id for a in assistants)}[/dim]")
    ui.blank()

    summary = install_items(items, assistants, scope, method, project_root, env)
    for result in summary.results:
        ui.item_result(
            result.item.key,
            result.success,
            note=escape(result.error) if result.error else None,
        )

    if scope == "project" and not no_bridge and summary.successful:
        ui.blank()
        try:
            _write_bridges(assistants, project_root)
        except OSError as e:
            ui.error(f"Cannot write bridge files: {e}")

    ui.blank()
    if summary.failed:
        ui.error(f"Installed {summary.successful} of {summary.total}")
        raise SystemExit(1)
    ui.success(f"Installed {ui.count_summary('items', summary.successful)}")


@click.command(name="uninstall")
@click.argument("refs", nargs=-1, required=True)
@click.option(
    "-a",
    "--assistant",
    "assistant_ids",
    multiple=True,
    help="Only detach these assistants (content is removed once none remain)",
)
@click.option(
    "-s",
    "--scope",
    type=click.Choice(SCOPES),
    default=config.DEFAULT_SCOPE,
    show_default=True,
    help="Installation scope",
)
@project_option
def uninstall_cmd(
    refs: tuple[str, ...],
    assistant_ids: tuple[str, ...],
    scope: str,
    project_path: str,
):
    """
    Uninstall items from the canonical .ai/ directory.

    Without -a the item is removed for every assistant. With -a only
    those assistants are detached; the content itself is removed once no
    assistant uses it.

    \b
    Examples:
        dotai uninstall skills/code-review
        dotai uninstall code-review -a cursor
    """
    project_root = resolve_project(project_path)
    env = config.get_environment()
    store = get_lock_store(scope, project_root, env)

    try:
        registry = get_registry(env)
        for assistant_id in assistant_ids:
            registry.require(assistant_id)
        targets = [_entry_for_ref(ref, store) for ref in refs]
    except DotAIError as e:
        handle_dotai_error(e)

    ui.header(f"Uninstalling {ui.count_summary('items', len(targets))}")
    ui.blank()

    failures = 0
    for content_type, item_id in targets:
        key = f"{content_type}/{item_id}"
        try:
            remaining = _detach(store, content_type, item_id, assistant_ids)
        except DotAIError as e:
            handle_dotai_error(e)
        if remaining:
            ui.item_result(key, ok=True, note=f"still used by {', '.join(remaining)}")
            continue

        item = CatalogItem(id=item_id, name=item_id, type=content_type, path=key)
        assistant = registry.get(assistant_ids[0]) if assistant_ids else None
        try:
            removed = uninstall_item(item, assistant, scope, project_root, env)
        except DotAIError as e:
            handle_dotai_error(e)
        if removed:
            ui.item_result(key, ok=True, note="removed")
        else:
            failures += 1
            ui.item_result(key, ok=False, note="nothing to remove")

    ui.blank()
    if failures:
        ui.warning(f"{ui.count_summary('items', failures)} had no installed content")
    else:
        ui.success("Done")


@click.command(name="installed")
@click.option(
    "-s",
    "--scope",
    type=click.Choice(SCOPES),
    default=config.DEFAULT_SCOPE,
    show_default=True,
    help="Installation scope",
)
@click.option(
    "-t", "--type", "content_type", type=click.Choice(CONTENT_TYPES), default=None
)
@project_option
def installed_cmd(scope: str, content_type: Optional[str], project_path: str):
    """List installed items recorded in the lock file."""
    project_root = resolve_project(project_path)
    env = config.get_environment()
    store = get_lock_store(scope, project_root, env)

    entries = (
        store.installed_items_by_type(content_type)
        if content_type
        else store.installed_items()
    )
    if not entries:
        ui.warning("Nothing installed")
        ui.hint("Use 'dotai list' to browse the catalog")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Item", no_wrap=True)
    table.add_column("Assistants")
    table.add_column("Method")
    table.add_column("Installed")
    table.add_column("Status", no_wrap=True)

    for entry in sorted(entries, key=lambda e: e.key):
        item = CatalogItem(id=entry.id, name=entry.id, type=entry.type, path=entry.key)
        present = is_item_installed(item, None, scope, project_root, env)
        status = "[green]ok[/green]" if present else "[red]missing[/red]"
        table.add_row(
            entry.key,
            ", ".join(entry.assistants),
            entry.method,
            entry.installed_at,
            status,
        )

    ui.console.print(table)
    ui.console.print(f"[dim]{store.path}[/dim]")


@click.command(name="outdated")
@click.option(
    "-s",
    "--scope",
    type=click.Choice(SCOPES),
    default=config.DEFAULT_SCOPE,
    show_default=True,
    help="Installation scope",
)
@project_option
def outdated_cmd(scope: str, project_path: str):
    """Show installed items whose catalog source has changed."""
    project_root = resolve_project(project_path)
    env = config.get_environment()
    store = get_lock_store(scope, project_root, env)

    outdated = store.check_for_updates(catalog_hash_resolver(get_catalog()))
    try:
        store.update_last_check()
    except DotAIError as e:
        handle_dotai_error(e)

    if not outdated:
        ui.success("Everything is up to date")
        return

    ui.header("Outdated items")
    for entry in outdated:
        ui.item(ui.item_name(entry.key))
    ui.blank()
    ui.hint("Run 'dotai install <item>' again to refresh")
