"""
Catalog CLI commands.

Commands for browsing, searching and validating the template catalog.
"""

import json
from pathlib import Path
from typing import Optional

import click
from rich.markup import escape
from rich.table import Table

from dotai import ui
from dotai.assistants import content_type_display_name
from dotai.catalog import get_catalog
from dotai.cli.install import handle_dotai_error
from dotai.config import CONTENT_TYPES
from dotai.exceptions import DotAIError
from dotai.models import CatalogItem


def _print_items(items: list[CatalogItem]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Item", no_wrap=True)
    table.add_column("Description")
    table.add_column("Tags", style="dim")

    for item in items:
        table.add_row(
            ui.item_name(item.key),
            escape(item.description),
            escape(", ".join(item.tags or [])),
        )
    ui.console.print(table)


@click.command(name="list")
@click.option(
    "-t",
    "--type",
    "content_type",
    type=click.Choice(CONTENT_TYPES),
    default=None,
    help="Only list one content type",
)
def list_cmd(content_type: Optional[str]):
    """
    List catalog items.

    \b
    Examples:
        dotai list
        dotai list -t rules
    """
    catalog = get_catalog()
    items = catalog.items(content_type)

    if not items:
        ui.warning("No templates found")
        ui.hint(f"Catalog root: {catalog.root}")
        return

    _print_items(items)

    stats = catalog.stats()
    parts = [
        f"{stats[t]} {content_type_display_name(t).lower()}"
        for t in CONTENT_TYPES
        if stats[t] and (content_type is None or t == content_type)
    ]
    ui.console.print(f"[dim]{', '.join(parts)}[/dim]")


@click.command(name="search")
@click.argument("query")
def search_cmd(query: str):
    """Search names, descriptions, tags and categories."""
    matches = get_catalog().search(query)

    if not matches:
        ui.warning(f"No templates match '{escape(query)}'")
        return

    _print_items(matches)


@click.command(name="show")
@click.argument("ref")
@click.option("--raw", is_flag=True, help="Print the content file only")
def show_cmd(ref: str, raw: bool):
    """
    Show a catalog item.

    REF is TYPE/ID or a bare ID.
    """
    try:
        item = get_catalog().resolve(ref)
    except DotAIError as e:
        handle_dotai_error(e)

    if raw:
        click.echo(item.content or "", nl=False)
        return

    ui.header(ui.item_name(item.key))
    ui.kv("Name", escape(item.name))
    ui.kv("Type", content_type_display_name(item.type))
    if item.description:
        ui.kv("Description", escape(item.description))
    if item.category:
        ui.kv("Category", escape(item.category))
    if item.tags:
        ui.kv("Tags", escape(", ".join(item.tags)))
    ui.kv("Path", ui.path(escape(item.path)))
    ui.blank()
    ui.hint(f"Install with 'dotai install {item.key}'")


@click.command(name="lint")
@click.option("--strict", is_flag=True, help="Treat warnings as failures")
def lint_cmd(strict: bool):
    """
    Validate every template's frontmatter.

    Exits with status 1 when any item has errors (or warnings, with
    --strict).
    """
    reports = get_catalog().lint()
    if not reports:
        ui.warning("No templates found")
        return

    failed = 0
    warned = 0
    for report in reports:
        warnings = [i for i in report.issues if i.severity == "warning"]
        errors = [i for i in report.issues if i.severity == "error"]
        passed = report.ok and not (strict and warnings)
        if not passed:
            failed += 1
        if warnings:
            warned += 1

        if passed and not warnings:
            continue

        ui.item_result(report.key, passed)
        if report.load_error:
            ui.console.print(f"      [red]{escape(report.load_error)}[/red]")
        for issue in errors:
            ui.console.print(
                f"      [red]{issue.field}: {escape(issue.message)}[/red]"
            )
        for issue in warnings:
            ui.console.print(
                f"      [yellow]{issue.field}: {escape(issue.message)}[/yellow]"
            )

    ui.blank()
    summary = (
        f"{ui.count_summary('templates', len(reports))} checked, "
        f"{failed} failed, {warned} with warnings"
    )
    if failed:
        ui.error(summary)
        raise SystemExit(1)
    ui.success(summary)


@click.command(name="index")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the index to a file instead of stdout",
)
def index_cmd(output: Optional[str]):
    """Generate the JSON catalog index."""
    index = get_catalog().index()
    data = json.dumps(index, indent=2) + "\n"

    if output is None:
        click.echo(data, nl=False)
        return

    target = Path(output)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(data, encoding="utf-8")
    except OSError as e:
        ui.error(f"Cannot write {target}: {e}")
        raise SystemExit(1)
    ui.success(f"Wrote {ui.count_summary('items', len(index['items']))} to {target}")
