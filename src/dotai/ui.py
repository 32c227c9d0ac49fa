"""
UI utilities for consistent CLI output.

Provides icons, styling helpers, and output functions shared by every
command. Library modules never print; they log, and the CLI routes
those records through the same console.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

# Shared console instance
console = Console(soft_wrap=True, legacy_windows=False)


class Icons:
    """Unicode symbols for CLI output."""
    # Status
    SUCCESS = "✓"
    ERROR = "✗"
    WARNING = "!"
    SKIP = "○"

    # Structure
    ARROW = "→"
    BULLET = "•"
    INDENT = "  "


def configure_logging(debug: bool = False) -> None:
    """Route library log records through the shared console."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=debug, markup=False)],
        force=True,
    )


def success(message: str, prefix: bool = True) -> None:
    """Print a success message."""
    icon = f"[green]{Icons.SUCCESS}[/green] " if prefix else ""
    console.print(f"{icon}[green]{message}[/green]")


def error(message: str, prefix: bool = True) -> None:
    """Print an error message."""
    icon = f"[red]{Icons.ERROR}[/red] " if prefix else ""
    console.print(f"{icon}[red]{message}[/red]")


def warning(message: str, prefix: bool = True) -> None:
    """Print a warning message."""
    icon = f"[yellow]{Icons.WARNING}[/yellow] " if prefix else ""
    console.print(f"{icon}[yellow]{message}[/yellow]")


def header(title: str) -> None:
    """Print a section header."""
    console.print(f"\n[bold]{title}[/bold]")


def item_name(key: str) -> str:
    """Format an item key (e.g. skills/foo)."""
    return f"[cyan]{key}[/cyan]"


def path(p: str) -> str:
    """Format a file path."""
    return f"[dim]{p}[/dim]"


def item(text: str, indent: int = 1) -> None:
    """Print a list item with bullet."""
    prefix = Icons.INDENT * indent
    console.print(f"{prefix}{Icons.BULLET} {text}")


def item_result(name: str, ok: bool, indent: int = 1, note: str = None) -> None:
    """Print an item with success/failure indicator."""
    prefix = Icons.INDENT * indent
    icon = f"[green]{Icons.SUCCESS}[/green]" if ok else f"[red]{Icons.ERROR}[/red]"
    color = "green" if ok else "red"
    msg = f"{prefix}{icon} [{color}]{name}[/{color}]"
    if note:
        msg += f" [dim]({note})[/dim]"
    console.print(msg)


def kv(key: str, value: str, indent: int = 1) -> None:
    """Print a key-value pair."""
    prefix = Icons.INDENT * indent
    console.print(f"{prefix}[dim]{key}:[/dim] {value}")


def blank() -> None:
    """Print a blank line."""
    console.print()


def hint(message: str) -> None:
    """Print a helpful hint."""
    console.print(f"[dim]{Icons.ARROW} {message}[/dim]")


def count_summary(items: str, count: int) -> str:
    """Format a count summary (e.g., '3 skills')."""
    return f"{count} {items}" if count != 1 else f"{count} {items.rstrip('s')}"
