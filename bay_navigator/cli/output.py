"""
Bay Navigator CLI - Rich Output Helpers

Utility functions for consistent command-line output using Rich.

Functions:
    print_table    - Print a formatted table
    print_status   - Print checks with on/off indicators
    print_json     - Print formatted JSON
    print_error    - Print error message
    print_success  - Print success message
    print_warning  - Print warning message
    print_info     - Print info message
    print_panel    - Print a bordered panel
"""

from __future__ import annotations

import json
from typing import Optional

from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table

# Create console instances
console = Console()
err_console = Console(stderr=True)

# Status indicators
STATUS_ON = "[green]✓[/green]"
STATUS_OFF = "[red]✗[/red]"

# Fallback indicators for terminals without Unicode
STATUS_ON_ASCII = "[green]ON[/green]"
STATUS_OFF_ASCII = "[red]OFF[/red]"


def print_table(
    title: str,
    columns: list[str],
    rows: list[list[str]],
    styles: Optional[list[str]] = None,
    show_lines: bool = False,
) -> None:
    """
    Print a rich table.

    Args:
        title: Table title
        columns: Column headers
        rows: Table rows (list of lists)
        styles: Optional column styles
        show_lines: Whether to show row separator lines
    """
    table = Table(title=title, show_lines=show_lines)

    for i, col in enumerate(columns):
        style = styles[i] if styles and i < len(styles) else None
        table.add_column(col, style=style)

    for row in rows:
        # Pad short rows so every column is filled
        padded_row = list(row) + [""] * (len(columns) - len(row))
        table.add_row(*padded_row[:len(columns)])

    console.print(table)


def print_status(
    checks: list[tuple[str, bool, str]],
    title: Optional[str] = None,
    use_unicode: bool = True,
) -> None:
    """
    Print named flags with on/off indicators.

    Args:
        checks: List of (name, enabled, message) tuples
        title: Optional title for the list
        use_unicode: Whether to use Unicode symbols
    """
    if title:
        console.print(f"[bold]{title}[/bold]")
        console.print()

    on_icon = STATUS_ON if use_unicode else STATUS_ON_ASCII
    off_icon = STATUS_OFF if use_unicode else STATUS_OFF_ASCII

    for name, enabled, message in checks:
        icon = on_icon if enabled else off_icon
        if message:
            console.print(f"  {icon} [cyan]{name}[/cyan]: {message}")
        else:
            console.print(f"  {icon} [cyan]{name}[/cyan]")


def print_json(data: dict | list, indent: int = 2, highlight: bool = True) -> None:
    """
    Print formatted JSON.

    Args:
        data: Data to print as JSON
        indent: Indentation level
        highlight: Whether to syntax highlight
    """
    json_str = json.dumps(data, indent=indent, default=str)
    if highlight:
        console.print(JSON(json_str))
    else:
        console.print(json_str, markup=False, highlight=False, soft_wrap=True)


def print_error(message: str, hint: Optional[str] = None) -> None:
    """
    Print error message.

    Args:
        message: Error message
        hint: Optional hint for resolving the error
    """
    err_console.print(f"[bold red]Error:[/bold red] {message}")

    if hint:
        err_console.print(f"[yellow]Hint:[/yellow] {hint}")


def print_success(message: str, details: Optional[str] = None) -> None:
    console.print(f"[bold green]Success:[/bold green] {message}")

    if details:
        console.print(f"[dim]{details}[/dim]")


def print_warning(message: str, details: Optional[str] = None) -> None:
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")

    if details:
        console.print(f"[dim]{details}[/dim]")


def print_info(message: str, details: Optional[str] = None) -> None:
    console.print(f"[bold blue]Info:[/bold blue] {message}")

    if details:
        console.print(f"[dim]{details}[/dim]")


def print_panel(
    content: str,
    title: Optional[str] = None,
    style: str = "default",
) -> None:
    """
    Print a bordered panel.

    Args:
        content: Panel content
        title: Optional panel title
        style: Panel style (default, success, error, warning, info)
    """
    border_style = {
        "default": "blue",
        "success": "green",
        "error": "red",
        "warning": "yellow",
        "info": "cyan",
    }.get(style, "blue")

    console.print(Panel(content, title=title, border_style=border_style, expand=False))
