"""Date helper commands: print today's date, validate a date string."""

from __future__ import annotations

import typer
from rich.console import Console

from packages.common.dates import SUPPORTED_FORMATS, is_valid_date_format, today

console = Console()


def today_command(date_format: str) -> None:
    """Print today's local date in the given layout."""
    console.print(today(date_format))


def check_date_command(value: str, date_format: str) -> None:
    """Validate a date string; exit 1 if it is not a real date in the layout."""
    if date_format.upper() not in SUPPORTED_FORMATS:
        console.print(
            f"[red]✗ Unsupported date format: {date_format}[/red]\n"
            f"[yellow]Supported formats: {', '.join(SUPPORTED_FORMATS)}[/yellow]"
        )
        raise typer.Exit(code=1)

    if not is_valid_date_format(value, date_format):
        console.print(f"[red]✗ {value} is not a valid {date_format.upper()} date[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ {value} is a valid {date_format.upper()} date[/green]")
