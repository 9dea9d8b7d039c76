"""Flag expiry CLI - Typer command-line interface for LaunchDarkly expiry runs."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from apps.cli.expiry_cli.commands.run import ProcessingMode, load_config
from apps.cli.expiry_cli.utils import async_command
from packages.common.dates import DEFAULT_FORMAT
from packages.common.logging import setup_logging

app = typer.Typer(
    name="flag-expiry",
    help="Set expiry dates on LaunchDarkly feature flags",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)


@app.callback()
def main(
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)"
    ),
    log_format: str | None = typer.Option(None, "--log-format", help="Log format (json or text)"),
) -> None:
    """Load configuration and set up logging before any command runs."""
    load_config()
    setup_logging(level=log_level, fmt=log_format)


@app.command()
@async_command
async def run(
    project_key: str | None = typer.Option(
        None, "--project-key", "-p", help="LaunchDarkly project key (env: PROJECT_KEY)"
    ),
    property_name: str | None = typer.Option(
        None, "--property-name", help="Custom property holding the expiry date"
    ),
    days: int | None = typer.Option(
        None, "--days", "-d", help="Days from flag creation to expiry (1-365)"
    ),
    date_format: str | None = typer.Option(
        None, "--date-format", "-f", help="MM/DD/YYYY, MM-DD-YYYY, YYYY-MM-DD or YYYY/MM/DD"
    ),
    skip_existing: bool | None = typer.Option(
        None,
        "--skip-existing/--no-skip-existing",
        help="Leave flags that already have an expiry date untouched",
    ),
    mode: ProcessingMode | None = typer.Option(
        None, "--mode", help="Write pacing: sequential or batched"
    ),
    output_json: Path | None = typer.Option(
        None, "--output-json", "-o", help="Write the full run result to a JSON file"
    ),
) -> None:
    """
    Set expiry dates on every flag in a project that lacks one.

    Expiry = flag creation date + days. Flags that already carry the property
    are skipped unless --no-skip-existing is given.

    Examples:
        flag-expiry run --project-key default
        flag-expiry run -p default --days 60 --date-format YYYY-MM-DD
        flag-expiry run -p default --mode batched --output-json results.json
    """
    from apps.cli.expiry_cli.commands.run import run_command

    await run_command(
        project_key=project_key,
        property_name=property_name,
        days=days,
        date_format=date_format,
        skip_existing=skip_existing,
        mode=mode,
        output_json=output_json,
    )


@app.command(name="today")
def today_(
    date_format: str = typer.Option(DEFAULT_FORMAT, "--format", "-f", help="Date layout"),
) -> None:
    """
    Print today's date in the given layout.

    Examples:
        flag-expiry today
        flag-expiry today --format YYYY-MM-DD
    """
    from apps.cli.expiry_cli.commands.dates import today_command

    today_command(date_format)


@app.command(name="check-date")
def check_date(
    value: str = typer.Argument(..., help="Date string to validate"),
    date_format: str = typer.Option(DEFAULT_FORMAT, "--format", "-f", help="Date layout"),
) -> None:
    """
    Validate a date string against a layout.

    Examples:
        flag-expiry check-date 02/29/2024
        flag-expiry check-date 2023-02-29 --format YYYY-MM-DD
    """
    from apps.cli.expiry_cli.commands.dates import check_date_command

    check_date_command(value, date_format)


if __name__ == "__main__":
    app()
