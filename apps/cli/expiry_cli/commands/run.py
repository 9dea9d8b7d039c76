"""Run command for the flag expiry CLI.

Sets expiry dates on every flag in a project that does not have one yet.
This command is thin - business logic is in SetFlagExpiryUseCase.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console

from apps.cli.expiry_cli.services.report import (
    render_report,
    write_github_outputs,
    write_result_json,
)
from packages.common.config import ConfigurationError, FlagExpiryConfig, get_config
from packages.common.factories import make_set_flag_expiry_use_case
from packages.sync.enumerator import EnumerationError

console = Console()
logger = logging.getLogger(__name__)


class ProcessingMode(str, Enum):
    SEQUENTIAL = "sequential"
    BATCHED = "batched"


def _die(message: str) -> NoReturn:
    """Print error and exit with code 1."""
    console.print(message)
    raise typer.Exit(code=1)


def load_config() -> FlagExpiryConfig:
    """Load configuration, exiting with a readable message if the environment is invalid."""
    try:
        return get_config()
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']).upper()}: {error['msg']}"
            for error in e.errors()
        )
        _die(f"[red]✗ Invalid configuration: {problems}[/red]")


async def run_command(
    project_key: str | None = None,
    property_name: str | None = None,
    days: int | None = None,
    date_format: str | None = None,
    skip_existing: bool | None = None,
    mode: ProcessingMode | None = None,
    output_json: Path | None = None,
) -> None:
    """Set expiry dates on flags, then report and publish outputs.

    Options left as None fall back to configuration (environment / .env).

    Raises:
        typer.Exit: Exit with code 1 on invalid input, enumeration failure,
            or when any flag failed to update.
    """
    config = load_config()

    overrides = {
        "project_key": project_key,
        "custom_property_name": property_name,
        "days_from_creation": days,
        "date_format": date_format,
        "skip_existing": skip_existing,
    }
    settings = config.run_settings.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )
    if mode is not None:
        config = config.model_copy(update={"processing_mode": mode.value})

    try:
        use_case, cleanup = make_set_flag_expiry_use_case(settings=settings, config=config)
    except ConfigurationError as e:
        _die(f"[red]✗ {e}[/red]")

    console.print(f"[yellow]Setting flag expiry dates in project {settings.project_key}[/yellow]")

    try:
        result = await use_case.execute()
    except EnumerationError as e:
        logger.error(f"Flag enumeration failed: {e}")
        _die(f"[red]✗ LaunchDarkly API Error: {e}[/red]")
    except Exception as e:
        logger.exception("Expiry run failed")
        _die(f"[red]✗ Action failed with error: {e}[/red]")
    finally:
        await cleanup()

    render_report(console, settings, result)
    write_github_outputs(result)
    if output_json is not None:
        write_result_json(result, output_json)
        console.print(f"[green]✓ Wrote results to {output_json}[/green]")

    if result.has_failures:
        _die(
            f"[red]✗ Failed to update {len(result.failed_flags)} out of "
            f"{result.total_processed} flags[/red]"
        )

    console.print(f"[green]✓ Updated {len(result.updated_flags)} flags[/green]")


__all__ = ["ProcessingMode", "load_config", "run_command"]
