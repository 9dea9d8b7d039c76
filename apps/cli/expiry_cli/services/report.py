"""Render an expiry run for humans and for CI.

- render_report: rich tables on the console
- write_github_outputs: key/value outputs for a GitHub Actions step
- write_result_json: full RunResult as a JSON file
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from packages.common.config import RunSettings
from packages.schemas.launchdarkly import RunResult

logger = logging.getLogger(__name__)

MAX_SKIPPED_ROWS = 20


def render_report(console: Console, settings: RunSettings, result: RunResult) -> None:
    """Print the run settings, totals, and per-flag tables."""
    summary = Table(title="LaunchDarkly Flag Expiry Setter Results", show_header=False)
    summary.add_column("Field", style="cyan")
    summary.add_column("Value")
    summary.add_row("Project", settings.project_key)
    summary.add_row("Days from Creation", str(settings.days_from_creation))
    summary.add_row("Custom Property", settings.custom_property_name)
    summary.add_row("Date Format", settings.date_format)
    summary.add_row("Skip Existing", str(settings.skip_existing).lower())
    summary.add_row("Total Flags Found", str(result.total_found))
    summary.add_row("Flags Skipped", str(len(result.skipped_flags)))
    summary.add_row("Flags Processed", str(result.total_processed))
    summary.add_row("Successfully Updated", str(len(result.updated_flags)))
    summary.add_row("Failed", str(len(result.failed_flags)))
    console.print(summary)

    if result.updated_flags:
        updated = Table(title="Successfully Updated Flags")
        updated.add_column("Flag Key", style="cyan")
        updated.add_column("Flag Name")
        updated.add_column("Creation Date")
        updated.add_column("Expiry Date", style="green")
        for flag in result.updated_flags:
            updated.add_row(flag.key, flag.name, flag.creation_date, flag.calculated_expiry_date)
        console.print(updated)

    if result.skipped_flags:
        skipped = Table(title="Skipped Flags")
        skipped.add_column("Flag Key", style="cyan")
        skipped.add_column("Flag Name")
        skipped.add_column("Reason", style="yellow")
        for flag in result.skipped_flags[:MAX_SKIPPED_ROWS]:
            skipped.add_row(flag.key, flag.name, flag.reason)
        console.print(skipped)

        if len(result.skipped_flags) > MAX_SKIPPED_ROWS:
            console.print(
                f"[dim]Showing first {MAX_SKIPPED_ROWS} of "
                f"{len(result.skipped_flags)} skipped flags[/dim]"
            )

        console.print("Skipped flags breakdown:")
        for reason, count in result.skip_reason_breakdown().items():
            console.print(f"  - {reason}: {count} flags")

    if result.failed_flags:
        failed = Table(title="Failed Flags")
        failed.add_column("Flag Key", style="cyan")
        failed.add_column("Error", style="red")
        for flag in result.failed_flags:
            failed.add_row(flag.key, flag.error)
        console.print(failed)


def build_outputs(result: RunResult) -> dict[str, str]:
    """Flatten a RunResult into the action's string outputs."""

    def dump(items: Sequence[BaseModel]) -> str:
        return json.dumps([item.model_dump(by_alias=True, exclude_none=True) for item in items])

    return {
        "updated_flags": dump(result.updated_flags),
        "failed_flags": dump(result.failed_flags),
        "skipped_flags": dump(result.skipped_flags),
        "total_processed": str(result.total_processed),
        "total_found": str(result.total_found),
        "total_skipped": str(len(result.skipped_flags)),
    }


def write_github_outputs(result: RunResult, output_path: str | None = None) -> bool:
    """Append outputs to the GitHub Actions output file.

    Uses heredoc-style delimiters so JSON values may contain any character.

    Args:
        result: Run outcome.
        output_path: Output file; defaults to the GITHUB_OUTPUT environment variable.

    Returns:
        bool: True if outputs were written, False when no output file is configured.
    """
    path = output_path or os.getenv("GITHUB_OUTPUT")
    if not path:
        return False

    with open(path, "a", encoding="utf-8") as fh:
        for name, value in build_outputs(result).items():
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")

    logger.info(f"Wrote action outputs to {path}")
    return True


def write_result_json(result: RunResult, path: Path) -> None:
    path.write_text(result.model_dump_json(by_alias=True, indent=2), encoding="utf-8")


__all__ = ["build_outputs", "render_report", "write_github_outputs", "write_result_json"]
