"""Compatibility module exposing the CLI Typer app under ``apps.cli``.

Re-exports the Typer application instance so tests and entry points can use
``apps.cli.main:app``.
"""

from __future__ import annotations

from apps.cli.expiry_cli.main import app

__all__ = ["app"]
