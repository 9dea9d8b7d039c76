"""Run async Typer commands on a fresh event loop.

An expiry run is async end to end (httpx requests, paced sleeps, batched
gathers) while Typer only calls plain functions.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any

import typer

logger = logging.getLogger(__name__)

INTERRUPTED_EXIT_CODE = 130


def async_command(func: Callable[..., Coroutine[Any, Any, Any]]) -> Callable[..., Any]:
    """Wrap a coroutine function so Typer can register it as a command.

    Ctrl-C aborts the run and exits with code 130; writes already sent stay applied.

    Usage:
        @app.command()
        @async_command
        async def run(project_key: str) -> None:
            await run_command(project_key=project_key)
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return asyncio.run(func(*args, **kwargs))
        except KeyboardInterrupt:
            logger.warning("Interrupted; flags written so far keep their expiry dates")
            raise typer.Exit(code=INTERRUPTED_EXIT_CODE) from None

    return wrapper


__all__ = ["INTERRUPTED_EXIT_CODE", "async_command"]
