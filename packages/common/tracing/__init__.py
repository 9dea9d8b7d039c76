"""Run ID tracking for log correlation.

Every expiry run gets a run ID stored in a context variable so that all log
records emitted while the run is in progress (including those from concurrent
write tasks spawned by the processor) carry the same identifier.
"""

import uuid
from contextvars import ContextVar
from types import TracebackType

# Context variable for storing the current run ID
_run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)


def set_run_id(run_id: str | None = None) -> str:
    """Set the run ID for the current context.

    If no run ID is provided, generates a new UUID4.

    Args:
        run_id: Optional run ID to set. If None, generates a new one.

    Returns:
        str: The run ID that was set.

    Example:
        >>> run_id = set_run_id()
        >>> get_run_id() == run_id
        True
    """
    if run_id is None:
        run_id = str(uuid.uuid4())

    _run_id_var.set(run_id)
    return run_id


def get_run_id() -> str | None:
    """Get the run ID for the current context."""
    return _run_id_var.get()


def clear_run_id() -> None:
    """Clear the run ID for the current context."""
    _run_id_var.set(None)


class RunContext:
    """Context manager that scopes a run ID to a block.

    Example:
        >>> with RunContext() as run_id:
        ...     logger.info("Starting run")  # record carries run_id
    """

    def __init__(self, run_id: str | None = None) -> None:
        self.run_id = run_id
        self.previous_id: str | None = None

    def __enter__(self) -> str:
        self.previous_id = get_run_id()
        self.run_id = set_run_id(self.run_id)
        return self.run_id

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self.previous_id is None:
            clear_run_id()
        else:
            set_run_id(self.previous_id)


# Export public API
__all__ = [
    "RunContext",
    "clear_run_id",
    "get_run_id",
    "set_run_id",
]
