"""LaunchDarkly entity schemas.

Flags as returned by the LaunchDarkly REST API, and the per-flag outcomes of an
expiry run.
"""

from packages.schemas.launchdarkly.flag import CustomProperty, FlagRecord
from packages.schemas.launchdarkly.outcomes import (
    FailedFlag,
    ProcessResult,
    RunResult,
    SkippedFlag,
    UpdatedFlag,
)

__all__ = [
    "CustomProperty",
    "FailedFlag",
    "FlagRecord",
    "ProcessResult",
    "RunResult",
    "SkippedFlag",
    "UpdatedFlag",
]
