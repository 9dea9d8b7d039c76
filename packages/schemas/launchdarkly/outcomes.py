"""Outcome schemas for an expiry run.

Each flag seen by a run ends up in exactly one of UpdatedFlag, FailedFlag or
SkippedFlag. Serialized with by_alias=True the models use the camelCase keys
published in the action outputs (calculatedExpiryDate, customPropertyName, ...).
"""

from collections import Counter
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ALREADY_HAS_PREFIX = "Already has"
INVALID_CREATION_DATE = "Invalid or missing creation date"


class _OutcomeModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UpdatedFlag(_OutcomeModel):
    """A flag whose expiry property was written successfully."""

    key: str
    name: str
    creation_date: str = Field(..., description="Creation date as ISO YYYY-MM-DD (UTC)")
    calculated_expiry_date: str = Field(..., description="Expiry date in the run's date format")
    days_from_creation: int = Field(..., ge=1, le=365)
    custom_property_name: str


class FailedFlag(_OutcomeModel):
    """A flag whose write-back failed after retries."""

    key: str
    name: str
    error: str


class SkippedFlag(_OutcomeModel):
    """A flag the expiry filter left untouched, with the reason."""

    key: str
    name: str
    reason: str
    existing_value: str | None = None
    creation_date: Any = None


class ProcessResult(_OutcomeModel):
    """Outcome of processing the flags that passed the filter."""

    updated_flags: list[UpdatedFlag] = Field(default_factory=list)
    failed_flags: list[FailedFlag] = Field(default_factory=list)
    total_processed: int = 0


class RunResult(_OutcomeModel):
    """Aggregate outcome of a full run.

    total_found counts every fetched flag; skipped_flags plus total_processed
    always add up to it.
    """

    updated_flags: list[UpdatedFlag] = Field(default_factory=list)
    failed_flags: list[FailedFlag] = Field(default_factory=list)
    skipped_flags: list[SkippedFlag] = Field(default_factory=list)
    total_found: int = 0
    total_processed: int = 0

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_flags)

    def skip_reason_breakdown(self) -> dict[str, int]:
        """Count skipped flags per reason, folding every "Already has ..." together."""
        reasons = Counter(
            "Already has expiry" if flag.reason.startswith(ALREADY_HAS_PREFIX) else flag.reason
            for flag in self.skipped_flags
        )
        return dict(reasons)


__all__ = [
    "ALREADY_HAS_PREFIX",
    "INVALID_CREATION_DATE",
    "FailedFlag",
    "ProcessResult",
    "RunResult",
    "SkippedFlag",
    "UpdatedFlag",
]
