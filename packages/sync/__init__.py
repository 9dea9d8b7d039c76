"""Flag synchronization pipeline: enumerate, filter, write back."""

from packages.sync.enumerator import EnumerationError, FlagEnumerator
from packages.sync.expiry_filter import PartitionResult, partition_flags
from packages.sync.processor import (
    CalculationError,
    FlagProcessingError,
    FlagProcessor,
    calculate_expiry_from_creation,
)

__all__ = [
    "CalculationError",
    "EnumerationError",
    "FlagEnumerator",
    "FlagProcessingError",
    "FlagProcessor",
    "PartitionResult",
    "calculate_expiry_from_creation",
    "partition_flags",
]
