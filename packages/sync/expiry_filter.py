"""Decide which flags need an expiry property.

Pure partitioning, no I/O. Checks run in a fixed order per flag:
1. skip_existing and the property already has a value -> skipped ("Already has ...")
2. creation date missing or unparseable -> skipped ("Invalid or missing creation date")
3. otherwise -> to_process
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from packages.common.dates import parse_creation_date
from packages.schemas.launchdarkly import FlagRecord, SkippedFlag
from packages.schemas.launchdarkly.outcomes import ALREADY_HAS_PREFIX, INVALID_CREATION_DATE

logger = logging.getLogger(__name__)


@dataclass
class PartitionResult:
    """Flags split into those to write and those to leave alone."""

    to_process: list[FlagRecord] = field(default_factory=list)
    skipped: list[SkippedFlag] = field(default_factory=list)


def partition_flags(
    flags: Iterable[FlagRecord],
    custom_property_name: str,
    skip_existing: bool,
) -> PartitionResult:
    """Split flags into to_process and skipped, preserving input order.

    Args:
        flags: Flags fetched from the project.
        custom_property_name: Property that holds the expiry date.
        skip_existing: Leave flags that already have a value untouched.

    Returns:
        PartitionResult: to_process flags and SkippedFlag entries with reasons.
    """
    result = PartitionResult()

    logger.info("Filtering flags that need expiry dates...")

    for flag in flags:
        existing_value = flag.existing_value(custom_property_name)

        if skip_existing and existing_value is not None:
            result.skipped.append(
                SkippedFlag(
                    key=flag.key,
                    name=flag.name,
                    reason=f"{ALREADY_HAS_PREFIX} {custom_property_name}",
                    existing_value=existing_value,
                )
            )
            continue

        if parse_creation_date(flag.creation_date) is None:
            result.skipped.append(
                SkippedFlag(
                    key=flag.key,
                    name=flag.name,
                    reason=INVALID_CREATION_DATE,
                    creation_date=flag.creation_date,
                )
            )
            continue

        result.to_process.append(flag)

    logger.info(
        f"Filtering complete: {len(result.to_process)} to process, "
        f"{len(result.skipped)} skipped"
    )
    return result


__all__ = ["PartitionResult", "partition_flags"]
