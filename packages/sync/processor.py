"""Write expiry dates back to flags, one isolated outcome per flag.

Two pacing modes share the same per-flag logic:
- sequential: one flag at a time, rate_limit_delay between flags
- batched: batch_size flags in flight at once, batch_delay between batches

A failing flag is recorded in failed_flags and never stops its siblings.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime
from functools import partial

from packages.common.config import ThrottleConfig
from packages.common.dates import add_days, format_date, parse_creation_date
from packages.common.resilience import SleepFunc
from packages.core.ports.flag_store import FlagStorePort
from packages.schemas.launchdarkly import FailedFlag, FlagRecord, ProcessResult, UpdatedFlag

logger = logging.getLogger(__name__)

FlagOutcome = UpdatedFlag | FailedFlag
FlagHandler = Callable[[FlagRecord], Awaitable[FlagOutcome]]


class CalculationError(ValueError):
    """Raised when a flag's creation date cannot be turned into an expiry date."""

    pass


class FlagProcessingError(Exception):
    """Raised when a single flag cannot be updated.

    Attributes:
        flag_key: Key of the flag that failed.
    """

    def __init__(self, flag_key: str, cause: BaseException) -> None:
        super().__init__(f"Failed to process flag {flag_key}: {cause}")
        self.flag_key = flag_key
        self.cause = cause


def _creation_moment(flag: FlagRecord) -> datetime:
    created = parse_creation_date(flag.creation_date)
    if created is None:
        raise CalculationError(f"Invalid creation date for flag {flag.key}: {flag.creation_date}")
    return created


def calculate_expiry_from_creation(
    flag: FlagRecord, days_from_creation: int, date_format: str
) -> str:
    """Return the flag's creation date plus days_from_creation, formatted.

    The offset is applied in local calendar days.

    Raises:
        CalculationError: If the creation date is missing or unparseable.
    """
    created = _creation_moment(flag)
    return format_date(add_days(created, days_from_creation), date_format)


class FlagProcessor:
    """Drive per-flag expiry updates through the flag store."""

    def __init__(
        self,
        store: FlagStorePort,
        throttle: ThrottleConfig | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize the processor.

        Args:
            store: Flag service adapter used for the writes.
            throttle: Pacing configuration (default: ThrottleConfig()).
            sleep: Awaitable sleep; injectable for tests.
        """
        self.store = store
        self.throttle = throttle or ThrottleConfig()
        self._sleep = sleep

    async def process_single_flag(
        self,
        flag: FlagRecord,
        project_key: str,
        custom_property_name: str,
        days_from_creation: int,
        date_format: str,
    ) -> UpdatedFlag:
        """Calculate and write one flag's expiry date.

        Raises:
            FlagProcessingError: If calculation or the write fails.
        """
        try:
            created = _creation_moment(flag)
            expiry_date = calculate_expiry_from_creation(flag, days_from_creation, date_format)

            await self.store.set_custom_property(
                project_key,
                flag.key,
                custom_property_name,
                expiry_date,
                has_existing_property=flag.has_property_value(custom_property_name),
            )
        except Exception as e:
            raise FlagProcessingError(flag.key, e) from e

        return UpdatedFlag(
            key=flag.key,
            name=flag.name,
            creation_date=created.astimezone(UTC).date().isoformat(),
            calculated_expiry_date=expiry_date,
            days_from_creation=days_from_creation,
            custom_property_name=custom_property_name,
        )

    async def _process_isolated(
        self,
        flag: FlagRecord,
        *,
        project_key: str,
        custom_property_name: str,
        days_from_creation: int,
        date_format: str,
    ) -> FlagOutcome:
        try:
            updated = await self.process_single_flag(
                flag, project_key, custom_property_name, days_from_creation, date_format
            )
        except FlagProcessingError as e:
            logger.error(f"  ✗ {flag.key}: {e}")
            return FailedFlag(key=flag.key, name=flag.name, error=str(e))

        logger.info(f"  ✓ {flag.key}: {updated.calculated_expiry_date}")
        return updated

    async def process(
        self,
        flags: Sequence[FlagRecord],
        project_key: str,
        custom_property_name: str,
        days_from_creation: int,
        date_format: str,
    ) -> ProcessResult:
        """Update every flag, pacing writes per the throttle configuration.

        Args:
            flags: Flags that passed the expiry filter.
            project_key: LaunchDarkly project key.
            custom_property_name: Property that receives the expiry date.
            days_from_creation: Offset in days from each flag's creation date.
            date_format: Layout of the written date.

        Returns:
            ProcessResult: Updated and failed flags in input order.
        """
        if not flags:
            logger.info("No flags to process")
            return ProcessResult()

        handle: FlagHandler = partial(
            self._process_isolated,
            project_key=project_key,
            custom_property_name=custom_property_name,
            days_from_creation=days_from_creation,
            date_format=date_format,
        )
        if self.throttle.processing_mode == "batched":
            outcomes = await self._process_batched(flags, handle)
        else:
            outcomes = await self._process_sequential(flags, handle)

        result = ProcessResult(total_processed=len(outcomes))
        for outcome in outcomes:
            if isinstance(outcome, UpdatedFlag):
                result.updated_flags.append(outcome)
            else:
                result.failed_flags.append(outcome)
        return result

    async def _process_sequential(
        self, flags: Sequence[FlagRecord], handle: FlagHandler
    ) -> list[FlagOutcome]:
        logger.info(f"Processing {len(flags)} flags sequentially")
        outcomes: list[FlagOutcome] = []

        for index, flag in enumerate(flags):
            logger.info(f"Processing flag {index + 1}/{len(flags)}: {flag.key}")
            outcomes.append(await handle(flag))

            if index < len(flags) - 1 and self.throttle.rate_limit_delay > 0:
                await self._sleep(self.throttle.rate_limit_delay)

        return outcomes

    async def _process_batched(
        self, flags: Sequence[FlagRecord], handle: FlagHandler
    ) -> list[FlagOutcome]:
        batch_size = self.throttle.batch_size
        total_batches = (len(flags) + batch_size - 1) // batch_size
        logger.info(f"Processing {len(flags)} flags in {total_batches} batches of {batch_size}")
        outcomes: list[FlagOutcome] = []

        for batch_number, start in enumerate(range(0, len(flags), batch_size), start=1):
            batch = flags[start : start + batch_size]
            logger.info(f"Processing batch {batch_number}/{total_batches} ({len(batch)} flags)")

            # gather returns results in submission order, not completion order
            outcomes.extend(await asyncio.gather(*(handle(flag) for flag in batch)))

            if batch_number < total_batches and self.throttle.batch_delay > 0:
                await self._sleep(self.throttle.batch_delay)

        return outcomes


__all__ = [
    "CalculationError",
    "FlagProcessingError",
    "FlagProcessor",
    "calculate_expiry_from_creation",
]
