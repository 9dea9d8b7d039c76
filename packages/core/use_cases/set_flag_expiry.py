"""SetFlagExpiryUseCase - Core orchestration for an expiry run.

Orchestrates the expiry pipeline:
validate settings → FlagEnumerator → partition_flags → FlagProcessor → RunResult

Enumeration failures abort the run; write failures are recorded per flag.
"""

from __future__ import annotations

import logging

from packages.common.config import RunSettings
from packages.common.tracing import RunContext
from packages.schemas.launchdarkly import ProcessResult, RunResult
from packages.sync.enumerator import EnumerationError, FlagEnumerator
from packages.sync.expiry_filter import partition_flags
from packages.sync.processor import FlagProcessor

logger = logging.getLogger(__name__)


class SetFlagExpiryError(Exception):
    """Exception raised when an expiry run fails unexpectedly."""

    pass


class SetFlagExpiryUseCase:
    """Use case for setting expiry properties on every flag in a project.

    Attributes:
        enumerator: Walks the flag listing.
        processor: Writes expiry dates back.
        settings: Run inputs (project, property, offset, format, skip policy).
    """

    def __init__(
        self,
        enumerator: FlagEnumerator,
        processor: FlagProcessor,
        settings: RunSettings,
    ) -> None:
        self.enumerator = enumerator
        self.processor = processor
        self.settings = settings

        logger.info("Initialized SetFlagExpiryUseCase")

    async def execute(self, run_id: str | None = None) -> RunResult:
        """Execute the full expiry run.

        Pipeline flow:
        1. Validate settings (no network call on failure)
        2. Fetch every flag in the project
        3. Partition into to-process and skipped
        4. Process the to-process flags (only when there are any)
        5. Aggregate into a RunResult

        Args:
            run_id: Optional run ID for log correlation; generated when omitted.

        Returns:
            RunResult: Updated, failed and skipped flags with totals.

        Raises:
            ConfigurationError: If settings are invalid.
            EnumerationError: If any page of the flag listing cannot be fetched.
            SetFlagExpiryError: On unexpected failures.
        """
        settings = self.settings
        settings.validate_for_run()

        with RunContext(run_id):
            try:
                logger.info("Starting LaunchDarkly Flag Expiry Setter")
                logger.info(f"Project: {settings.project_key}")
                logger.info(f"Days from creation: {settings.days_from_creation}")
                logger.info(f"Custom property: {settings.custom_property_name}")
                logger.info(f"Date format: {settings.date_format}")
                logger.info(f"Skip existing: {settings.skip_existing}")

                all_flags = await self.enumerator.fetch_all(settings.project_key)

                partition = partition_flags(
                    all_flags, settings.custom_property_name, settings.skip_existing
                )

                processed = ProcessResult()
                if partition.to_process:
                    processed = await self.processor.process(
                        partition.to_process,
                        settings.project_key,
                        settings.custom_property_name,
                        settings.days_from_creation,
                        settings.date_format,
                    )

                result = RunResult(
                    updated_flags=processed.updated_flags,
                    failed_flags=processed.failed_flags,
                    skipped_flags=partition.skipped,
                    total_found=len(all_flags),
                    total_processed=processed.total_processed,
                )
                self._log_summary(result)
                return result

            except EnumerationError:
                raise
            except Exception as e:
                logger.exception(f"Unexpected error during expiry run: {e}")
                raise SetFlagExpiryError(f"Expiry run failed: {e}") from e

    @staticmethod
    def _log_summary(result: RunResult) -> None:
        logger.info("Final Summary:")
        logger.info(f"Total flags found: {result.total_found}")
        logger.info(f"Flags skipped: {len(result.skipped_flags)}")
        logger.info(f"Successfully updated: {len(result.updated_flags)}")
        logger.info(f"Failed to update: {len(result.failed_flags)}")
        logger.info(f"Total processed: {result.total_processed}")

        breakdown = result.skip_reason_breakdown()
        if breakdown:
            logger.info("Skipped flags breakdown:")
            for reason, count in breakdown.items():
                logger.info(f"  - {reason}: {count} flags")


__all__ = ["SetFlagExpiryError", "SetFlagExpiryUseCase"]
