"""Paginated enumeration of every flag in a project."""

import asyncio
import logging

from packages.common.resilience import SleepFunc
from packages.core.ports.flag_store import FlagStorePort
from packages.schemas.launchdarkly import FlagRecord

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


class EnumerationError(Exception):
    """Raised when any page of the flag listing cannot be fetched.

    Attributes:
        offset: Offset of the page that failed.
    """

    def __init__(self, offset: int, cause: BaseException) -> None:
        super().__init__(f"Failed to fetch flags at offset {offset}: {cause}")
        self.offset = offset
        self.cause = cause


class FlagEnumerator:
    """Walk the flag listing page by page and collect every flag.

    Pagination stops on an empty page or a page shorter than page_size. There is
    no per-page failure isolation: one page failing after retries aborts the walk.
    """

    def __init__(
        self,
        store: FlagStorePort,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_delay: float = 0.0,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize the enumerator.

        Args:
            store: Flag service adapter.
            page_size: Flags requested per page (default: 50).
            page_delay: Seconds to wait between pages (default: 0, no delay).
            sleep: Awaitable sleep; injectable for tests.

        Raises:
            ValueError: If page_size is not positive.
        """
        if page_size < 1:
            raise ValueError("page_size must be positive")

        self.store = store
        self.page_size = page_size
        self.page_delay = page_delay
        self._sleep = sleep

    async def fetch_all(self, project_key: str) -> list[FlagRecord]:
        """Fetch all flags in the project.

        Args:
            project_key: LaunchDarkly project key.

        Returns:
            list[FlagRecord]: Every flag, in the order pages arrived.

        Raises:
            EnumerationError: If a page cannot be fetched.
        """
        flags: list[FlagRecord] = []
        offset = 0
        total_count: int | None = None

        logger.info(f"Fetching all feature flags for project {project_key}")

        while True:
            try:
                page = await self.store.list_flags(project_key, limit=self.page_size, offset=offset)
            except Exception as e:
                logger.error(f"Flag enumeration failed at offset {offset}: {e}")
                raise EnumerationError(offset, e) from e

            if total_count is None and page.total_count:
                total_count = page.total_count
                logger.info(f"Found {total_count} total flags to process")

            if not page.items:
                logger.debug("No items returned, ending pagination")
                break

            flags.extend(page.items)
            offset += self.page_size

            progress = f"{len(flags)}/{total_count}" if total_count else str(len(flags))
            logger.info(f"Retrieved {progress} flags")

            if len(page.items) < self.page_size:
                logger.debug(f"Reached end of results (got {len(page.items)} < {self.page_size})")
                break

            if self.page_delay > 0:
                await self._sleep(self.page_delay)

        logger.info(f"Successfully retrieved {len(flags)} total flags")
        return flags


__all__ = ["DEFAULT_PAGE_SIZE", "EnumerationError", "FlagEnumerator"]
