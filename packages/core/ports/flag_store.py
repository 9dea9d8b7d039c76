"""FlagStorePort - Port interface for the remote flag service.

Defines the three operations the expiry pipeline needs from the flag service.
Core and sync layers depend on this interface; packages/clients implements it
against the LaunchDarkly REST API.
"""

from __future__ import annotations

from typing import Any, Protocol

from packages.schemas.launchdarkly import FlagRecord


class FlagPage(Protocol):
    """One page of the flag listing."""

    items: list[FlagRecord]
    total_count: int | None


class FlagStorePort(Protocol):
    """Port interface for reading flags and patching their custom properties."""

    async def list_flags(self, project_key: str, limit: int, offset: int) -> FlagPage:
        """Fetch one page of flags.

        Args:
            project_key: Project whose flags are listed.
            limit: Page size.
            offset: Index of the first flag in the page.

        Returns:
            FlagPage: Flags in the page plus the total count when reported.

        Raises:
            RequestError: If the request fails after retries.
        """
        ...

    async def get_flag(self, project_key: str, flag_key: str) -> FlagRecord | None:
        """Fetch a single flag, or None if it does not exist."""
        ...

    async def set_custom_property(
        self,
        project_key: str,
        flag_key: str,
        property_name: str,
        property_value: str,
        has_existing_property: bool = False,
    ) -> dict[str, Any]:
        """Write a single-valued custom property onto a flag.

        Returns:
            dict[str, Any]: The updated flag JSON returned by the service.

        Raises:
            RequestError: If the patch fails after retries.
        """
        ...


__all__ = ["FlagPage", "FlagStorePort"]
