"""LaunchDarkly REST API client for flag listing and custom-property patches.

Implements FlagStorePort over httpx. Every call goes through
RetryingRequestExecutor, so rate limiting and transient failures are handled
in one place.

API Reference:
    https://apidocs.launchdarkly.com/tag/Feature-flags
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx

from packages.common.config import DEFAULT_API_URL, ThrottleConfig
from packages.common.resilience import RequestError, RetryingRequestExecutor, SleepFunc
from packages.schemas.launchdarkly import FlagRecord

logger = logging.getLogger(__name__)


@dataclass
class FlagListPage:
    """One page of the flag listing."""

    items: list[FlagRecord] = field(default_factory=list)
    total_count: int | None = None


def build_custom_property_patch(
    property_name: str, property_value: str, has_existing_property: bool = False
) -> dict[str, Any]:
    """Build the JSON-Patch body that sets a single-valued custom property.

    Uses "replace" when the property already has a value and "add" otherwise,
    since the API applies strict JSON-Patch semantics.

    Example:
        >>> build_custom_property_patch("flag.expiry.date", "08/17/2025")["patch"][0]["op"]
        'add'
    """
    operation = "replace" if has_existing_property else "add"
    return {
        "patch": [
            {
                "op": operation,
                "path": f"/customProperties/{property_name}",
                "value": {"name": property_name, "value": [property_value]},
            }
        ]
    }


class LaunchDarklyClient:
    """Async LaunchDarkly API client.

    Example:
        >>> async with LaunchDarklyClient(api_key="api-...") as client:
        ...     page = await client.list_flags("default", limit=50, offset=0)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_URL,
        throttle: ThrottleConfig | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: LaunchDarkly API access token (sent verbatim in Authorization).
            base_url: API root, e.g. https://app.launchdarkly.com/api/v2.
            throttle: Retry configuration for the request executor.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests use httpx.MockTransport).
            sleep: Optional sleep override for the request executor.

        Raises:
            ValueError: If api_key is empty.
        """
        if not api_key:
            raise ValueError("api_key cannot be empty")

        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": api_key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        self.executor = RetryingRequestExecutor(
            self._client, throttle, sleep=sleep or asyncio.sleep
        )

        logger.info(f"Initialized LaunchDarklyClient (base_url={self.base_url})")

    async def __aenter__(self) -> LaunchDarklyClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _flag_path(project_key: str, flag_key: str | None = None) -> str:
        path = f"/flags/{quote(project_key, safe='')}"
        if flag_key is not None:
            path += f"/{quote(flag_key, safe='')}"
        return path

    async def list_flags(self, project_key: str, limit: int, offset: int) -> FlagListPage:
        """Fetch one page of flags from the project.

        Args:
            project_key: LaunchDarkly project key.
            limit: Page size.
            offset: Index of the first flag in the page.

        Returns:
            FlagListPage: Parsed flags plus totalCount when present.

        Raises:
            RequestError: If the request fails after retries.
        """
        logger.debug(f"Fetching flags: offset={offset}, limit={limit}")
        request = self._client.build_request(
            "GET",
            self._flag_path(project_key),
            params={"limit": limit, "offset": offset},
        )
        response = await self.executor.execute_with_retry(request)
        data: dict[str, Any] = response.json()

        items_raw = data.get("items") or []
        if not isinstance(items_raw, list):
            raise RequestError(f"Expected 'items' to be a list, got {type(items_raw).__name__}")

        total_count = data.get("totalCount")
        return FlagListPage(
            items=[FlagRecord.model_validate(item) for item in items_raw],
            total_count=total_count if isinstance(total_count, int) else None,
        )

    async def get_flag(self, project_key: str, flag_key: str) -> FlagRecord | None:
        """Fetch a single flag.

        Returns:
            FlagRecord | None: The flag, or None if the API answers 404.

        Raises:
            RequestError: For any failure other than 404.
        """
        logger.debug(f"Fetching flag: {flag_key}")
        request = self._client.build_request("GET", self._flag_path(project_key, flag_key))
        try:
            response = await self.executor.execute_with_retry(request)
        except RequestError as e:
            if e.is_not_found:
                return None
            raise

        return FlagRecord.model_validate(response.json())

    async def set_custom_property(
        self,
        project_key: str,
        flag_key: str,
        property_name: str,
        property_value: str,
        has_existing_property: bool = False,
    ) -> dict[str, Any]:
        """Set a custom property on a flag via JSON-Patch.

        Returns:
            dict[str, Any]: The updated flag JSON.

        Raises:
            RequestError: If the patch fails; 401 and 404 messages carry extra
                guidance about write permissions and the flag's existence.
        """
        body = build_custom_property_patch(property_name, property_value, has_existing_property)
        operation = body["patch"][0]["op"]
        logger.info(
            f"Setting custom property {property_name} = {property_value} on flag: {flag_key} "
            f"(operation: {operation})"
        )

        request = self._client.build_request(
            "PATCH", self._flag_path(project_key, flag_key), json=body
        )
        try:
            response = await self.executor.execute_with_retry(request)
        except RequestError as e:
            if e.is_unauthorized:
                raise RequestError(
                    f"{e} Please check your API key has WRITE permissions.",
                    status_code=e.status_code,
                    status_text=e.status_text,
                ) from e
            if e.is_not_found:
                raise RequestError(
                    f"{e} Flag '{flag_key}' may not exist in project '{project_key}'.",
                    status_code=e.status_code,
                    status_text=e.status_text,
                ) from e
            raise

        if not response.content:
            return {}
        result: dict[str, Any] = response.json()
        return result


__all__ = ["FlagListPage", "LaunchDarklyClient", "build_custom_property_patch"]
