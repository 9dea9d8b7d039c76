"""Factory functions for creating fully-wired use cases and dependencies.

Centralizes dependency injection to keep CLI commands thin.
"""

from collections.abc import Awaitable, Callable

from packages.clients.launchdarkly import LaunchDarklyClient
from packages.common.config import FlagExpiryConfig, RunSettings, get_config
from packages.core.use_cases.set_flag_expiry import SetFlagExpiryUseCase
from packages.sync.enumerator import FlagEnumerator
from packages.sync.processor import FlagProcessor


def make_set_flag_expiry_use_case(
    settings: RunSettings | None = None,
    config: FlagExpiryConfig | None = None,
) -> tuple[SetFlagExpiryUseCase, Callable[[], Awaitable[None]]]:
    """Create a fully-wired SetFlagExpiryUseCase with its dependencies.

    Settings are validated before the HTTP client is created, so invalid
    inputs never open a connection.

    Args:
        settings: Run inputs; defaults to config.run_settings.
        config: Configuration; defaults to get_config().

    Returns:
        Tuple of (use_case, cleanup_fn) where cleanup_fn must be awaited
        after use to close the HTTP client.

    Raises:
        ConfigurationError: If the run settings are invalid.

    Example:
        use_case, cleanup = make_set_flag_expiry_use_case()
        try:
            result = await use_case.execute()
        finally:
            await cleanup()
    """
    config = config or get_config()
    settings = settings or config.run_settings
    settings.validate_for_run()

    throttle = config.throttle_config
    client = LaunchDarklyClient(
        api_key=settings.api_key,
        base_url=config.launchdarkly_api_url,
        throttle=throttle,
        timeout=config.request_timeout,
    )
    enumerator = FlagEnumerator(
        client,
        page_size=throttle.page_size,
        page_delay=throttle.page_delay,
    )
    processor = FlagProcessor(client, throttle)
    use_case = SetFlagExpiryUseCase(enumerator=enumerator, processor=processor, settings=settings)

    async def cleanup() -> None:
        """Close the HTTP client."""
        await client.close()

    return use_case, cleanup


__all__ = ["make_set_flag_expiry_use_case"]
