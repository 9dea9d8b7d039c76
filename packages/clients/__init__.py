"""Client adapters for external systems.

Heavy dependencies (httpx, tenacity) belong here and in packages/common/resilience.py,
not in packages/core.
"""

from packages.clients.launchdarkly import FlagListPage, LaunchDarklyClient

__all__ = ["FlagListPage", "LaunchDarklyClient"]
