"""Common utilities for the flag expiry setter.

This package provides reusable utilities like logging, config, tracing,
date handling, and retrying request execution.

Note: Factory functions are available via direct import to avoid circular dependencies:
    from packages.common.factories import make_set_flag_expiry_use_case
"""

from packages.common.config import ConfigurationError, FlagExpiryConfig, get_config

__all__ = [
    "ConfigurationError",
    "FlagExpiryConfig",
    "get_config",
]
