"""Shared pytest fixtures for the flag expiry test suite.

Provides environment isolation, test configurations, and flag factories
used across all test modules.
"""

import os
from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest

from packages.common.config import FlagExpiryConfig, RunSettings, get_config
from tests.utils.mocks import FakeFlagStore, make_flag

# ========== Test Environment Setup ==========


@pytest.fixture(scope="session", autouse=True)
def setup_test_env() -> Iterator[None]:
    """Set up test environment variables before any tests run.

    Ensures get_config() loads without a real .env and that nothing under test
    can reach the LaunchDarkly API with a real key.
    """
    os.environ["LAUNCHDARKLY_API_KEY"] = "api-test-key"
    os.environ["PROJECT_KEY"] = "default"
    os.environ.setdefault("LOG_FORMAT", "text")
    get_config.cache_clear()

    yield

    get_config.cache_clear()


@pytest.fixture(autouse=True)
def no_github_output(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests from appending to a real GitHub Actions output file."""
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)


# ========== Configuration Fixtures ==========


@pytest.fixture
def test_config() -> FlagExpiryConfig:
    """Provide a configuration with no pacing delays.

    Returns:
        FlagExpiryConfig: Configuration instance for testing.
    """
    return FlagExpiryConfig(
        launchdarkly_api_key="api-test-key",
        launchdarkly_api_url="https://ld.test/api/v2",
        project_key="default",
        retry_base_delay=0.0,
        rate_limit_delay=0.0,
        batch_delay=0.0,
    )


@pytest.fixture
def run_settings() -> RunSettings:
    return RunSettings(api_key="api-test-key", project_key="default")


@pytest.fixture
def mock_sleep() -> AsyncMock:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""
    return AsyncMock(return_value=None)


# ========== Flag Fixtures ==========


@pytest.fixture
def sample_flags():
    """Three flags: one new, one with an expiry already, one without a creation date."""
    return [
        make_flag("new-checkout"),
        make_flag("old-banner", expiry="01/01/2025"),
        make_flag("broken-flag", creation_date=None),
    ]


@pytest.fixture
def fake_store(sample_flags) -> FakeFlagStore:
    return FakeFlagStore(sample_flags)
