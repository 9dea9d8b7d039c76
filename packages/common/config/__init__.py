"""Configuration management for the flag expiry setter.

Loads environment variables using pydantic-settings for type-safe configuration.
The LaunchDarkly credentials, run inputs, and throttling knobs are defined here.
"""

import os
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_LOADED = False
_ENV_LOCK = Lock()

DEFAULT_API_URL = "https://app.launchdarkly.com/api/v2"
DEFAULT_PROPERTY_NAME = "flag.expiry.date"
DEFAULT_DATE_FORMAT = "MM/DD/YYYY"


class ConfigurationError(ValueError):
    """Raised when run inputs are invalid. Always raised before any network call."""

    pass


def _resolve_env_file() -> str | None:
    """Locate the .env file regardless of the current working directory.

    Preference order:
        1. FLAG_EXPIRY_ENV_FILE environment variable (explicit override)
        2. Current working directory (common for local runs)
        3. Ancestors of this file (covers package execution from a checkout)
    """
    override = os.getenv("FLAG_EXPIRY_ENV_FILE")
    if override:
        override_path = Path(override).expanduser()
        if override_path.is_file():
            return str(override_path)

    cwd_candidate = Path.cwd() / ".env"
    if cwd_candidate.is_file():
        return str(cwd_candidate)

    for parent in Path(__file__).resolve().parents:
        candidate = parent / ".env"
        if candidate.is_file():
            return str(candidate)

    return None


_DEFAULT_ENV_FILE = _resolve_env_file()


def ensure_env_loaded() -> None:
    """Load environment variables from disk exactly once."""
    global _ENV_LOADED

    with _ENV_LOCK:
        if _ENV_LOADED:
            return

        env_path = _DEFAULT_ENV_FILE or _resolve_env_file()
        if env_path:
            load_dotenv(env_path, override=False)

        _ENV_LOADED = True


ensure_env_loaded()


class ThrottleConfig(BaseModel):
    """Retry and pacing knobs shared by the request executor and the processor.

    Delays are in seconds.
    """

    max_retries: int = Field(default=3, ge=1, le=10)
    retry_base_delay: float = Field(default=5.0, ge=0.0)
    rate_limit_delay: float = Field(default=3.0, ge=0.0)
    page_size: int = Field(default=50, ge=1, le=100)
    page_delay: float = Field(default=0.0, ge=0.0)
    batch_size: int = Field(default=5, ge=1, le=50)
    batch_delay: float = Field(default=1.0, ge=0.0)
    processing_mode: Literal["sequential", "batched"] = "sequential"


class RunSettings(BaseModel):
    """Inputs for a single expiry run."""

    api_key: str = ""
    project_key: str = ""
    custom_property_name: str = DEFAULT_PROPERTY_NAME
    days_from_creation: int = 30
    date_format: str = DEFAULT_DATE_FORMAT
    skip_existing: bool = True

    def validate_for_run(self) -> None:
        """Fail fast on inputs that would make the run meaningless.

        Raises:
            ConfigurationError: If a required input is empty or the day offset
                is outside 1-365.
        """
        if not self.api_key.strip():
            raise ConfigurationError("LaunchDarkly API key cannot be empty")
        if not self.project_key.strip():
            raise ConfigurationError("Project key cannot be empty")
        if not self.custom_property_name.strip():
            raise ConfigurationError("Custom property name cannot be empty")
        if not 1 <= self.days_from_creation <= 365:
            raise ConfigurationError(
                f"Invalid days_from_creation value: {self.days_from_creation}. "
                "Must be a number between 1 and 365"
            )


class FlagExpiryConfig(BaseSettings):
    """Main configuration class for the flag expiry setter.

    Loads credentials, run inputs, and tuning parameters from environment variables.
    Uses pydantic-settings for validation and type safety.
    """

    model_config = SettingsConfigDict(
        env_file=_DEFAULT_ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========== LaunchDarkly ==========
    launchdarkly_api_key: SecretStr | None = None
    launchdarkly_api_url: str = DEFAULT_API_URL
    project_key: str = ""
    request_timeout: float = Field(default=30.0, gt=0.0, le=300.0)

    # ========== Run Inputs ==========
    custom_property_name: str = DEFAULT_PROPERTY_NAME
    days_from_creation: int = 30  # range checked by RunSettings.validate_for_run
    date_format: str = DEFAULT_DATE_FORMAT
    skip_existing: bool = True

    # ========== Throttling ==========
    max_retries: int = Field(default=3, ge=1, le=10)
    retry_base_delay: float = Field(default=5.0, ge=0.0)
    rate_limit_delay: float = Field(default=3.0, ge=0.0)  # between sequential writes
    page_size: int = Field(default=50, ge=1, le=100)
    page_delay: float = Field(default=0.0, ge=0.0)
    batch_size: int = Field(default=5, ge=1, le=50)
    batch_delay: float = Field(default=1.0, ge=0.0)
    processing_mode: Literal["sequential", "batched"] = "sequential"

    # ========== Observability ==========
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("launchdarkly_api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def throttle_config(self) -> ThrottleConfig:
        """Return validated throttling block."""

        return ThrottleConfig(
            max_retries=self.max_retries,
            retry_base_delay=self.retry_base_delay,
            rate_limit_delay=self.rate_limit_delay,
            page_size=self.page_size,
            page_delay=self.page_delay,
            batch_size=self.batch_size,
            batch_delay=self.batch_delay,
            processing_mode=self.processing_mode,
        )

    @property
    def run_settings(self) -> RunSettings:
        """Return the run inputs with the API key unwrapped."""
        api_key = (
            self.launchdarkly_api_key.get_secret_value() if self.launchdarkly_api_key else ""
        )
        return RunSettings(
            api_key=api_key,
            project_key=self.project_key,
            custom_property_name=self.custom_property_name,
            days_from_creation=self.days_from_creation,
            date_format=self.date_format,
            skip_existing=self.skip_existing,
        )


@lru_cache(maxsize=1)
def get_config() -> FlagExpiryConfig:
    """Return cached Settings instance (process-local).

    Returns:
        FlagExpiryConfig: The configuration instance loaded from environment variables.
    """
    return FlagExpiryConfig()


# Export convenience accessors
__all__ = [
    "ConfigurationError",
    "FlagExpiryConfig",
    "RunSettings",
    "ThrottleConfig",
    "ensure_env_loaded",
    "get_config",
]
