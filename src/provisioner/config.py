"""Configuration management with validation.

Configuration is explicit: a Config value is built once and handed to the
client, poller and logging setup. Nothing reads ambient provider state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


# Configuration constants with documented bounds
DEFAULT_POLL_INTERVAL_SECONDS = 30
MIN_POLL_INTERVAL_SECONDS = 1
MAX_POLL_INTERVAL_SECONDS = 600

DEFAULT_POLL_TIMEOUT_SECONDS = 1800  # 30 minutes
MAX_POLL_TIMEOUT_SECONDS = 86400

DEFAULT_REQUEST_TIMEOUT_SECONDS = 60
MIN_REQUEST_TIMEOUT_SECONDS = 1
MAX_REQUEST_TIMEOUT_SECONDS = 600

MAX_SPEC_FILE_SIZE_BYTES = 1024 * 1024  # 1MB max declaration file

DEFAULT_ENDPOINT = "ovh-eu"

# Known control-plane API roots by endpoint alias
ENDPOINT_ALIASES: dict[str, str] = {
    "ovh-eu": "https://eu.api.ovh.com/1.0",
    "ovh-us": "https://api.us.ovhcloud.com/1.0",
    "ovh-ca": "https://ca.api.ovh.com/1.0",
    "kimsufi-eu": "https://eu.api.kimsufi.com/1.0",
    "kimsufi-ca": "https://ca.api.kimsufi.com/1.0",
    "soyoustart-eu": "https://eu.api.soyoustart.com/1.0",
    "soyoustart-ca": "https://ca.api.soyoustart.com/1.0",
}

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_FORMATS = ("json", "text")


def resolve_endpoint(endpoint: str) -> str:
    """Resolve an endpoint alias or URL to an API root URL.

    Args:
        endpoint: Alias (e.g., "ovh-eu") or absolute https URL.

    Returns:
        API root URL without trailing slash.

    Raises:
        ConfigurationError: If the value is neither a known alias nor an https URL.
    """
    if endpoint in ENDPOINT_ALIASES:
        return ENDPOINT_ALIASES[endpoint]
    if endpoint.startswith("https://") and len(endpoint) > len("https://"):
        return endpoint.rstrip("/")
    raise ConfigurationError(
        f"CONTROL_PLANE_ENDPOINT must be one of {sorted(ENDPOINT_ALIASES)} "
        f"or an https:// URL: {endpoint}"
    )


@dataclass(frozen=True)
class Config:
    """Engine configuration loaded from environment variables.

    All fields are validated at construction time. Invalid configurations
    raise ConfigurationError immediately rather than failing at runtime.
    """

    endpoint: str = DEFAULT_ENDPOINT

    # Readiness polling
    poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS
    poll_timeout_seconds: int = DEFAULT_POLL_TIMEOUT_SECONDS

    # Transport
    request_timeout_seconds: int = DEFAULT_REQUEST_TIMEOUT_SECONDS

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        errors: list[str] = []

        try:
            resolve_endpoint(self.endpoint)
        except ConfigurationError as e:
            errors.append(str(e))

        if not (
            MIN_POLL_INTERVAL_SECONDS <= self.poll_interval_seconds <= MAX_POLL_INTERVAL_SECONDS
        ):
            errors.append(
                f"POLL_INTERVAL must be between {MIN_POLL_INTERVAL_SECONDS} "
                f"and {MAX_POLL_INTERVAL_SECONDS} seconds"
            )

        if self.poll_timeout_seconds < self.poll_interval_seconds:
            errors.append("POLL_TIMEOUT must be at least POLL_INTERVAL")
        elif self.poll_timeout_seconds > MAX_POLL_TIMEOUT_SECONDS:
            errors.append(f"POLL_TIMEOUT cannot exceed {MAX_POLL_TIMEOUT_SECONDS} seconds")

        if not (
            MIN_REQUEST_TIMEOUT_SECONDS
            <= self.request_timeout_seconds
            <= MAX_REQUEST_TIMEOUT_SECONDS
        ):
            errors.append(
                f"REQUEST_TIMEOUT must be between {MIN_REQUEST_TIMEOUT_SECONDS} "
                f"and {MAX_REQUEST_TIMEOUT_SECONDS} seconds"
            )

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {list(VALID_LOG_LEVELS)}: {self.log_level}")

        if self.log_format not in VALID_LOG_FORMATS:
            errors.append(
                f"LOG_FORMAT must be one of {list(VALID_LOG_FORMATS)}: {self.log_format}"
            )

        if errors:
            error_msg = "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            raise ConfigurationError(error_msg)

    @property
    def base_url(self) -> str:
        """Resolved API root URL."""
        return resolve_endpoint(self.endpoint)

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables.

        Environment Variables:
            CONTROL_PLANE_ENDPOINT: Endpoint alias or https URL (default: ovh-eu)
            POLL_INTERVAL: Seconds between readiness reads (default: 30)
            POLL_TIMEOUT: Overall readiness bound in seconds (default: 1800)
            REQUEST_TIMEOUT: HTTP socket timeout in seconds (default: 60)
            LOG_LEVEL: Logging level (default: INFO)
            LOG_FORMAT: "json" or "text" (default: json)
        """

        def get_int(key: str, default: int) -> int:
            value = os.environ.get(key)
            if value is None:
                return default
            try:
                return int(value)
            except ValueError as e:
                raise ConfigurationError(f"{key} must be an integer: {value}") from e

        return cls(
            endpoint=os.environ.get("CONTROL_PLANE_ENDPOINT", DEFAULT_ENDPOINT),
            poll_interval_seconds=get_int("POLL_INTERVAL", DEFAULT_POLL_INTERVAL_SECONDS),
            poll_timeout_seconds=get_int("POLL_TIMEOUT", DEFAULT_POLL_TIMEOUT_SECONDS),
            request_timeout_seconds=get_int(
                "REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT_SECONDS
            ),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_format=os.environ.get("LOG_FORMAT", "json").lower(),
        )
