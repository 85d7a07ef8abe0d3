"""
Settings and configuration for the Images client.

Centralizes configuration values and provides validation with fail-fast behavior.
Loads settings from environment variables at transport construction time.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional

__all__ = ["Settings", "create_settings_from_env"]


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for the Images client.

    endpoint: Images service URL, with or without the ``/v2`` suffix (required)
    auth_token: Pre-issued token sent as ``X-Auth-Token``
    insecure: Skip TLS verification for local/dev deployments
    http_timeout_s: HTTP request timeout in seconds
    http_retry: Number of retries for timed-out requests (0=no retry)
    """
    endpoint: str
    auth_token: Optional[str] = None
    insecure: bool = False
    http_timeout_s: float = 30.0
    http_retry: int = 0

    def __post_init__(self):
        """Validate settings on construction."""
        if not self.endpoint:
            raise ValueError("endpoint is required")

        url_pattern = r"^https?://[a-zA-Z0-9.-]+(?::[0-9]+)?(?:/.*)?$"
        if not re.match(url_pattern, self.endpoint):
            raise ValueError(f"Invalid endpoint format: {self.endpoint}")

        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if self.http_retry < 0:
            raise ValueError(f"http_retry must be non-negative, got {self.http_retry}")

    @property
    def base_url(self) -> str:
        """Endpoint without a trailing slash or ``/v2`` suffix."""
        url = self.endpoint.rstrip("/")
        if url.endswith("/v2"):
            url = url[:-3]
        return url


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - IMAGES_ENDPOINT (required)
        - IMAGES_AUTH_TOKEN (optional)
        - IMAGES_INSECURE (default: false)
        - IMAGES_HTTP_TIMEOUT (default: 30.0)
        - IMAGES_HTTP_RETRY (default: 0)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If configuration is invalid or required values missing

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def str_to_bool(value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    endpoint = os.getenv("IMAGES_ENDPOINT")
    if not endpoint:
        raise ValueError("IMAGES_ENDPOINT environment variable is required")

    return Settings(
        endpoint=endpoint,
        auth_token=os.getenv("IMAGES_AUTH_TOKEN") or None,
        insecure=str_to_bool(os.getenv("IMAGES_INSECURE", "false")),
        http_timeout_s=get_float("IMAGES_HTTP_TIMEOUT", 30.0),
        http_retry=get_int("IMAGES_HTTP_RETRY", 0),
    )
