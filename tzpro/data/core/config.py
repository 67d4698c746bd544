"""Client configuration.

This module centralizes the service URL, page-size ceiling and cache sizing
used by the transport, the query builder and the client so the client itself
can stay small and focused.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .enums import UnknownColumnPolicy
from .exceptions import DEFAULT_RATE_LIMIT_WINDOW

DEFAULT_BASE_URL = "https://api.tzpro.io"

# Server-declared ceiling for table page sizes
MAX_PAGE_SIZE = 1000

DEFAULT_TIMEOUT = 30.0
DEFAULT_SCRIPT_CACHE_SIZE = 2048
DEFAULT_USER_AGENT = "tzpro-data-python"

ENV_BASE_URL = "TZPRO_URL"
ENV_API_KEY = "TZPRO_API_KEY"
ENV_TIMEOUT = "TZPRO_TIMEOUT"


@dataclass(frozen=True)
class ClientConfig:
    """Immutable settings for a TzproClient session.

    Attributes:
        base_url: Service root, without trailing slash
        api_key: Optional key sent as ``X-API-Key``
        timeout: Total request timeout in seconds
        max_page_size: Upper bound accepted by ``QuerySpec.with_limit``
        script_cache_size: Capacity of the contract script LRU cache
        unknown_column_policy: Decoder behavior for undeclared columns
        rate_limit_window: Default backoff when the server sends no hint
        user_agent: Value of the User-Agent header
    """

    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    max_page_size: int = MAX_PAGE_SIZE
    script_cache_size: int = DEFAULT_SCRIPT_CACHE_SIZE
    unknown_column_policy: UnknownColumnPolicy = UnknownColumnPolicy.IGNORE
    rate_limit_window: float = DEFAULT_RATE_LIMIT_WINDOW
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_page_size < 1:
            raise ValueError("max_page_size must be >= 1")
        if self.script_cache_size < 1:
            raise ValueError("script_cache_size must be >= 1")
        if self.rate_limit_window < 0:
            raise ValueError("rate_limit_window must be >= 0")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> ClientConfig:
        """Build a config from ``TZPRO_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``
            **overrides: Explicit values that win over the environment

        Returns:
            ClientConfig instance
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if env.get(ENV_BASE_URL):
            values["base_url"] = env[ENV_BASE_URL]
        if env.get(ENV_API_KEY):
            values["api_key"] = env[ENV_API_KEY]
        if env.get(ENV_TIMEOUT):
            try:
                values["timeout"] = float(env[ENV_TIMEOUT])
            except ValueError:
                raise ValueError(f"{ENV_TIMEOUT} must be a number, got {env[ENV_TIMEOUT]!r}") from None
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]
