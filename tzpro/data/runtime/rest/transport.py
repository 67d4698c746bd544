"""HTTP transport for the indexer API.

The transport performs GET/POST requests and returns raw payload bytes.
Decoding is left to the caller so payloads can be parsed with exact decimal
precision. Throttling responses are raised as RateLimitError; every other
failure is a TransportError.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import aiohttp

from ...core.config import ClientConfig
from ...core.exceptions import RateLimitError, TransportError, parse_retry_after

logger = logging.getLogger(__name__)

QueryParams = Mapping[str, Any] | Sequence[tuple[str, str]]

# Error bodies are truncated to this many characters in exception messages
_MAX_ERROR_BODY = 512


class Transport(Protocol):
    """Capability consumed by the client: raw HTTP requests."""

    async def get(
        self,
        path: str,
        params: QueryParams | None = None,
        headers: dict[str, str] | None = None,
    ) -> bytes: ...

    async def post(
        self,
        path: str,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> bytes: ...

    async def close(self) -> None: ...


class HTTPTransport:
    """Async HTTP transport wrapper around an aiohttp session."""

    def __init__(self, config: ClientConfig | None = None) -> None:
        self.config = config or ClientConfig()
        self.base_url = self.config.base_url
        self.timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers=self._default_headers(),
            )
        return self._session

    def _default_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "User-Agent": self.config.user_agent}
        if self.config.api_key:
            headers["X-API-Key"] = self.config.api_key
        return headers

    def _url(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def get(
        self,
        path: str,
        params: QueryParams | None = None,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        """GET request returning the raw response body."""
        return await self._request("GET", path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        """POST request with a JSON body returning the raw response body."""
        return await self._request("POST", path, json_body=json_body, headers=headers)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: QueryParams | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        url = self._url(path)
        logger.debug("http_request", extra={"method": method, "url": url})
        try:
            async with self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
            ) as response:
                body = await response.read()
                if response.status == 429:
                    retry_after = parse_retry_after(response.headers)
                    if retry_after is None:
                        retry_after = self.config.rate_limit_window
                    logger.warning(
                        "http_rate_limited",
                        extra={"url": url, "retry_after": retry_after},
                    )
                    raise RateLimitError(f"{method} {path}: rate limited", retry_after)
                if response.status >= 400:
                    raise TransportError(
                        f"{method} {path}: HTTP {response.status}: {_error_text(body)}",
                        status_code=response.status,
                    )
                return body
        except TransportError:
            raise
        except TimeoutError as e:
            raise TransportError(f"{method} {path}: request timed out") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {path}: {e}") from e

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPTransport:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()


def _error_text(body: bytes) -> str:
    text = body.decode("utf-8", errors="replace").strip()
    if len(text) > _MAX_ERROR_BODY:
        return text[:_MAX_ERROR_BODY] + "..."
    return text or "<empty body>"
