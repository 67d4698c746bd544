"""Precise unit tests for HTTPTransport.

Tests focus on session management, URL building and status code mapping.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from tzpro.data.core import ClientConfig, RateLimitError, TransportError
from tzpro.data.runtime.rest import HTTPTransport


def _transport_with_response(
    status: int,
    body: bytes = b"",
    headers: dict[str, str] | None = None,
    config: ClientConfig | None = None,
) -> tuple[HTTPTransport, MagicMock]:
    transport = HTTPTransport(config or ClientConfig(base_url="https://api.example.com"))
    response = MagicMock()
    response.status = status
    response.headers = headers or {}
    response.read = AsyncMock(return_value=body)
    session = MagicMock()
    session.closed = False
    session.request.return_value.__aenter__.return_value = response
    transport._session = session
    return transport, session


class TestHTTPTransportSession:
    """Test HTTPTransport session management."""

    def test_init(self):
        """Test HTTPTransport initialization."""
        transport = HTTPTransport(ClientConfig(base_url="https://api.example.com/", timeout=10.0))
        assert transport.base_url == "https://api.example.com"
        assert transport.timeout.total == 10.0
        assert transport._session is None

    @pytest.mark.asyncio
    async def test_session_headers(self):
        """Test the session carries the API key and user agent."""
        transport = HTTPTransport(ClientConfig(api_key="secret"))
        session = transport.session
        assert isinstance(session, aiohttp.ClientSession)
        assert session.headers["X-API-Key"] == "secret"
        assert session.headers["Accept"] == "application/json"
        await transport.close()

    @pytest.mark.asyncio
    async def test_close_idempotent(self):
        """Test close() can be called multiple times."""
        transport = HTTPTransport()
        session = transport.session
        await transport.close()
        await transport.close()
        assert session.closed

    @pytest.mark.asyncio
    async def test_context_manager(self):
        """Test HTTPTransport as async context manager."""
        async with HTTPTransport() as transport:
            assert transport.session is not None
        assert transport._session is None or transport._session.closed

    def test_url_building(self):
        """Test relative paths are joined to the base URL."""
        transport = HTTPTransport(ClientConfig(base_url="https://api.example.com"))
        assert transport._url("/tables/contract") == "https://api.example.com/tables/contract"
        assert transport._url("tables/op") == "https://api.example.com/tables/op"
        assert transport._url("https://other.example.com/x") == "https://other.example.com/x"


class TestHTTPTransportRequests:
    """Test request execution and error mapping."""

    @pytest.mark.asyncio
    async def test_get_returns_body(self):
        """Test a successful GET returns the raw body."""
        transport, session = _transport_with_response(200, b"[[1]]")

        body = await transport.get("/tables/contract", params=[("limit", "1")])

        assert body == b"[[1]]"
        session.request.assert_called_once_with(
            "GET",
            "https://api.example.com/tables/contract",
            params=[("limit", "1")],
            json=None,
            headers=None,
        )

    @pytest.mark.asyncio
    async def test_post_sends_json(self):
        """Test POST passes the JSON body."""
        transport, session = _transport_with_response(200, b"{}")
        await transport.post("/rpc", json_body={"a": 1})
        assert session.request.call_args.kwargs["json"] == {"a": 1}

    @pytest.mark.asyncio
    async def test_429_with_retry_after(self):
        """Test 429 becomes RateLimitError using the server hint."""
        transport, _ = _transport_with_response(429, headers={"Retry-After": "3"})

        with pytest.raises(RateLimitError) as exc_info:
            await transport.get("/tables/contract")

        assert exc_info.value.retry_after == 3.0
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_429_without_hint_uses_configured_window(self):
        """Test 429 without headers falls back to the configured window."""
        config = ClientConfig(base_url="https://api.example.com", rate_limit_window=15)
        transport, _ = _transport_with_response(429, config=config)

        with pytest.raises(RateLimitError) as exc_info:
            await transport.get("/tables/contract")

        assert exc_info.value.retry_after == 15

    @pytest.mark.asyncio
    async def test_server_error(self):
        """Test 5xx becomes TransportError with the status code."""
        transport, _ = _transport_with_response(500, b"internal error")

        with pytest.raises(TransportError, match="HTTP 500: internal error") as exc_info:
            await transport.get("/tables/contract")

        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, RateLimitError)

    @pytest.mark.asyncio
    async def test_long_error_body_truncated(self):
        """Test error messages do not embed huge bodies."""
        transport, _ = _transport_with_response(400, b"x" * 5000)
        with pytest.raises(TransportError) as exc_info:
            await transport.get("/tables/contract")
        assert len(str(exc_info.value)) < 600

    @pytest.mark.asyncio
    async def test_client_error_wrapped(self):
        """Test aiohttp errors become TransportError."""
        transport, session = _transport_with_response(200)
        session.request.side_effect = aiohttp.ClientConnectionError("refused")

        with pytest.raises(TransportError, match="refused") as exc_info:
            await transport.get("/tables/contract")

        assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self):
        """Test timeouts become TransportError."""
        transport, session = _transport_with_response(200)
        session.request.side_effect = TimeoutError()

        with pytest.raises(TransportError, match="timed out"):
            await transport.get("/tables/contract")
