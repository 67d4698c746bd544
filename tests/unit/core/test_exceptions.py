"""Precise unit tests for exception hierarchy and rate-limit signalling.

Tests focus on meaningful behavior, not just field access.
"""

from __future__ import annotations

import asyncio
import time
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime

import pytest

from tzpro.data.core import (
    DEFAULT_RATE_LIMIT_WINDOW,
    DataError,
    DecodeError,
    RateLimitError,
    TransportError,
    as_rate_limit_error,
    is_rate_limited,
    parse_retry_after,
)


def test_rate_limit_error_with_retry_after():
    """Test RateLimitError with retry_after (meaningful behavior)."""
    error = RateLimitError("rate limit", retry_after=120)
    assert error.status_code == 429
    assert error.retry_after == 120
    assert isinstance(error, TransportError)
    assert isinstance(error, DataError)


def test_rate_limit_error_default_window():
    """Test RateLimitError falls back to the default window."""
    error = RateLimitError("rate limit")
    assert error.retry_after == DEFAULT_RATE_LIMIT_WINDOW
    expected = datetime.now(UTC) + timedelta(seconds=DEFAULT_RATE_LIMIT_WINDOW)
    assert abs((error.deadline - expected).total_seconds()) < 1


def test_rate_limit_error_remaining_never_negative():
    """Test remaining() is clamped at zero once the deadline passed."""
    error = RateLimitError("rate limit", retry_after=0)
    assert error.remaining() == 0.0


def test_transport_error_with_status_code():
    """Test TransportError with status_code."""
    error = TransportError("boom", status_code=502)
    assert str(error) == "boom"
    assert error.status_code == 502
    assert isinstance(error, DataError)


def test_decode_error_context():
    """Test DecodeError keeps column and row context."""
    error = DecodeError("bad value", column="row_id", row_index=3)
    assert error.column == "row_id"
    assert error.row_index == 3
    assert isinstance(error, DataError)


class TestRateLimitReadiness:
    """Test the readiness future and cancellation race."""

    @pytest.mark.asyncio
    async def test_ready_resolves_after_deadline(self):
        """Test ready() resolves with True after the window."""
        error = RateLimitError("rate limit", retry_after=0.02)
        assert await asyncio.wait_for(error.ready(), timeout=1) is True

    @pytest.mark.asyncio
    async def test_ready_is_shared(self):
        """Test ready() returns the same future on every call."""
        error = RateLimitError("rate limit", retry_after=0.01)
        assert error.ready() is error.ready()
        await error.ready()

    @pytest.mark.asyncio
    async def test_wait_without_cancellation(self):
        """Test waiting without a cancellation signal returns True."""
        error = RateLimitError("rate limit", retry_after=0.01)
        assert await error.wait_until_ready_or_cancelled() is True

    @pytest.mark.asyncio
    async def test_cancellation_event_wins(self):
        """Test a cancellation event set before the deadline returns False promptly."""
        error = RateLimitError("rate limit", retry_after=5)
        stop = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, stop.set)

        started = time.monotonic()
        result = await error.wait_until_ready_or_cancelled(stop)

        assert result is False
        assert time.monotonic() - started < 1
        assert not error.ready().done()
        error.ready().cancel()

    @pytest.mark.asyncio
    async def test_cancellation_awaitable_wins(self):
        """Test an awaitable cancellation (caller deadline) returns False."""
        error = RateLimitError("rate limit", retry_after=5)
        result = await error.wait_until_ready_or_cancelled(asyncio.sleep(0.02))
        assert result is False
        error.ready().cancel()

    @pytest.mark.asyncio
    async def test_deadline_wins_over_slow_cancellation(self):
        """Test the deadline beats a cancellation that never fires."""
        error = RateLimitError("rate limit", retry_after=0.02)
        stop = asyncio.Event()
        assert await error.wait_until_ready_or_cancelled(stop) is True


class TestParseRetryAfter:
    """Test throttling header parsing."""

    def test_delta_seconds(self):
        """Test Retry-After given in seconds."""
        assert parse_retry_after({"Retry-After": "7"}) == 7.0

    def test_http_date(self):
        """Test Retry-After given as an HTTP date."""
        when = datetime.now(UTC) + timedelta(seconds=30)
        delay = parse_retry_after({"Retry-After": format_datetime(when, usegmt=True)})
        assert delay is not None
        assert 25 <= delay <= 31

    def test_ratelimit_reset_fallback(self):
        """Test X-RateLimit-Reset is used when Retry-After is absent."""
        assert parse_retry_after({"x-ratelimit-reset": "12"}) == 12.0

    def test_missing_or_garbage(self):
        """Test no usable hint yields None."""
        assert parse_retry_after(None) is None
        assert parse_retry_after({}) is None
        assert parse_retry_after({"Retry-After": "soon"}) is None


class TestRateLimitDetection:
    """Test recognising throttling through wrapped errors."""

    def test_direct_rate_limit_error(self):
        """Test a RateLimitError is returned as-is."""
        error = RateLimitError("rate limit", retry_after=3)
        assert as_rate_limit_error(error) is error
        assert is_rate_limited(error)

    def test_wrapped_in_cause_chain(self):
        """Test a RateLimitError raised as the cause of another error."""
        inner = RateLimitError("rate limit", retry_after=3)
        try:
            try:
                raise inner
            except RateLimitError as e:
                raise RuntimeError("page fetch failed") from e
        except RuntimeError as outer:
            assert as_rate_limit_error(outer) is inner

    def test_status_code_429_is_converted(self):
        """Test an arbitrary error exposing status 429 is recognised."""
        error = TransportError("throttled", status_code=429)
        found = as_rate_limit_error(error)
        assert isinstance(found, RateLimitError)
        assert found.retry_after == DEFAULT_RATE_LIMIT_WINDOW

    def test_repeated_conversion_returns_same_signal(self):
        """Test converting one throttled error twice keeps a single deadline."""
        error = TransportError("throttled", status_code=429)
        assert is_rate_limited(error)
        first = as_rate_limit_error(error)
        time.sleep(0.02)
        second = as_rate_limit_error(error)
        assert second is first
        assert second.deadline == first.deadline

        try:
            raise RuntimeError("page fetch failed") from error
        except RuntimeError as outer:
            assert as_rate_limit_error(outer) is first

    def test_other_errors_are_not_rate_limited(self):
        """Test unrelated errors are not treated as throttling."""
        assert not is_rate_limited(TransportError("down", status_code=503))
        assert not is_rate_limited(ValueError("nope"))
        assert as_rate_limit_error(None) is None
