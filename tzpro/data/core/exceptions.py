"""Custom exception hierarchy.

Every failure is scoped to a single call and surfaced to the caller. The
library never retries on its own; RateLimitError only carries the primitives
a caller's retry loop needs.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Mapping
from datetime import UTC, datetime, timedelta
from email.utils import parsedate_to_datetime
from typing import Any

DEFAULT_RATE_LIMIT_WINDOW = 60.0


class DataError(Exception):
    """Base exception for all library errors."""

    pass


class TransportError(DataError):
    """Network or HTTP failure reported by the transport.

    Not retried by the library and propagated unchanged.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(TransportError):
    """Server throttled the request.

    Carries an absolute deadline after which a retry is expected to succeed
    and a readiness future that resolves exactly once, at the deadline.

    Example:
        >>> try:
        ...     page = await client.query_table(spec)
        ... except RateLimitError as err:
        ...     if await err.wait_until_ready_or_cancelled(stop_event):
        ...         page = await client.query_table(spec)
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        *,
        status_code: int = 429,
    ) -> None:
        super().__init__(message, status_code=status_code)
        if retry_after is None or retry_after < 0:
            retry_after = DEFAULT_RATE_LIMIT_WINDOW
        self.retry_after = retry_after
        self.deadline = datetime.now(UTC) + timedelta(seconds=retry_after)
        self._deadline_monotonic = time.monotonic() + retry_after
        self._ready: asyncio.Future[bool] | None = None

    def remaining(self) -> float:
        """Seconds left until the deadline, never negative."""
        return max(0.0, self._deadline_monotonic - time.monotonic())

    def ready(self) -> asyncio.Future[bool]:
        """Future that resolves with True once the deadline has passed.

        The future is created on first use on the running loop and shared by
        every later caller, so it fires exactly once.
        """
        if self._ready is None:
            loop = asyncio.get_running_loop()
            self._ready = loop.create_future()
            loop.call_later(self.remaining(), _resolve_once, self._ready)
        return self._ready

    async def wait_until_ready_or_cancelled(
        self,
        cancellation: asyncio.Event | Awaitable[Any] | None = None,
    ) -> bool:
        """Wait for the deadline or an external cancellation, whichever is first.

        Args:
            cancellation: Event or awaitable signalling that the caller gave up
                (for example a caller-scoped deadline)

        Returns:
            True if the rate-limit window elapsed, False if the cancellation
            resolved first
        """
        ready = self.ready()
        if cancellation is None:
            return await asyncio.shield(ready)

        if isinstance(cancellation, asyncio.Event):
            cancel_task: asyncio.Future[Any] = asyncio.ensure_future(cancellation.wait())
            owns_cancel_task = True
        else:
            cancel_task = asyncio.ensure_future(cancellation)
            owns_cancel_task = cancel_task is not cancellation

        try:
            done, _ = await asyncio.wait({ready, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if owns_cancel_task and not cancel_task.done():
                cancel_task.cancel()

        return ready in done and cancel_task not in done


def _resolve_once(future: asyncio.Future[bool]) -> None:
    if not future.done():
        future.set_result(True)


class DecodeError(DataError):
    """Payload could not be decoded into the requested entity type.

    Raised for a wrong top-level JSON shape, an undeclared column under the
    strict policy, or a value whose structural kind does not match its field.
    """

    def __init__(
        self,
        message: str,
        *,
        column: str | None = None,
        row_index: int | None = None,
    ) -> None:
        super().__init__(message)
        self.column = column
        self.row_index = row_index


def parse_retry_after(headers: Mapping[str, str] | None) -> float | None:
    """Extract a retry delay in seconds from throttling response headers.

    Reads ``Retry-After`` (delta seconds or HTTP date) and falls back to
    ``X-RateLimit-Reset`` (seconds until the window resets).

    Returns:
        Delay in seconds, or None when the server sent no usable hint
    """
    if not headers:
        return None

    lowered = {k.lower(): v for k, v in headers.items()}
    value = lowered.get("retry-after")
    if value:
        value = value.strip()
        try:
            return max(0.0, float(value))
        except ValueError:
            pass
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            when = None
        if when is not None:
            if when.tzinfo is None:
                when = when.replace(tzinfo=UTC)
            return max(0.0, (when - datetime.now(UTC)).total_seconds())

    reset = lowered.get("x-ratelimit-reset")
    if reset:
        try:
            return max(0.0, float(reset.strip()))
        except ValueError:
            return None
    return None


# Attribute holding the RateLimitError derived from a throttled response error
_CONVERTED_ATTR = "_tzpro_rate_limit_error"


def as_rate_limit_error(err: BaseException | None) -> RateLimitError | None:
    """Find the rate-limit signal behind an error, if any.

    Walks the ``__cause__``/``__context__`` chain so wrapped errors are
    recognised. Any error in the chain exposing ``status_code == 429`` (or
    ``status == 429`` as aiohttp's ClientResponseError does) is converted into
    a RateLimitError with the default window. The conversion is remembered
    on the source error, so repeated lookups return the same signal with the
    same deadline.
    """
    seen: set[int] = set()
    current = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, RateLimitError):
            return current
        status = getattr(current, "status_code", None) or getattr(current, "status", None)
        if status == 429:
            converted = getattr(current, _CONVERTED_ATTR, None)
            if isinstance(converted, RateLimitError):
                return converted
            headers = getattr(current, "headers", None)
            converted = RateLimitError(
                str(current) or "rate limited",
                parse_retry_after(headers) if isinstance(headers, Mapping) else None,
            )
            try:
                setattr(current, _CONVERTED_ATTR, converted)
            except AttributeError:
                pass
            return converted
        current = current.__cause__ or current.__context__
    return None


def is_rate_limited(err: BaseException | None) -> bool:
    """Return True if the error (or anything it wraps) signals throttling."""
    return as_rate_limit_error(err) is not None
