"""Structured logging for pagination and script cache operations.

This module provides telemetry hooks emitting structured log records with
event names as messages and details in ``extra``.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def log_page_fetched(
    *,
    table: str,
    page_index: int,
    rows: int,
    cursor: int,
    latency_ms: float | None = None,
) -> None:
    """Log a fetched page.

    Args:
        table: Table name
        page_index: Zero-based index of the page within this pagination
        rows: Number of decoded rows
        cursor: Cursor the page was requested with
        latency_ms: Fetch plus decode latency in milliseconds (optional)
    """
    logger.debug(
        "page_fetched",
        extra={
            "table": table,
            "page_index": page_index,
            "rows": rows,
            "cursor": cursor,
            "latency_ms": latency_ms,
        },
    )


def log_pagination_complete(*, table: str, pages: int, total_rows: int, last_cursor: int) -> None:
    logger.info(
        "pagination_complete",
        extra={
            "table": table,
            "pages": pages,
            "total_rows": total_rows,
            "last_cursor": last_cursor,
        },
    )


def log_page_error(*, table: str, page_index: int, cursor: int, error_type: str, error_message: str) -> None:
    """Log a failed page fetch.

    Args:
        table: Table name
        page_index: Zero-based index of the page that failed
        cursor: Cursor the page was requested with
        error_type: Type of error (e.g., "RateLimitError", "DecodeError")
        error_message: Error message
    """
    logger.error(
        "page_error",
        extra={
            "table": table,
            "page_index": page_index,
            "cursor": cursor,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_script_cache_event(*, event: str, address: str, size: int | None = None) -> None:
    """Log a script cache hit, miss, load, eviction or joined in-flight load."""
    logger.debug(
        f"script_cache_{event}",
        extra={"address": address, "cache_size": size},
    )
