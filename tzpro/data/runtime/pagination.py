"""Cursor-based pagination over table queries.

Architecture:
    The paginator repeatedly advances a QuerySpec with the identifier of the
    last decoded row and stops on the first empty page. It does not rely on
    a total count, so result streams may be open-ended.

Design Decisions:
    - Restartable: ``cursor`` always holds the last observed cursor; a new
      paginator started from it continues without replaying earlier pages
    - At-least-once: rows duplicated or skipped by concurrent server writes
      are passed through; the paginator performs no deduplication
    - No retries: fetch errors, including rate limits, propagate unchanged
      and leave ``cursor`` at the last successfully consumed page
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from time import perf_counter
from typing import Generic, TypeVar

from ..api.query import QuerySpec
from ..core.exceptions import DataError
from ..models.page import ResultPage
from .telemetry import log_page_error, log_page_fetched, log_pagination_complete

T = TypeVar("T")

FetchPage = Callable[[QuerySpec], Awaitable[ResultPage[T]]]


class CursorPaginator(Generic[T]):
    """Async iterator over the pages of a table query.

    Example:
        >>> paginator = CursorPaginator(client.query_table, spec.with_limit(500))
        >>> async for page in paginator:
        ...     handle(page.rows)
        >>> resume_from = paginator.cursor
    """

    def __init__(
        self,
        fetch_page: FetchPage[T],
        spec: QuerySpec,
        *,
        start_cursor: int | None = None,
        max_pages: int | None = None,
    ) -> None:
        """Initialize paginator.

        Args:
            fetch_page: Async function executing one QuerySpec
            spec: Base query; its own cursor is the default start point
            start_cursor: Resume point overriding the query's cursor
            max_pages: Optional cap on the number of requests
        """
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        self._fetch_page = fetch_page
        self._spec = spec
        self._cursor = spec.cursor if start_cursor is None else start_cursor
        self._max_pages = max_pages
        self._pages_fetched = 0
        self._rows_seen = 0
        self._exhausted = False

    @property
    def cursor(self) -> int:
        """Last observed cursor; pass it as ``start_cursor`` to resume."""
        return self._cursor

    @property
    def exhausted(self) -> bool:
        """True once an empty page ended the stream."""
        return self._exhausted

    @property
    def pages_fetched(self) -> int:
        return self._pages_fetched

    def __aiter__(self) -> AsyncIterator[ResultPage[T]]:
        return self.pages()

    async def pages(self) -> AsyncIterator[ResultPage[T]]:
        """Yield non-empty pages until the first empty page."""
        table = self._spec.table
        while not self._exhausted:
            if self._max_pages is not None and self._pages_fetched >= self._max_pages:
                break

            requested = self._cursor
            page_spec = self._spec.with_cursor(requested)
            started = perf_counter()
            try:
                page = await self._fetch_page(page_spec)
            except Exception as e:
                log_page_error(
                    table=table,
                    page_index=self._pages_fetched,
                    cursor=requested,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                raise
            log_page_fetched(
                table=table,
                page_index=self._pages_fetched,
                rows=len(page),
                cursor=requested,
                latency_ms=(perf_counter() - started) * 1000.0,
            )
            self._pages_fetched += 1

            if not page:
                self._exhausted = True
                break

            next_cursor = page.cursor()
            if next_cursor == requested or next_cursor <= 0:
                raise DataError(
                    f"Pagination on '{table}' did not advance past cursor {requested}"
                )
            self._cursor = next_cursor
            self._rows_seen += len(page)
            yield page

        log_pagination_complete(
            table=table,
            pages=self._pages_fetched,
            total_rows=self._rows_seen,
            last_cursor=self._cursor,
        )

    async def rows(self) -> AsyncIterator[T]:
        """Yield rows across all pages."""
        async for page in self.pages():
            for row in page:
                yield row
