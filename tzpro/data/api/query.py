"""Immutable table queries and their canonical rendering.

This module provides the chainable QuerySpec used to configure filters,
columns, ordering, page size and the pagination cursor of a table query,
and the canonical rendering of a spec into a request path and query params.

Architecture:
    QuerySpec is a frozen dataclass. Every ``with_*`` method returns a new
    spec built with ``dataclasses.replace``; the receiver is never touched,
    so one spec can seed any number of concurrent paginations.

Design Decisions:
    - Canonical rendering: filters are sorted by field, operator token and
      value, membership lists are sorted, so logically equal specs always
      serialize to the same string (safe retries, usable as a cache key)
    - Limits outside ``[1, max_page_size]`` are rejected, not clamped
    - Builder misuse raises ValueError

Example:
    >>> spec = (QuerySpec(table="contract")
    ...     .with_filter("creator", "eq", "tz1...")
    ...     .with_columns("row_id", "address")
    ...     .with_order(OrderDirection.ASC)
    ...     .with_limit(100))
    >>> path, params = build_query(spec)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from urllib.parse import urlencode

from ..core.config import MAX_PAGE_SIZE
from ..core.descriptor import TypeDescriptor
from ..core.enums import Operator, OrderDirection

__all__ = [
    "Filter",
    "QuerySpec",
    "build_query",
    "render_value",
]


def render_value(value: Any) -> str:
    """Render a scalar filter value as a query-string token."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).isoformat().replace("+00:00", "Z")
    if isinstance(value, bytes | bytearray):
        return bytes(value).hex()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def _is_collection(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, str | bytes | bytearray | dict)


@dataclass(frozen=True)
class Filter:
    """A single ``field <operator> value`` condition.

    Membership values are stored as a sorted tuple of rendered tokens so
    that two filters over the same set compare and hash equal.
    """

    field: str
    operator: Operator
    value: Any = None

    @classmethod
    def create(cls, field_name: str, operator: Operator | str, value: Any = None) -> Filter:
        """Validate and normalize a filter.

        Raises:
            ValueError: If the field is empty or the value does not fit the
                operator
        """
        if not field_name:
            raise ValueError("filter field must not be empty")
        op = Operator.parse(operator)
        if op.is_unary:
            if value is not None:
                raise ValueError(f"operator '{op.value}' takes no value")
            return cls(field_name, op, None)
        if op.is_membership:
            if not _is_collection(value):
                raise ValueError(f"operator '{op.value}' requires a list of values")
            tokens = tuple(sorted({render_value(v) for v in value}))
            if not tokens:
                raise ValueError(f"operator '{op.value}' requires at least one value")
            return cls(field_name, op, tokens)
        if value is None or _is_collection(value) or isinstance(value, dict):
            raise ValueError(f"operator '{op.value}' requires a single value")
        return cls(field_name, op, value)

    @property
    def key(self) -> str:
        return f"{self.field}.{self.operator.value}"

    def rendered(self) -> str:
        if self.operator.is_unary:
            return "true"
        if self.operator.is_membership:
            return ",".join(self.value)
        return render_value(self.value)

    def sort_key(self) -> tuple[str, str, str]:
        return (self.field, self.operator.value, self.rendered())


@dataclass(frozen=True)
class QuerySpec:
    """Immutable configuration of a table query.

    Attributes:
        table: Table name, rendered as ``/tables/<table>``
        filters: Conditions in insertion order (empty tuple = no filter)
        columns: Requested columns, ordered and unique (empty = all)
        order: Sort direction, or None for the server default
        order_by: Field to sort by, or None for the implicit row id
        limit: Page size, or None for the server default
        cursor: Last seen row id, 0 = start
        max_page_size: Upper bound accepted by ``with_limit``
        descriptor: Optional entity descriptor used to validate columns
        extra: Additional endpoint-specific query parameters
    """

    table: str
    filters: tuple[Filter, ...] = ()
    columns: tuple[str, ...] = ()
    order: OrderDirection | None = None
    order_by: str | None = None
    limit: int | None = None
    cursor: int = 0
    max_page_size: int = MAX_PAGE_SIZE
    descriptor: TypeDescriptor | None = field(default=None, compare=False)
    extra: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if not self.table:
            raise ValueError("table is required")
        if self.max_page_size < 1:
            raise ValueError("max_page_size must be >= 1")

    @property
    def path(self) -> str:
        return f"/tables/{self.table}"

    def with_filter(self, field_name: str, operator: Operator | str, value: Any = None) -> QuerySpec:
        """Return a copy with one more filter condition.

        A condition rendering the same as one already present is not added
        again.
        """
        flt = Filter.create(field_name, operator, value)
        if any(f.sort_key() == flt.sort_key() for f in self.filters):
            return self
        return replace(self, filters=self.filters + (flt,))

    def with_columns(self, *names: str) -> QuerySpec:
        """Return a copy requesting exactly these columns, in this order.

        Duplicates are dropped keeping the first occurrence. Calling with no
        names resets to all columns.

        Raises:
            ValueError: If a descriptor is attached and does not declare a column
        """
        unique: list[str] = []
        for name in names:
            if not name:
                raise ValueError("column name must not be empty")
            if self.descriptor is not None and name not in self.descriptor:
                raise ValueError(
                    f"Unknown column '{name}' for {self.descriptor.model.__name__}"
                )
            if name not in unique:
                unique.append(name)
        return replace(self, columns=tuple(unique))

    def with_order(self, direction: OrderDirection | str, field_name: str | None = None) -> QuerySpec:
        """Return a copy sorted ascending or descending, optionally by a named field."""
        return replace(self, order=OrderDirection(direction), order_by=field_name or None)

    def with_limit(self, n: int) -> QuerySpec:
        """Return a copy with page size ``n``.

        Raises:
            ValueError: If ``n`` is outside ``[1, max_page_size]``
        """
        if isinstance(n, bool) or not isinstance(n, int):
            raise ValueError(f"limit must be an integer, got {n!r}")
        if not 1 <= n <= self.max_page_size:
            raise ValueError(f"limit must be between 1 and {self.max_page_size}, got {n}")
        return replace(self, limit=n)

    def with_cursor(self, row_id: int) -> QuerySpec:
        """Return a copy resuming after row ``row_id`` (0 = start)."""
        if isinstance(row_id, bool) or not isinstance(row_id, int) or row_id < 0:
            raise ValueError(f"cursor must be a non-negative integer, got {row_id!r}")
        return replace(self, cursor=row_id)

    def with_param(self, key: str, value: Any) -> QuerySpec:
        """Return a copy with an extra query parameter, replacing any previous value."""
        if not key:
            raise ValueError("parameter key must not be empty")
        kept = tuple((k, v) for k, v in self.extra if k != key)
        return replace(self, extra=kept + ((key, render_value(value)),))

    def params(self) -> list[tuple[str, str]]:
        """Query parameters in canonical order."""
        params = [(f.key, f.rendered()) for f in sorted(self.filters, key=Filter.sort_key)]
        if self.columns:
            params.append(("columns", ",".join(self.columns)))
        if self.limit is not None:
            params.append(("limit", str(self.limit)))
        if self.order is not None:
            params.append(("order", self.order.value))
        if self.order_by:
            params.append(("order_by", self.order_by))
        if self.cursor > 0:
            params.append(("cursor", str(self.cursor)))
        params.extend(sorted(self.extra))
        return params

    def canonical(self) -> str:
        """Canonical url-encoded query string."""
        return urlencode(self.params())


def build_query(spec: QuerySpec) -> tuple[str, list[tuple[str, str]]]:
    """Render a spec into a request path and canonical query params."""
    return spec.path, spec.params()
