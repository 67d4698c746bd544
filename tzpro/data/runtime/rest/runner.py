"""Table request runner: builds, executes and decodes one table query."""

from __future__ import annotations

from typing import Any

from ...api.query import QuerySpec, build_query
from ...core.decoder import decode
from ...core.descriptor import TypeDescriptor
from ...core.enums import UnknownColumnPolicy
from ...models.page import ResultPage
from .transport import Transport


class TableRunner:
    def __init__(
        self,
        transport: Transport,
        *,
        policy: UnknownColumnPolicy = UnknownColumnPolicy.IGNORE,
    ) -> None:
        self._t = transport
        self._policy = policy

    async def run(
        self,
        spec: QuerySpec,
        *,
        descriptor: TypeDescriptor | None = None,
        policy: UnknownColumnPolicy | None = None,
    ) -> ResultPage[Any]:
        """Execute a table query and decode the page.

        When the query requests no explicit columns, all descriptor columns
        are requested so the compact rows always match a known header. The
        cursor column is always requested so every page can be continued.

        Raises:
            ValueError: If neither the query nor the call provides a descriptor
        """
        descriptor = descriptor or spec.descriptor
        if descriptor is None:
            raise ValueError(f"No type descriptor for table '{spec.table}'")
        if not spec.columns:
            spec = spec.with_columns(*descriptor.columns)
        cursor_column = descriptor.cursor_column
        if cursor_column and cursor_column not in spec.columns:
            spec = spec.with_columns(*spec.columns, cursor_column)

        path, query = build_query(spec)
        payload = await self._t.get(path, params=query)
        rows = decode(payload, spec.columns, descriptor, policy=policy or self._policy)
        return ResultPage.of(rows, spec.columns, descriptor.cursor_attr)
