"""Client session for the TzPro indexer API.

Architecture:
    TzproClient owns the transport, the table runner and the contract script
    cache of one session. Entity wrappers supply a type descriptor and a URL;
    everything else (query rendering, decoding, pagination, caching) runs
    through the shared core.

Design Decisions:
    - Explicit cache ownership: each client holds its own ScriptCache, which
      can also be injected to share it between clients
    - Injectable transport: tests and custom HTTP stacks pass any object
      implementing the Transport protocol
    - No automatic retries: RateLimitError and TransportError reach the caller

Example:
    >>> async with TzproClient(ClientConfig.from_env()) as client:
    ...     spec = client.new_contract_query().with_limit(100)
    ...     async for page in client.paginate(spec):
    ...         for contract in page:
    ...             print(contract.address)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..api.query import QuerySpec, render_value
from ..core.config import ClientConfig
from ..core.decoder import decode, decode_one, parse_payload
from ..core.descriptor import get_type_descriptor
from ..core.exceptions import DecodeError
from ..models.contract import CONTRACT_DESCRIPTOR, Contract, ContractValue
from ..models.dex_ticker import DEX_TICKER_DESCRIPTOR, DexTicker
from ..models.page import ResultPage
from ..models.script import ScriptMetadata
from ..runtime.pagination import CursorPaginator
from ..runtime.rest import HTTPTransport, TableRunner, Transport
from ..runtime.script_cache import ScriptCache

logger = logging.getLogger(__name__)


def _require_address(address: str) -> str:
    if not isinstance(address, str) or not address.strip():
        raise ValueError("address must be a non-empty string")
    return address.strip()


def _render_params(params: Mapping[str, Any] | None) -> dict[str, str] | None:
    if not params:
        return None
    return {key: render_value(value) for key, value in params.items()}


class TzproClient:
    """Async client for table queries, contracts and DEX tickers."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: Transport | None = None,
        script_cache: ScriptCache | None = None,
    ) -> None:
        """Initialize client.

        Args:
            config: Session configuration (defaults to ClientConfig())
            transport: Transport to use; an HTTPTransport is created if omitted
            script_cache: Script cache to use; a private cache sized by
                ``config.script_cache_size`` is created if omitted
        """
        self.config = config or ClientConfig()
        self._transport: Transport = transport or HTTPTransport(self.config)
        self._owns_transport = transport is None
        self.script_cache = script_cache or ScriptCache(self.config.script_cache_size)
        self._runner = TableRunner(self._transport, policy=self.config.unknown_column_policy)
        self._closed = False

    # --- Table queries ---------------------------------------------------

    def new_table_query(self, table: str, model: type) -> QuerySpec:
        """Create a query for ``table`` decoding rows into ``model``.

        All declared columns are requested by default.
        """
        descriptor = get_type_descriptor(model)
        return QuerySpec(
            table=table,
            columns=descriptor.columns,
            max_page_size=self.config.max_page_size,
            descriptor=descriptor,
        )

    def new_contract_query(self) -> QuerySpec:
        return self.new_table_query("contract", Contract)

    async def query_table(self, spec: QuerySpec) -> ResultPage[Any]:
        """Fetch and decode one page of a table query."""
        return await self._runner.run(spec)

    async def list_contracts(self, spec: QuerySpec | None = None) -> ResultPage[Contract]:
        spec = spec or self.new_contract_query()
        return await self._runner.run(spec, descriptor=CONTRACT_DESCRIPTOR)

    def paginate(
        self,
        spec: QuerySpec,
        *,
        start_cursor: int | None = None,
        max_pages: int | None = None,
    ) -> CursorPaginator[Any]:
        """Iterate all pages of a table query, resuming from ``start_cursor``."""
        return CursorPaginator(
            self.query_table,
            spec,
            start_cursor=start_cursor,
            max_pages=max_pages,
        )

    # --- Contracts -------------------------------------------------------

    async def get_contract(self, address: str, params: Mapping[str, Any] | None = None) -> Contract:
        address = _require_address(address)
        payload = await self._transport.get(
            f"/explorer/contract/{address}",
            params=_render_params(params),
        )
        return decode_one(payload, CONTRACT_DESCRIPTOR)

    async def get_contract_storage(
        self,
        address: str,
        params: Mapping[str, Any] | None = None,
    ) -> ContractValue:
        address = _require_address(address)
        payload = await self._transport.get(
            f"/explorer/contract/{address}/storage",
            params=_render_params(params),
        )
        data = parse_payload(payload)
        if not isinstance(data, dict):
            raise DecodeError(f"ContractValue: expected JSON object, got {type(data).__name__}")
        return ContractValue.model_validate(data)

    async def get_contract_script(self, address: str) -> ScriptMetadata:
        """Fetch a contract's script and reduce it to its type metadata.

        Bypasses the cache; use ``load_contract_script`` for cached access.
        """
        address = _require_address(address)
        logger.debug("loading_contract_script", extra={"address": address})
        payload = await self._transport.get(
            f"/explorer/contract/{address}/script",
            params={"prim": "1"},
        )
        return ScriptMetadata.from_script_payload(address, parse_payload(payload))

    async def load_contract_script(self, address: str) -> ScriptMetadata:
        """Cached script metadata; concurrent misses share one fetch."""
        address = _require_address(address)
        return await self.script_cache.get_or_load(address, self.get_contract_script)

    def add_cached_script(
        self,
        address: str,
        script: Mapping[str, Any],
        **signatures: Any,
    ) -> ScriptMetadata:
        """Seed the cache from a script obtained elsewhere (e.g. an origination).

        Args:
            address: Contract address
            script: Raw script JSON
            **signatures: ``entrypoints``, ``views``, ``bigmaps``,
                ``bigmap_types`` or ``storage_type`` passed to
                ScriptMetadata.from_script
        """
        address = _require_address(address)
        metadata = ScriptMetadata.from_script(address, script, **signatures)
        self.script_cache.add(address, metadata)
        return metadata

    # --- DEX -------------------------------------------------------------

    async def get_dex_ticker(self, pool_address: str, pool_id: int) -> DexTicker:
        pool_address = _require_address(pool_address)
        payload = await self._transport.get(f"/v1/dex/{pool_address}_{pool_id}/ticker")
        return decode_one(payload, DEX_TICKER_DESCRIPTOR)

    async def list_dex_tickers(self, **params: Any) -> list[DexTicker]:
        payload = await self._transport.get("/v1/dex/tickers", params=_render_params(params))
        return decode(payload, None, DEX_TICKER_DESCRIPTOR, policy=self.config.unknown_column_policy)

    # --- Lifecycle -------------------------------------------------------

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._closed:
            return
        self._closed = True
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> TzproClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
