"""Precise unit tests for TableRunner.

Tests focus on query rendering, column defaults and decoding into pages.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from tzpro.data.api import QuerySpec
from tzpro.data.core import DecodeError, UnknownColumnPolicy
from tzpro.data.models import CONTRACT_DESCRIPTOR, Contract
from tzpro.data.runtime.rest import TableRunner, Transport


class TestTableRunner:
    """Test TableRunner execution."""

    @pytest.fixture
    def mock_transport(self):
        """Create mock transport."""
        transport = MagicMock(spec=Transport)
        transport.get = AsyncMock(return_value=b'[[5,"KT1abc"],[9,"KT1def"]]')
        return transport

    @pytest.fixture
    def runner(self, mock_transport):
        """Create TableRunner with mock transport."""
        return TableRunner(mock_transport)

    @pytest.mark.asyncio
    async def test_run_decodes_page(self, runner, mock_transport):
        """Test a table query is rendered, fetched and decoded."""
        spec = (
            QuerySpec(table="contract", descriptor=CONTRACT_DESCRIPTOR)
            .with_columns("row_id", "address")
            .with_limit(2)
        )

        page = await runner.run(spec)

        mock_transport.get.assert_called_once_with(
            "/tables/contract",
            params=[("columns", "row_id,address"), ("limit", "2")],
        )
        assert [c.address for c in page] == ["KT1abc", "KT1def"]
        assert page.columns == ("row_id", "address")
        assert page.cursor() == 9
        assert isinstance(page.rows[0], Contract)

    @pytest.mark.asyncio
    async def test_run_adds_cursor_column(self, runner, mock_transport):
        """Test the cursor column is requested when the query leaves it out."""
        mock_transport.get.return_value = b'[["KT1abc",5],["KT1def",9]]'
        spec = QuerySpec(table="contract", descriptor=CONTRACT_DESCRIPTOR).with_columns("address")

        page = await runner.run(spec)

        params = dict(mock_transport.get.call_args.kwargs["params"])
        assert params["columns"] == "address,row_id"
        assert page.columns == ("address", "row_id")
        assert page.cursor() == 9
        assert spec.columns == ("address",)

    @pytest.mark.asyncio
    async def test_run_requests_all_columns_by_default(self, runner, mock_transport):
        """Test an empty column list expands to every descriptor column."""
        mock_transport.get.return_value = b"[]"

        page = await runner.run(QuerySpec(table="contract"), descriptor=CONTRACT_DESCRIPTOR)

        params = dict(mock_transport.get.call_args.kwargs["params"])
        assert params["columns"] == ",".join(CONTRACT_DESCRIPTOR.columns)
        assert len(page) == 0
        assert page.cursor() == 0

    @pytest.mark.asyncio
    async def test_run_without_descriptor(self, runner):
        """Test a spec without descriptor is rejected."""
        with pytest.raises(ValueError, match="No type descriptor"):
            await runner.run(QuerySpec(table="contract"))

    @pytest.mark.asyncio
    async def test_strict_policy_override(self, runner, mock_transport):
        """Test the per-call policy wins over the runner default."""
        spec = QuerySpec(table="contract").with_columns("row_id", "brand_new")
        mock_transport.get.return_value = b"[[1,2]]"

        lenient = await runner.run(spec, descriptor=CONTRACT_DESCRIPTOR)
        assert lenient.rows[0].row_id == 1

        with pytest.raises(DecodeError, match="brand_new"):
            await runner.run(
                spec,
                descriptor=CONTRACT_DESCRIPTOR,
                policy=UnknownColumnPolicy.STRICT,
            )
