"""Unit tests for QuerySpec and canonical query rendering.

This module tests the immutable builder, filter validation and the
canonical parameter order that makes equal queries serialize identically.
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from tzpro.data.api import Filter, QuerySpec, build_query, render_value
from tzpro.data.core import Operator, OrderDirection
from tzpro.data.models import CONTRACT_DESCRIPTOR


class TestQuerySpecBuilder:
    """Test copy-on-write builder methods."""

    def test_with_methods_do_not_mutate(self):
        """Test every with_* call leaves the receiver untouched."""
        base = QuerySpec(table="contract")
        derived = (
            base.with_filter("creator", "eq", "tz1abc")
            .with_columns("row_id", "address")
            .with_order(OrderDirection.DESC)
            .with_limit(50)
            .with_cursor(10)
        )
        assert base == QuerySpec(table="contract")
        assert base.params() == []
        assert derived.limit == 50
        assert derived.cursor == 10
        assert derived.order is OrderDirection.DESC

    def test_one_query_seeds_independent_copies(self):
        """Test two derivations from one base do not see each other."""
        base = QuerySpec(table="contract").with_limit(10)
        first = base.with_cursor(100)
        second = base.with_cursor(200)
        assert first.cursor == 100
        assert second.cursor == 200
        assert base.cursor == 0

    def test_columns_deduplicated_in_order(self):
        """Test duplicate columns keep their first position."""
        spec = QuerySpec(table="contract").with_columns("address", "row_id", "address")
        assert spec.columns == ("address", "row_id")

    def test_columns_validated_against_descriptor(self):
        """Test unknown columns are rejected when a descriptor is attached."""
        spec = QuerySpec(table="contract", descriptor=CONTRACT_DESCRIPTOR)
        assert spec.with_columns("row_id").columns == ("row_id",)
        with pytest.raises(ValueError, match="Unknown column 'nope'"):
            spec.with_columns("nope")

    def test_empty_table_rejected(self):
        """Test a table name is required."""
        with pytest.raises(ValueError, match="table"):
            QuerySpec(table="")


class TestLimits:
    """Test page size bounds."""

    @pytest.mark.parametrize("n", [1, 500, 1000])
    def test_limit_within_bounds(self, n):
        """Test limits inside [1, max_page_size] are accepted."""
        assert QuerySpec(table="contract").with_limit(n).limit == n

    @pytest.mark.parametrize("n", [0, -1, 1001])
    def test_limit_out_of_bounds(self, n):
        """Test limits outside the bounds are rejected, not clamped."""
        with pytest.raises(ValueError, match="between 1 and 1000"):
            QuerySpec(table="contract").with_limit(n)

    def test_limit_respects_custom_ceiling(self):
        """Test max_page_size lowers the ceiling."""
        spec = QuerySpec(table="contract", max_page_size=10)
        with pytest.raises(ValueError):
            spec.with_limit(11)

    def test_limit_type(self):
        """Test non-integer limits are rejected."""
        with pytest.raises(ValueError):
            QuerySpec(table="contract").with_limit(True)

    def test_negative_cursor(self):
        """Test negative cursors are rejected."""
        with pytest.raises(ValueError, match="cursor"):
            QuerySpec(table="contract").with_cursor(-5)


class TestFilters:
    """Test filter validation and rendering."""

    def test_membership_values_sorted(self):
        """Test membership filters store sorted tokens."""
        flt = Filter.create("address", Operator.IN, ["KT1b", "KT1a", "KT1b"])
        assert flt.value == ("KT1a", "KT1b")
        assert flt.rendered() == "KT1a,KT1b"

    def test_membership_requires_list(self):
        """Test membership filters reject scalars and empty lists."""
        with pytest.raises(ValueError, match="list of values"):
            Filter.create("address", "in", "KT1a")
        with pytest.raises(ValueError, match="at least one"):
            Filter.create("address", "nin", [])

    def test_scalar_operator_rejects_list(self):
        """Test comparison operators need a single value."""
        with pytest.raises(ValueError, match="single value"):
            Filter.create("row_id", "gt", [1, 2])
        with pytest.raises(ValueError, match="single value"):
            Filter.create("row_id", "gt")

    def test_unary_operator(self):
        """Test null checks take no value and render as true."""
        flt = Filter.create("baker", "isNull")
        assert flt.key == "baker.null"
        assert flt.rendered() == "true"
        with pytest.raises(ValueError, match="takes no value"):
            Filter.create("baker", Operator.IS_NULL, "x")

    def test_unknown_operator(self):
        """Test unknown operators are rejected."""
        with pytest.raises(ValueError):
            QuerySpec(table="contract").with_filter("row_id", "between", 1)


class TestCanonicalRendering:
    """Test canonical query parameters."""

    def test_param_order(self):
        """Test filters first, then columns, limit, order and cursor."""
        spec = (
            QuerySpec(table="contract")
            .with_cursor(42)
            .with_limit(100)
            .with_order("asc", "first_seen")
            .with_columns("row_id", "address")
            .with_filter("row_id", "gt", 5)
        )
        path, params = build_query(spec)
        assert path == "/tables/contract"
        assert params == [
            ("row_id.gt", "5"),
            ("columns", "row_id,address"),
            ("limit", "100"),
            ("order", "asc"),
            ("order_by", "first_seen"),
            ("cursor", "42"),
        ]

    def test_filter_insertion_order_irrelevant(self):
        """Test equal filter sets serialize identically."""
        a = (
            QuerySpec(table="contract")
            .with_filter("creator", "eq", "tz1x")
            .with_filter("address", "in", ["KT1b", "KT1a"])
        )
        b = (
            QuerySpec(table="contract")
            .with_filter("address", "in", ["KT1a", "KT1b"])
            .with_filter("creator", "eq", "tz1x")
        )
        assert a.canonical() == b.canonical()
        assert a.canonical() == "address.in=KT1a%2CKT1b&creator.eq=tz1x"

    def test_duplicate_filter_added_once(self):
        """Test repeating an identical condition does not add a second param."""
        once = QuerySpec(table="contract").with_filter("address", "in", ["KT1b", "KT1a"])
        twice = once.with_filter("address", "in", ["KT1a", "KT1b"])
        assert len(twice.filters) == 1
        assert twice.canonical() == once.canonical() == "address.in=KT1a%2CKT1b"
        assert len(twice.with_filter("address", "in", ["KT1c"]).filters) == 2
        scalar = QuerySpec(table="contract").with_filter("row_id", "gt", 5)
        assert scalar.with_filter("row_id", "gt", "5").params() == [("row_id.gt", "5")]

    def test_zero_cursor_omitted(self):
        """Test a start cursor is not sent."""
        assert QuerySpec(table="contract").with_cursor(0).params() == []

    def test_extra_params_sorted_and_replaced(self):
        """Test extra params follow in key order and the last value wins."""
        spec = (
            QuerySpec(table="contract")
            .with_param("z", 1)
            .with_param("a", True)
            .with_param("z", 2)
        )
        assert spec.params() == [("a", "true"), ("z", "2")]


def test_render_value():
    """Test scalar rendering for query strings."""
    assert render_value(True) == "true"
    assert render_value(False) == "false"
    assert render_value(Decimal("1E-7")) == "0.0000001"
    assert render_value(b"\x01\xab") == "01ab"
    assert render_value(OrderDirection.ASC) == "asc"
    assert render_value(datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)) == "2024-01-02T03:04:05Z"
