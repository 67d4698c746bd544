"""Conversion of JSON values into Python values by semantic kind.

Each kind has a single canonical parse rule. Values are never coerced across
structural kinds: an object where a scalar is expected, or a scalar where an
object is expected, always fails.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from .enums import SemanticKind

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
MAX_SAFE_INTEGER = 2**53

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_HEX_RE = re.compile(r"^(?:[0-9a-f]{2})*$")


class ConversionError(ValueError):
    """A single value does not match its semantic kind."""

    pass


def _describe(value: Any) -> str:
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float | Decimal) and not isinstance(value, bool)


def to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise ConversionError(f"expected string, got {_describe(value)}")


def _integral(value: Any) -> int:
    """Shared integer rule: JSON integers, safe integral numbers, digit strings."""
    if isinstance(value, bool):
        raise ConversionError("expected integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not _INTEGER_RE.match(text):
            raise ConversionError(f"expected integer string, got {value!r}")
        return int(text)
    if isinstance(value, float | Decimal):
        if isinstance(value, Decimal):
            fractional = value != value.to_integral_value()
        else:
            fractional = not value.is_integer()
        if fractional:
            raise ConversionError(f"expected integer, got fractional number {value}")
        # Numbers above 2^53 already lost precision in transit
        if abs(value) > MAX_SAFE_INTEGER:
            raise ConversionError(f"integer {value} exceeds safe range, send it as string")
        return int(value)
    raise ConversionError(f"expected integer, got {_describe(value)}")


def to_int64(value: Any) -> int:
    result = _integral(value)
    if not INT64_MIN <= result <= INT64_MAX:
        raise ConversionError(f"value {value!r} overflows int64")
    return result


def to_bigint(value: Any) -> int:
    return _integral(value)


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ConversionError("expected decimal, got bool")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ConversionError(f"expected decimal string, got {value!r}") from None
        if not result.is_finite():
            raise ConversionError(f"expected finite decimal, got {value!r}")
        return result
    raise ConversionError(f"expected decimal, got {_describe(value)}")


def to_float(value: Any) -> float:
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise ConversionError(f"expected numeric string, got {value!r}") from None
    raise ConversionError(f"expected number, got {_describe(value)}")


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ConversionError(f"expected bool, got {_describe(value)}")


def to_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string or a Unix epoch in milliseconds."""
    if _is_number(value):
        try:
            return datetime.fromtimestamp(float(value) / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            raise ConversionError(f"timestamp {value!r} out of range") from None
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ConversionError(f"expected ISO-8601 timestamp, got {value!r}") from None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)
    raise ConversionError(f"expected timestamp, got {_describe(value)}")


def to_hex_bytes(value: Any) -> bytes:
    if not isinstance(value, str):
        raise ConversionError(f"expected hex string, got {_describe(value)}")
    if not _HEX_RE.match(value):
        raise ConversionError(f"expected lowercase even-length hex, got {value[:32]!r}")
    return bytes.fromhex(value)


def to_object(value: Any) -> Any:
    if isinstance(value, dict | list):
        return value
    raise ConversionError(f"expected object or array, got {_describe(value)}")


CONVERTERS: dict[SemanticKind, Callable[[Any], Any]] = {
    SemanticKind.STRING: to_string,
    SemanticKind.INT64: to_int64,
    SemanticKind.BIGINT: to_bigint,
    SemanticKind.DECIMAL: to_decimal,
    SemanticKind.FLOAT: to_float,
    SemanticKind.BOOL: to_bool,
    SemanticKind.TIMESTAMP: to_timestamp,
    SemanticKind.HEX: to_hex_bytes,
    SemanticKind.OBJECT: to_object,
}


def convert(kind: SemanticKind, value: Any) -> Any:
    """Convert a JSON value to the Python value of ``kind``.

    JSON null yields the kind's zero value.

    Raises:
        ConversionError: If the value does not match the kind
    """
    if value is None:
        return kind.zero_value
    return CONVERTERS[kind](value)
