"""Columnar decoder for table and object payloads.

Architecture:
    Endpoints return rows in one of two shapes:
    - an array of self-describing JSON objects
    - an array of arrays ("compact rows") plus a column-name header

    Both are decoded through the entity's TypeDescriptor. Header columns are
    resolved once per payload, not once per row, and each array element is
    converted by the column's semantic kind. Fields whose columns are absent
    keep the model's zero values.

Design Decisions:
    - Pure and synchronous: no I/O, safe to call from any task
    - Decimal-preserving JSON parse: floats are read as Decimal so decimal
      columns never round-trip through binary floating point
    - Explicit unknown-column policy: ignored by default, fatal when strict
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .conversions import ConversionError, convert
from .descriptor import FieldDescriptor, TypeDescriptor
from .enums import UnknownColumnPolicy
from .exceptions import DecodeError

logger = logging.getLogger(__name__)


def parse_payload(payload: bytes | str | Any) -> Any:
    """Parse raw payload bytes into JSON values, keeping decimals exact.

    Already-parsed values are returned unchanged.
    """
    if isinstance(payload, bytes | bytearray | memoryview):
        payload = bytes(payload).decode("utf-8")
    if isinstance(payload, str):
        if not payload.strip():
            return None
        try:
            return json.loads(payload, parse_float=Decimal)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Invalid JSON payload: {e}") from e
    return payload


def decode(
    payload: bytes | str | Any,
    columns: Sequence[str] | None,
    descriptor: TypeDescriptor,
    *,
    policy: UnknownColumnPolicy = UnknownColumnPolicy.IGNORE,
) -> list[Any]:
    """Decode a payload into typed rows.

    Args:
        payload: Raw JSON bytes/str or an already parsed JSON value
        columns: Column header for compact rows (ignored for object rows)
        descriptor: Type descriptor of the target entity
        policy: Behavior for header columns the descriptor does not declare

    Returns:
        List of model instances in payload order

    Raises:
        DecodeError: On a wrong top-level shape, an undeclared column under
            the strict policy or a value that does not match its field
    """
    data = parse_payload(payload)
    if data is None:
        return []
    if not isinstance(data, list):
        raise DecodeError(f"{descriptor.model.__name__}: expected JSON array, got {type(data).__name__}")
    if not data:
        return []

    resolved: list[FieldDescriptor | None] | None = None
    passthrough: frozenset[str] | None = None
    rows: list[Any] = []
    for index, row in enumerate(data):
        if isinstance(row, dict):
            if passthrough is None:
                passthrough = _model_keys(descriptor.model)
            rows.append(_decode_object(row, descriptor, passthrough, index))
        elif isinstance(row, list):
            if resolved is None:
                resolved = resolve_columns(columns, descriptor, policy)
            rows.append(_decode_compact(row, resolved, descriptor, index))
        else:
            raise DecodeError(
                f"{descriptor.model.__name__}: row {index} is {type(row).__name__}, "
                "expected object or array",
                row_index=index,
            )
    return rows


def resolve_columns(
    columns: Sequence[str] | None,
    descriptor: TypeDescriptor,
    policy: UnknownColumnPolicy = UnknownColumnPolicy.IGNORE,
) -> list[FieldDescriptor | None]:
    """Resolve a column header against a descriptor.

    Returns:
        One entry per header column; None marks an ignored column
    """
    if not columns:
        raise DecodeError(f"{descriptor.model.__name__}: compact rows require a column header")

    resolved: list[FieldDescriptor | None] = []
    unknown: list[str] = []
    for name in columns:
        fd = descriptor.lookup(name)
        if fd is None:
            if policy is UnknownColumnPolicy.STRICT:
                raise DecodeError(
                    f"{descriptor.model.__name__}: unknown column '{name}'",
                    column=name,
                )
            unknown.append(name)
        resolved.append(fd)
    if unknown:
        logger.debug(
            "decoder_unknown_columns_ignored",
            extra={"model": descriptor.model.__name__, "columns": unknown},
        )
    return resolved


def _decode_compact(
    row: list[Any],
    resolved: list[FieldDescriptor | None],
    descriptor: TypeDescriptor,
    index: int,
) -> Any:
    if len(row) != len(resolved):
        raise DecodeError(
            f"{descriptor.model.__name__}: row {index} has {len(row)} values "
            f"for {len(resolved)} columns",
            row_index=index,
        )
    values: dict[str, Any] = {}
    for fd, raw in zip(resolved, row, strict=True):
        if fd is None:
            continue
        values[fd.attr] = _convert(fd, raw, descriptor, index)
    return _build(descriptor, values, index)


def _decode_object(
    row: dict[str, Any],
    descriptor: TypeDescriptor,
    passthrough: frozenset[str],
    index: int,
) -> Any:
    values: dict[str, Any] = {}
    for key, raw in row.items():
        fd = descriptor.lookup(key)
        if fd is not None:
            values[fd.attr] = _convert(fd, raw, descriptor, index)
        elif key in passthrough:
            values[key] = raw
    return _build(descriptor, values, index)


def _convert(fd: FieldDescriptor, raw: Any, descriptor: TypeDescriptor, index: int) -> Any:
    try:
        return convert(fd.kind, raw)
    except ConversionError as e:
        raise DecodeError(
            f"{descriptor.model.__name__}.{fd.attr}: column '{fd.column}' row {index}: {e}",
            column=fd.column,
            row_index=index,
        ) from e


def _model_keys(model: type) -> frozenset[str]:
    """Field names and aliases a model accepts outside its descriptor."""
    fields = getattr(model, "model_fields", None)
    if not fields:
        return frozenset()
    keys: set[str] = set(fields)
    for info in fields.values():
        if info.alias:
            keys.add(info.alias)
    return frozenset(keys)


def _build(descriptor: TypeDescriptor, values: dict[str, Any], index: int) -> Any:
    model = descriptor.model
    try:
        if isinstance(model, type) and issubclass(model, BaseModel):
            return model.model_validate(values)
        return model(**values)
    except (PydanticValidationError, TypeError, ValueError) as e:
        raise DecodeError(f"{model.__name__}: row {index} is invalid: {e}", row_index=index) from e


def decode_one(payload: bytes | str | Any, descriptor: TypeDescriptor) -> Any:
    """Decode a single self-describing JSON object.

    Raises:
        DecodeError: If the payload is not a JSON object
    """
    data = parse_payload(payload)
    if not isinstance(data, dict):
        raise DecodeError(
            f"{descriptor.model.__name__}: expected JSON object, got {type(data).__name__}"
        )
    return _decode_object(data, descriptor, _model_keys(descriptor.model), 0)
