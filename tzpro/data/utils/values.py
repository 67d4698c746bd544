"""Dotted-path access into unpacked JSON values.

Paths use ``.`` as separator; list elements are addressed by their index
(``ledger.0.amount``). An empty path addresses the value itself.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from ..core.conversions import ConversionError, to_bigint, to_int64, to_timestamp

ValueWalkerFunc = Callable[[str, Any], None]

_MISSING = object()


def _split(path: str) -> list[str]:
    return [p for p in path.split(".") if p] if path else []


def get_path_value(value: Any, path: str) -> tuple[Any, bool]:
    """Resolve a dotted path.

    Returns:
        (value, True) when the path exists, (None, False) otherwise
    """
    current = value
    for part in _split(path):
        if isinstance(current, dict):
            current = current.get(part, _MISSING)
        elif isinstance(current, list):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                current = _MISSING
        else:
            current = _MISSING
        if current is _MISSING:
            return None, False
    return current, True


def has_path(value: Any, path: str) -> bool:
    return get_path_value(value, path)[1]


def get_path_string(value: Any, path: str) -> str | None:
    found, ok = get_path_value(value, path)
    if not ok or not isinstance(found, str):
        return None
    return found


def get_path_int64(value: Any, path: str) -> int | None:
    found, ok = get_path_value(value, path)
    if not ok or found is None:
        return None
    try:
        return to_int64(found)
    except ConversionError:
        return None


def get_path_big(value: Any, path: str) -> int | None:
    found, ok = get_path_value(value, path)
    if not ok or found is None:
        return None
    try:
        return to_bigint(found)
    except ConversionError:
        return None


def get_path_time(value: Any, path: str) -> datetime | None:
    found, ok = get_path_value(value, path)
    if not ok or found is None:
        return None
    try:
        return to_timestamp(found)
    except ConversionError:
        return None


def walk_value(path: str, value: Any, fn: ValueWalkerFunc) -> None:
    """Call ``fn(path, leaf)`` for every scalar leaf below ``value``, depth first."""
    if isinstance(value, dict):
        for key, child in value.items():
            walk_value(f"{path}.{key}" if path else str(key), child, fn)
    elif isinstance(value, list):
        for index, child in enumerate(value):
            walk_value(f"{path}.{index}" if path else str(index), child, fn)
    else:
        fn(path, value)
