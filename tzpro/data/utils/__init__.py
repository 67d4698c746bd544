"""Utility helpers."""

from .values import (
    ValueWalkerFunc,
    get_path_big,
    get_path_int64,
    get_path_string,
    get_path_time,
    get_path_value,
    has_path,
    walk_value,
)

__all__ = [
    "ValueWalkerFunc",
    "get_path_big",
    "get_path_int64",
    "get_path_string",
    "get_path_time",
    "get_path_value",
    "has_path",
    "walk_value",
]
