"""Query construction API."""

from .query import Filter, QuerySpec, build_query, render_value

__all__ = [
    "Filter",
    "QuerySpec",
    "build_query",
    "render_value",
]
