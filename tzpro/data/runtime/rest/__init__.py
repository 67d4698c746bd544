"""REST runtime abstractions."""

from .runner import TableRunner
from .transport import HTTPTransport, QueryParams, Transport

__all__ = [
    "HTTPTransport",
    "QueryParams",
    "TableRunner",
    "Transport",
]
