"""Runtime orchestration components."""

from .pagination import CursorPaginator
from .rest import HTTPTransport, TableRunner, Transport
from .script_cache import ScriptCache, ScriptLoader

__all__ = [
    "CursorPaginator",
    "HTTPTransport",
    "ScriptCache",
    "ScriptLoader",
    "TableRunner",
    "Transport",
]
