"""TzPro Data - typed async client for the TzPro Tezos indexer."""

from .api import Filter, QuerySpec, build_query, render_value
from .clients import TzproClient
from .core import (
    DEFAULT_BASE_URL,
    DEFAULT_RATE_LIMIT_WINDOW,
    MAX_PAGE_SIZE,
    ClientConfig,
    DataError,
    DecodeError,
    DescriptorRegistry,
    FieldDescriptor,
    Operator,
    OrderDirection,
    RateLimitError,
    SemanticKind,
    TransportError,
    TypeDescriptor,
    UnknownColumnPolicy,
    as_rate_limit_error,
    decode,
    decode_one,
    get_descriptor_registry,
    get_type_descriptor,
    is_rate_limited,
    register_type_descriptor,
)
from .models import (
    CONTRACT_DESCRIPTOR,
    DEX_TICKER_DESCRIPTOR,
    Contract,
    ContractValue,
    DexTicker,
    ResultPage,
    ScriptMetadata,
)
from .runtime import CursorPaginator, HTTPTransport, ScriptCache, TableRunner, Transport

__version__ = "0.1.0"

__all__ = [
    # Client
    "TzproClient",
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "MAX_PAGE_SIZE",
    # Queries
    "Filter",
    "QuerySpec",
    "build_query",
    "render_value",
    "Operator",
    "OrderDirection",
    # Descriptors and decoding
    "SemanticKind",
    "UnknownColumnPolicy",
    "FieldDescriptor",
    "TypeDescriptor",
    "DescriptorRegistry",
    "get_descriptor_registry",
    "get_type_descriptor",
    "register_type_descriptor",
    "decode",
    "decode_one",
    # Models
    "CONTRACT_DESCRIPTOR",
    "DEX_TICKER_DESCRIPTOR",
    "Contract",
    "ContractValue",
    "DexTicker",
    "ResultPage",
    "ScriptMetadata",
    # Runtime
    "CursorPaginator",
    "HTTPTransport",
    "ScriptCache",
    "TableRunner",
    "Transport",
    # Errors
    "DEFAULT_RATE_LIMIT_WINDOW",
    "DataError",
    "DecodeError",
    "RateLimitError",
    "TransportError",
    "as_rate_limit_error",
    "is_rate_limited",
]
