"""Core components."""

from .config import DEFAULT_BASE_URL, MAX_PAGE_SIZE, ClientConfig
from .decoder import decode, decode_one, parse_payload, resolve_columns
from .descriptor import (
    DescriptorRegistry,
    FieldDescriptor,
    TypeDescriptor,
    get_descriptor_registry,
    get_type_descriptor,
    register_type_descriptor,
)
from .enums import Operator, OrderDirection, SemanticKind, UnknownColumnPolicy
from .exceptions import (
    DEFAULT_RATE_LIMIT_WINDOW,
    DataError,
    DecodeError,
    RateLimitError,
    TransportError,
    as_rate_limit_error,
    is_rate_limited,
    parse_retry_after,
)

__all__ = [
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "MAX_PAGE_SIZE",
    "decode",
    "decode_one",
    "parse_payload",
    "resolve_columns",
    "DescriptorRegistry",
    "FieldDescriptor",
    "TypeDescriptor",
    "get_descriptor_registry",
    "get_type_descriptor",
    "register_type_descriptor",
    "Operator",
    "OrderDirection",
    "SemanticKind",
    "UnknownColumnPolicy",
    "DEFAULT_RATE_LIMIT_WINDOW",
    "DataError",
    "DecodeError",
    "RateLimitError",
    "TransportError",
    "as_rate_limit_error",
    "is_rate_limited",
    "parse_retry_after",
]
