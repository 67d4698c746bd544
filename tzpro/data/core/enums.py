"""Core enumerations shared by the query builder and the decoder.

Architecture:
    This module defines the standardized enums used throughout the library.
    String enums keep wire tokens and Python identifiers in one place so the
    builder and the decoder agree on every spelling.

Key Types:
    - SemanticKind: How a column value is converted into a Python value
    - Operator: Filter operators and their query-string tokens
    - OrderDirection: Sort direction of a table query
    - UnknownColumnPolicy: What the decoder does with undeclared columns
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any


class SemanticKind(str, Enum):
    """Semantic kind of a table column.

    ``BIGINT`` and ``DECIMAL`` are always parsed from their string form when
    the server sends one, so values beyond the 53-bit safe integer range keep
    full precision.
    """

    STRING = "string"
    INT64 = "int64"
    BIGINT = "bigint"
    DECIMAL = "decimal"
    FLOAT = "float"
    BOOL = "bool"
    TIMESTAMP = "timestamp"
    HEX = "hex"
    OBJECT = "object"

    @property
    def zero_value(self) -> Any:
        """Value a field of this kind holds when its column was not decoded."""
        return _ZERO_VALUES[self]


_ZERO_VALUES: dict[SemanticKind, Any] = {
    SemanticKind.STRING: "",
    SemanticKind.INT64: 0,
    SemanticKind.BIGINT: 0,
    SemanticKind.DECIMAL: Decimal("0"),
    SemanticKind.FLOAT: 0.0,
    SemanticKind.BOOL: False,
    SemanticKind.TIMESTAMP: None,
    SemanticKind.HEX: b"",
    SemanticKind.OBJECT: None,
}


class Operator(str, Enum):
    """Filter operators supported by table endpoints.

    The enum value is the token used in the query string
    (``<field>.<token>=<value>``).
    """

    EQ = "eq"
    NEQ = "ne"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    IN = "in"
    NOT_IN = "nin"
    CONTAINS = "contains"
    IS_NULL = "null"
    IS_NOT_NULL = "notnull"

    @property
    def is_membership(self) -> bool:
        return self in (Operator.IN, Operator.NOT_IN)

    @property
    def is_unary(self) -> bool:
        return self in (Operator.IS_NULL, Operator.IS_NOT_NULL)

    @classmethod
    def parse(cls, value: Operator | str) -> Operator:
        """Resolve an operator from an enum member, wire token or camelCase name.

        Accepts ``"neq"`` and ``"ne"``, ``"notIn"`` and ``"nin"``,
        ``"isNull"`` and ``"null"`` and so on.

        Raises:
            ValueError: If the value names no known operator
        """
        if isinstance(value, Operator):
            return value
        token = str(value).strip()
        if token in _OPERATOR_ALIASES:
            return _OPERATOR_ALIASES[token]
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"Unknown filter operator: {value!r}") from None


_OPERATOR_ALIASES: dict[str, Operator] = {
    "neq": Operator.NEQ,
    "notIn": Operator.NOT_IN,
    "not_in": Operator.NOT_IN,
    "isNull": Operator.IS_NULL,
    "is_null": Operator.IS_NULL,
    "isNotNull": Operator.IS_NOT_NULL,
    "is_not_null": Operator.IS_NOT_NULL,
}


class OrderDirection(str, Enum):
    """Sort direction for table queries."""

    ASC = "asc"
    DESC = "desc"


class UnknownColumnPolicy(str, Enum):
    """Decoder behavior for header columns missing from a type descriptor.

    IGNORE keeps decoding forward compatible when the server adds columns.
    STRICT turns every undeclared column into a DecodeError.
    """

    IGNORE = "ignore"
    STRICT = "strict"
