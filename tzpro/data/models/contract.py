"""Contract data models.

Contract rows come from the ``contract`` table (compact rows) and from the
explorer contract endpoint (a self-describing object). Both are decoded
through CONTRACT_DESCRIPTOR; object-only fields such as call statistics pass
through model validation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ..core.descriptor import FieldDescriptor, TypeDescriptor, register_type_descriptor
from ..core.enums import SemanticKind
from ..utils.values import (
    ValueWalkerFunc,
    get_path_big,
    get_path_int64,
    get_path_string,
    get_path_time,
    get_path_value,
    has_path,
    walk_value,
)

M = TypeVar("M", bound=BaseModel)


class Contract(BaseModel):
    """Smart contract account."""

    row_id: int = 0
    account_id: int = 0
    address: str = ""
    creator_id: int = 0
    creator: str = ""
    baker_id: int = 0
    baker: str = ""
    first_seen: int = 0
    last_seen: int = 0
    first_seen_time: datetime | None = None
    last_seen_time: datetime | None = None
    storage_size: int = 0
    storage_paid: int = 0
    total_fees_used: float = 0.0
    script: bytes = b""
    storage: bytes = b""
    iface_hash: str = ""
    code_hash: str = ""
    storage_hash: str = ""
    features: str = ""
    interfaces: str = ""
    call_stats: dict[str, int] = Field(default_factory=dict)
    n_calls_in: int = 0
    n_calls_out: int = 0
    n_calls_failed: int = 0
    bigmaps: dict[str, int] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def feature_list(self) -> list[str]:
        return [f for f in self.features.split(",") if f]

    @property
    def interface_list(self) -> list[str]:
        return [i for i in self.interfaces.split(",") if i]


# Columns served by the contract table; baker, fees and call statistics are
# only present on the explorer object.
CONTRACT_DESCRIPTOR = register_type_descriptor(
    TypeDescriptor.build(
        Contract,
        [
            FieldDescriptor("row_id", SemanticKind.INT64),
            FieldDescriptor("account_id", SemanticKind.INT64),
            FieldDescriptor("address", SemanticKind.STRING),
            FieldDescriptor("creator_id", SemanticKind.INT64),
            FieldDescriptor("creator", SemanticKind.STRING),
            FieldDescriptor("first_seen", SemanticKind.INT64),
            FieldDescriptor("last_seen", SemanticKind.INT64),
            FieldDescriptor("first_seen_time", SemanticKind.TIMESTAMP),
            FieldDescriptor("last_seen_time", SemanticKind.TIMESTAMP),
            FieldDescriptor("storage_size", SemanticKind.INT64),
            FieldDescriptor("storage_paid", SemanticKind.INT64),
            FieldDescriptor("script", SemanticKind.HEX),
            FieldDescriptor("storage", SemanticKind.HEX),
            FieldDescriptor("iface_hash", SemanticKind.STRING),
            FieldDescriptor("code_hash", SemanticKind.STRING),
            FieldDescriptor("storage_hash", SemanticKind.STRING),
            FieldDescriptor("features", SemanticKind.STRING),
            FieldDescriptor("interfaces", SemanticKind.STRING),
        ],
    )
)


class ContractValue(BaseModel):
    """Unpacked contract storage or call argument.

    ``value`` holds the unpacked JSON form, ``prim`` the Micheline form when
    the request asked for it.
    """

    value: Any = None
    prim: Any = None

    model_config = ConfigDict(frozen=True)

    def is_prim(self) -> bool:
        """True if the unpacked value itself is a Micheline node."""
        return isinstance(self.value, dict) and "prim" in self.value

    def as_prim(self) -> dict[str, Any] | None:
        """Micheline form of the value, or None when not available."""
        if isinstance(self.prim, dict) and self.prim:
            return self.prim
        if self.is_prim():
            return self.value
        return None

    def has(self, path: str) -> bool:
        return has_path(self.value, path)

    def get_value(self, path: str) -> Any:
        return get_path_value(self.value, path)[0]

    def get_string(self, path: str) -> str | None:
        return get_path_string(self.value, path)

    def get_int64(self, path: str) -> int | None:
        return get_path_int64(self.value, path)

    def get_big(self, path: str) -> int | None:
        """Arbitrary precision integer at ``path`` (Micheline nat/int/mutez)."""
        return get_path_big(self.value, path)

    def get_time(self, path: str) -> datetime | None:
        return get_path_time(self.value, path)

    def get_address(self, path: str) -> str | None:
        return get_path_string(self.value, path)

    def walk(self, path: str, fn: ValueWalkerFunc) -> None:
        """Visit every leaf below ``path``; a missing path visits nothing."""
        found, ok = get_path_value(self.value, path)
        if not ok:
            return
        walk_value(path, found, fn)

    def unmarshal(self, model: type[M]) -> M:
        """Validate the unpacked value into ``model``."""
        return model.model_validate(self.value)
