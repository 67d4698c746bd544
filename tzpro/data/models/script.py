"""Contract script metadata model.

Scripts are immutable once deployed, so the metadata derived from them is a
frozen model that can be cached and shared between callers. Micheline type
trees are carried as opaque JSON values.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ..core.exceptions import DecodeError

# Sections of a script's code that hold implementation bodies, not types
_CODE_BODY_PRIMS = frozenset({"code", "view"})

_MAPPING_FIELDS = ("entrypoints", "views", "bigmap_names", "bigmap_types", "bigmap_types_by_id")


class ScriptMetadata(BaseModel):
    """Type information of a deployed contract.

    Code and view bodies are dropped on construction; only signatures and
    bigmap typing survive.
    """

    address: str = Field(..., min_length=1)
    param_type: Any = None
    storage_type: Any = None
    entrypoints: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    views: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    bigmap_names: Mapping[str, int] = Field(default_factory=dict, validate_default=True)
    bigmap_types: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    bigmap_types_by_id: Mapping[int, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator(*_MAPPING_FIELDS)
    @classmethod
    def freeze_mapping(cls, v: Mapping[Any, Any]) -> Mapping[Any, Any]:
        """Wrap lookup tables in read-only views; instances are shared by the cache."""
        return MappingProxyType(dict(v))

    @field_serializer(*_MAPPING_FIELDS)
    def dump_mapping(self, v: Mapping[Any, Any]) -> dict[Any, Any]:
        return dict(v)

    model_config = ConfigDict(frozen=True)

    def types(self) -> tuple[Any, Any, Mapping[str, Any], Mapping[int, Any]]:
        """Return parameter type, storage type, entrypoints and bigmap types by id."""
        return self.param_type, self.storage_type, self.entrypoints, self.bigmap_types_by_id

    def bigmap_type(self, bigmap_id: int) -> Any:
        """Value type of a bigmap owned by this contract, or None."""
        return self.bigmap_types_by_id.get(bigmap_id)

    @classmethod
    def from_script(
        cls,
        address: str,
        script: Mapping[str, Any] | None,
        *,
        entrypoints: Mapping[str, Any] | None = None,
        views: Mapping[str, Any] | None = None,
        bigmaps: Mapping[str, int] | None = None,
        bigmap_types: Mapping[str, Any] | None = None,
        storage_type: Any = None,
    ) -> ScriptMetadata:
        """Build metadata from a raw script and its precomputed signatures.

        Args:
            address: Contract address
            script: Script JSON (``{"code": [...], "storage": ...}``)
            entrypoints: Entrypoint name -> signature
            views: View name -> signature
            bigmaps: Bigmap name -> bigmap id
            bigmap_types: Bigmap name -> value type
            storage_type: Storage type override (defaults to the code section)

        Raises:
            DecodeError: If the script is not a JSON object with a code list
        """
        sections = _type_sections(script)
        names = _bigmap_ids(bigmaps)
        types = dict(bigmap_types or {})
        by_id = {names[name]: typ for name, typ in types.items() if name in names}
        return cls(
            address=address,
            param_type=sections.get("parameter"),
            storage_type=storage_type if storage_type is not None else sections.get("storage"),
            entrypoints=dict(entrypoints or {}),
            views=dict(views or {}),
            bigmap_names=names,
            bigmap_types=types,
            bigmap_types_by_id=by_id,
        )

    @classmethod
    def from_script_payload(cls, address: str, payload: Mapping[str, Any]) -> ScriptMetadata:
        """Build metadata from a contract script endpoint response.

        Raises:
            DecodeError: If the payload is not a JSON object
        """
        if not isinstance(payload, Mapping):
            raise DecodeError(f"ScriptMetadata: expected JSON object, got {type(payload).__name__}")
        return cls.from_script(
            address,
            payload.get("script"),
            entrypoints=payload.get("entrypoints"),
            views=payload.get("views"),
            bigmaps=payload.get("bigmaps"),
            bigmap_types=payload.get("bigmap_types"),
        )


def _bigmap_ids(bigmaps: Mapping[str, Any] | None) -> dict[str, int]:
    names: dict[str, int] = {}
    for name, bigmap_id in (bigmaps or {}).items():
        if bigmap_id is None:
            continue
        try:
            names[str(name)] = int(bigmap_id)
        except (TypeError, ValueError):
            raise DecodeError(
                f"ScriptMetadata: invalid bigmap id {bigmap_id!r} for '{name}'"
            ) from None
    return names


def _type_sections(script: Mapping[str, Any] | None) -> dict[str, Any]:
    """Collect ``parameter`` and ``storage`` types from a script's code list."""
    if script is None:
        return {}
    if not isinstance(script, Mapping):
        raise DecodeError(f"ScriptMetadata: expected script object, got {type(script).__name__}")
    code = script.get("code") or []
    if not isinstance(code, list):
        raise DecodeError("ScriptMetadata: script code must be a list")

    sections: dict[str, Any] = {}
    for item in code:
        if not isinstance(item, Mapping):
            continue
        prim = item.get("prim")
        if prim in _CODE_BODY_PRIMS:
            continue
        args = item.get("args") or []
        if prim in ("parameter", "storage") and args:
            sections[prim] = args[0]
    return sections
