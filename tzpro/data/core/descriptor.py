"""Type descriptors: static column-to-field maps for entity models.

Architecture:
    Every entity that can be decoded from a table endpoint registers exactly
    one TypeDescriptor: an ordered list of (column, semantic kind, attribute)
    entries. The decoder resolves header columns through the descriptor's
    precomputed lookup instead of inspecting the model per row.

Design Decisions:
    - Frozen dataclasses: a descriptor never changes after it is built
    - Explicit registration: descriptors are declared next to their model
    - Registry refuses a second, different descriptor for the same model

Example:
    >>> ROW_DESCRIPTOR = TypeDescriptor.build(
    ...     BigmapKey,
    ...     [
    ...         FieldDescriptor("row_id", SemanticKind.INT64),
    ...         FieldDescriptor("key_hash", SemanticKind.STRING),
    ...     ],
    ... )
    >>> register_type_descriptor(ROW_DESCRIPTOR)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .enums import SemanticKind


@dataclass(frozen=True)
class FieldDescriptor:
    """One column of an entity.

    Attributes:
        column: Column name used by the server
        kind: Semantic kind driving value conversion
        attr: Model attribute receiving the value (defaults to column)
    """

    column: str
    kind: SemanticKind
    attr: str = ""

    def __post_init__(self) -> None:
        if not self.column:
            raise ValueError("FieldDescriptor column must not be empty")
        if not self.attr:
            object.__setattr__(self, "attr", self.column)


@dataclass(frozen=True)
class TypeDescriptor:
    """Ordered, immutable column map for one entity model.

    Attributes:
        model: Entity class built from decoded values
        fields: Field descriptors in column order
        cursor_attr: Attribute holding the row identifier used as cursor,
            or None for entities that are not paginated
    """

    model: type
    fields: tuple[FieldDescriptor, ...]
    cursor_attr: str | None = "row_id"
    _by_column: Mapping[str, FieldDescriptor] = field(
        default_factory=dict, init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        by_column: dict[str, FieldDescriptor] = {}
        for fd in self.fields:
            if fd.column in by_column:
                raise ValueError(
                    f"Duplicate column '{fd.column}' in descriptor for {self.model.__name__}"
                )
            by_column[fd.column] = fd
        object.__setattr__(self, "_by_column", MappingProxyType(by_column))

    @classmethod
    def build(
        cls,
        model: type,
        fields: Iterable[FieldDescriptor],
        *,
        cursor_attr: str | None = "row_id",
    ) -> TypeDescriptor:
        return cls(model=model, fields=tuple(fields), cursor_attr=cursor_attr)

    @property
    def columns(self) -> tuple[str, ...]:
        """Column names in declaration order."""
        return tuple(fd.column for fd in self.fields)

    @property
    def cursor_column(self) -> str | None:
        """Column carrying the cursor attribute, or None."""
        if not self.cursor_attr:
            return None
        for fd in self.fields:
            if fd.attr == self.cursor_attr:
                return fd.column
        return None

    def lookup(self, column: str) -> FieldDescriptor | None:
        """Resolve a column name, or None if the model does not declare it."""
        return self._by_column.get(column)

    def __contains__(self, column: object) -> bool:
        return column in self._by_column

    def zero_values(self) -> dict[str, Any]:
        """Attribute -> zero value for every declared field."""
        return {fd.attr: fd.kind.zero_value for fd in self.fields}


class DescriptorRegistry:
    """Maps entity models to their TypeDescriptor."""

    def __init__(self) -> None:
        self._descriptors: dict[type, TypeDescriptor] = {}

    def register(self, descriptor: TypeDescriptor) -> TypeDescriptor:
        """Register a descriptor.

        Registering an equal descriptor again is a no-op.

        Raises:
            ValueError: If a different descriptor is already registered for
                the same model
        """
        existing = self._descriptors.get(descriptor.model)
        if existing is not None:
            if existing != descriptor:
                raise ValueError(
                    f"Type descriptor for {descriptor.model.__name__} is already registered"
                )
            return existing
        self._descriptors[descriptor.model] = descriptor
        return descriptor

    def get(self, model: type) -> TypeDescriptor:
        """Get the descriptor for a model.

        Raises:
            KeyError: If the model has no registered descriptor
        """
        try:
            return self._descriptors[model]
        except KeyError:
            raise KeyError(f"No type descriptor registered for {model.__name__}") from None

    def __contains__(self, model: object) -> bool:
        return model in self._descriptors


_default_registry = DescriptorRegistry()


def get_descriptor_registry() -> DescriptorRegistry:
    """Return the process-wide descriptor registry."""
    return _default_registry


def register_type_descriptor(descriptor: TypeDescriptor) -> TypeDescriptor:
    return _default_registry.register(descriptor)


def get_type_descriptor(model: type) -> TypeDescriptor:
    return _default_registry.get(model)
