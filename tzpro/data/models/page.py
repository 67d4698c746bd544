"""Result page model."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ResultPage(Generic[T]):
    """One decoded page of a table query.

    Attributes:
        rows: Decoded rows in server order
        columns: Column header used to decode the rows
        cursor_attr: Row attribute holding the row identifier
    """

    rows: tuple[T, ...] = ()
    columns: tuple[str, ...] = ()
    cursor_attr: str | None = "row_id"

    @classmethod
    def of(
        cls,
        rows: Sequence[T],
        columns: Sequence[str] = (),
        cursor_attr: str | None = "row_id",
    ) -> ResultPage[T]:
        return cls(rows=tuple(rows), columns=tuple(columns), cursor_attr=cursor_attr)

    def cursor(self) -> int:
        """Identifier of the last row, or 0 for an empty page."""
        if not self.rows or not self.cursor_attr:
            return 0
        return int(getattr(self.rows[-1], self.cursor_attr) or 0)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[T]:
        return iter(self.rows)

    def __bool__(self) -> bool:
        return bool(self.rows)
