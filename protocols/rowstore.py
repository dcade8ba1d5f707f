"""
Row Store Protocol — Interface for the tabular backing store.

Tillman defines this protocol; a spreadsheet client, the Django ORM or an
in-memory dict implements it. The store offers no atomicity across calls
and no compare-and-swap; Tillman serializes its own writes.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

Row = dict[str, Any]
Predicate = Callable[[Row], bool]


@runtime_checkable
class RowStore(Protocol):
    """
    Protocol for the row store.

    Every row carries an ``id`` key assigned by the store. Rows are
    returned in stable insertion order.
    """

    async def list_rows(self, table: str, predicate: Predicate | None = None) -> list[Row]:
        """
        Read all rows of a table.

        Args:
            table: Table name ("products", "stock", "history")
            predicate: Optional filter applied to each row

        Returns:
            List of row dicts (copies; mutating them does not write)
        """
        ...

    async def update_row(self, table: str, row_id: Any, patch: Row) -> None:
        """
        Overwrite some fields of one row.

        Raises:
            RowStoreError: If the row does not exist or the write fails
        """
        ...

    async def append_rows(self, table: str, records: list[Row]) -> list[Any]:
        """
        Append rows at the end of a table.

        Returns:
            Ids assigned to the new rows
        """
        ...
