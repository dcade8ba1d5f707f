"""
In-memory Row Store — dict-backed tables for development and tests.

Usage:
    store = InMemoryRowStore()
    await store.append_rows('stock', [{'product_id': 'netflix', 'credential': 'a|b'}])

Optional knobs for exercising interleavings and failures:
    InMemoryRowStore(latency=0)         # yield to the loop on every call
    store.fail_writes_after = 2          # third update_row raises RowStoreError
"""

from __future__ import annotations

import asyncio
import copy
from itertools import count
from typing import Any

from tillman.exceptions import RowStoreError
from tillman.protocols.rowstore import Predicate, Row
from tillman.records import HISTORY, PRODUCTS, STOCK

DEFAULT_TABLES = (PRODUCTS, STOCK, HISTORY)


class InMemoryRowStore:
    """
    Row store kept in process memory.

    Rows keep insertion order; ``id`` is an increasing integer per table.
    Not shared between processes and lost on restart.
    """

    def __init__(self, tables=DEFAULT_TABLES, latency: float | None = None):
        self._tables: dict[str, dict[Any, Row]] = {name: {} for name in tables}
        self._ids = {name: count(1) for name in tables}
        self.latency = latency
        self.fail_writes_after: int | None = None
        self.writes = 0

    async def _io(self):
        if self.latency is not None:
            await asyncio.sleep(self.latency)

    def _table(self, table: str) -> dict[Any, Row]:
        try:
            return self._tables[table]
        except KeyError:
            raise RowStoreError('UNKNOWN_TABLE', table=table) from None

    async def list_rows(self, table: str, predicate: Predicate | None = None) -> list[Row]:
        rows = self._table(table)
        await self._io()
        return [
            copy.deepcopy(row) for row in rows.values()
            if predicate is None or predicate(row)
        ]

    async def update_row(self, table: str, row_id: Any, patch: Row) -> None:
        rows = self._table(table)
        await self._io()
        if self.fail_writes_after is not None and self.writes >= self.fail_writes_after:
            raise RowStoreError('WRITE_FAILED', table=table, row_id=row_id)
        if row_id not in rows:
            raise RowStoreError('ROW_NOT_FOUND', table=table, row_id=row_id)
        rows[row_id].update({k: v for k, v in patch.items() if k != 'id'})
        self.writes += 1

    async def append_rows(self, table: str, records: list[Row]) -> list[Any]:
        rows = self._table(table)
        await self._io()
        ids = []
        for record in records:
            row_id = next(self._ids[table])
            rows[row_id] = {**copy.deepcopy(record), 'id': row_id}
            ids.append(row_id)
        return ids

    def dump(self, table: str) -> list[Row]:
        """Synchronous snapshot of a table (for tests and debugging)."""
        return [copy.deepcopy(row) for row in self._table(table).values()]
