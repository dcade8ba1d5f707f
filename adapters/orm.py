"""
Django Row Store — Tillman tables backed by the Django ORM.

Settings:
    TILLMAN = {
        "ROW_STORE": "tillman.adapters.orm.DjangoRowStore",
    }

Uses the async ORM API, so it must be awaited from a running event loop
(ASGI views, ``async_to_sync`` in management commands and tests).
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import DatabaseError
from django.forms.models import model_to_dict

from tillman.exceptions import RowStoreError
from tillman.models import HistoryRow, ProductRow, StockRow
from tillman.protocols.rowstore import Predicate, Row
from tillman.records import HISTORY, PRODUCTS, STOCK

logger = logging.getLogger(__name__)

TABLE_MODELS = {
    PRODUCTS: ProductRow,
    STOCK: StockRow,
    HISTORY: HistoryRow,
}


class DjangoRowStore:
    """
    Row store over ProductRow / StockRow / HistoryRow.

    Keeps the read-all / update-one / append semantics of the protocol:
    filtering happens in Python on the full table, ordered by primary key.
    """

    def __init__(self, models: dict | None = None):
        self._models = models or TABLE_MODELS

    def _model(self, table: str):
        try:
            return self._models[table]
        except KeyError:
            raise RowStoreError('UNKNOWN_TABLE', table=table) from None

    async def list_rows(self, table: str, predicate: Predicate | None = None) -> list[Row]:
        model = self._model(table)
        rows = []
        async for obj in model.objects.order_by('pk'):
            row = model_to_dict(obj)
            row['id'] = obj.pk
            if predicate is None or predicate(row):
                rows.append(row)
        return rows

    async def update_row(self, table: str, row_id: Any, patch: Row) -> None:
        model = self._model(table)
        fields = {k: v for k, v in patch.items() if k != 'id'}
        try:
            updated = await model.objects.filter(pk=row_id).aupdate(**fields)
        except DatabaseError as e:
            logger.warning("rowstore.update.failed", extra={"table": table, "row_id": row_id})
            raise RowStoreError('WRITE_FAILED', table=table, row_id=row_id) from e
        if not updated:
            raise RowStoreError('ROW_NOT_FOUND', table=table, row_id=row_id)

    async def append_rows(self, table: str, records: list[Row]) -> list[Any]:
        model = self._model(table)
        objs = [model(**{k: v for k, v in record.items() if k != 'id'}) for record in records]
        try:
            created = await model.objects.abulk_create(objs)
        except DatabaseError as e:
            logger.warning("rowstore.append.failed", extra={"table": table, "count": len(objs)})
            raise RowStoreError('WRITE_FAILED', table=table) from e
        return [obj.pk for obj in created]
