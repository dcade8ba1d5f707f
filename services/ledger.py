"""
Stock ledger — item status transitions (reserve, release, finalize, sweep).

The row store has no compare-and-swap, so every read-decide-write sequence
runs behind one process-wide gate. asyncio.Lock wakes waiters in arrival
order, which gives the FIFO ordering the callers rely on.
"""

import asyncio
import logging
from collections import Counter
from typing import Callable, Collection, Iterable

from tillman.exceptions import RowStoreError, StockError
from tillman.models.enums import ItemStatus
from tillman.protocols.rowstore import RowStore
from tillman.records import STOCK, StockItem, SweepResult

logger = logging.getLogger('tillman')

LiveIds = Collection[str] | Callable[[], Collection[str]]


class StockLedger:
    """
    Sole writer of stock item status.

    Transitions:
        AVAILABLE -> HELD        reserve()
        HELD -> AVAILABLE        release(), sweep_orphans()
        HELD -> SOLD             finalize()
    """

    def __init__(self, store: RowStore):
        self.store = store
        self._gate = asyncio.Lock()

    async def _items(self, predicate=None) -> list[StockItem]:
        rows = await self.store.list_rows(STOCK)
        items = []
        for row in rows:
            try:
                item = StockItem.from_row(row)
            except StockError as e:
                logger.warning("stock.row.malformed", extra={"row_id": row.get('id'), **e.data})
                continue
            if predicate is None or predicate(item):
                items.append(item)
        return items

    async def reserve(self, product_id: str, quantity: int, reservation_id: str) -> list[StockItem]:
        """
        Hold ``quantity`` available items of a product for a reservation.

        Items are taken in row order. Writes are sequential; if one fails
        the batch stops and PARTIAL_WRITE is raised. The caller must then
        release(reservation_id) before reporting the failure.

        Returns:
            The held items

        Raises:
            StockError('INVALID_QUANTITY'): quantity <= 0
            StockError('INSUFFICIENT_STOCK'): fewer than quantity available
            StockError('PARTIAL_WRITE'): a row write failed mid-batch
        """
        if quantity <= 0:
            raise StockError('INVALID_QUANTITY', requested=quantity)

        async with self._gate:
            available = await self._items(
                lambda i: i.product_id == product_id and i.status == ItemStatus.AVAILABLE
            )
            if len(available) < quantity:
                raise StockError(
                    'INSUFFICIENT_STOCK',
                    available=len(available),
                    requested=quantity,
                )

            held = []
            for item in available[:quantity]:
                try:
                    await self.store.update_row(STOCK, item.id, {
                        'status': ItemStatus.HELD.value,
                        'holder_id': reservation_id,
                    })
                except RowStoreError as e:
                    logger.error(
                        "stock.reserve.partial",
                        extra={
                            "reservation_id": reservation_id,
                            "held": len(held),
                            "requested": quantity,
                            "error": e.code,
                        },
                    )
                    raise StockError(
                        'PARTIAL_WRITE',
                        held=len(held),
                        requested=quantity,
                        reservation_id=reservation_id,
                    ) from e
                held.append(item)

            logger.info(
                "stock.reserve.held",
                extra={
                    "product": product_id,
                    "qty": quantity,
                    "reservation_id": reservation_id,
                },
            )
            return held

    async def release(self, reservation_id: str) -> int:
        """
        Return every item held by the reservation to AVAILABLE.

        Idempotent: an unknown or already-released id returns 0.
        A failed row write is logged and skipped; the reconciliation
        sweep picks the row up later.
        """
        async with self._gate:
            held = await self._items(lambda i: i.is_held_by(reservation_id))
            released = await self._make_available(held)

        if released:
            logger.info(
                "stock.release.done",
                extra={"reservation_id": reservation_id, "released": released},
            )
        return released

    async def finalize(self, reservation_id: str, order_id: str) -> list[StockItem]:
        """
        Mark the reservation's held items SOLD under the final order id.

        Returns:
            Sold items in selection order. Shorter than the reservation
            when some writes failed; those rows stay HELD.

        Raises:
            StockError('NOTHING_TO_FINALIZE'): nothing is held for the
                reservation (duplicate settlement, already released).
                Callers treat this as an already-handled no-op.
        """
        async with self._gate:
            held = await self._items(lambda i: i.is_held_by(reservation_id))
            if not held:
                raise StockError('NOTHING_TO_FINALIZE', reservation_id=reservation_id)

            sold = []
            for item in held:
                try:
                    await self.store.update_row(STOCK, item.id, {
                        'status': ItemStatus.SOLD.value,
                        'holder_id': order_id,
                    })
                except RowStoreError as e:
                    logger.error(
                        "stock.finalize.write_failed",
                        extra={"reservation_id": reservation_id, "row_id": item.id, "error": e.code},
                    )
                    continue
                sold.append(StockItem(
                    id=item.id,
                    product_id=item.product_id,
                    credential=item.credential,
                    status=ItemStatus.SOLD,
                    holder_id=order_id,
                ))

        logger.info(
            "stock.finalize.sold",
            extra={"reservation_id": reservation_id, "order_id": order_id, "qty": len(sold)},
        )
        return sold

    async def sweep_orphans(self, live_ids: LiveIds) -> SweepResult:
        """
        Release HELD items whose holder is not a live reservation.

        Args:
            live_ids: Ids of pending reservations, or a callable returning
                them. A callable is evaluated after the gate is acquired.

        Returns:
            SweepResult(released, failed)
        """
        async with self._gate:
            live = set(live_ids() if callable(live_ids) else live_ids)
            orphans = await self._items(
                lambda i: i.status == ItemStatus.HELD and i.holder_id not in live
            )
            released = await self._make_available(orphans)

        result = SweepResult(released=released, failed=len(orphans) - released)
        if orphans:
            logger.warning(
                "stock.sweep.orphans",
                extra={"released": result.released, "failed": result.failed},
            )
        return result

    async def _make_available(self, items: Iterable[StockItem]) -> int:
        done = 0
        for item in items:
            try:
                await self.store.update_row(STOCK, item.id, {
                    'status': ItemStatus.AVAILABLE.value,
                    'holder_id': None,
                })
            except RowStoreError as e:
                logger.error(
                    "stock.release.write_failed",
                    extra={"row_id": item.id, "holder_id": item.holder_id, "error": e.code},
                )
                continue
            done += 1
        return done

    async def restock(self, product_id: str, credentials: Iterable[str]) -> int:
        """
        Append new AVAILABLE items.

        Blank credentials are skipped, and so are credentials whose login
        (the part before ``|``) already exists for the product or repeats
        within the batch.

        Returns:
            Number of items added
        """
        cleaned = [c.strip() for c in credentials if c and c.strip()]
        if not cleaned:
            return 0

        async with self._gate:
            existing = await self._items(lambda i: i.product_id == product_id)
            seen = {_login(item.credential) for item in existing}
            records = []
            for credential in cleaned:
                login = _login(credential)
                if login in seen:
                    continue
                seen.add(login)
                records.append({
                    'product_id': product_id,
                    'credential': credential,
                    'status': ItemStatus.AVAILABLE.value,
                    'holder_id': None,
                })
            if records:
                await self.store.append_rows(STOCK, records)

        skipped = len(cleaned) - len(records)
        logger.info(
            "stock.restock",
            extra={"product": product_id, "qty": len(records), "skipped": skipped},
        )
        return len(records)

    async def sold_under(self, order_id: str) -> list[StockItem]:
        """Items already SOLD under an order id. Read-only, not gated."""
        return await self._items(
            lambda i: i.status == ItemStatus.SOLD and i.holder_id == order_id
        )

    async def count_available(self, product_id: str | None = None) -> Counter:
        """Available items per product id. Read-only, not gated."""
        items = await self._items(
            lambda i: i.status == ItemStatus.AVAILABLE
            and (product_id is None or i.product_id == product_id)
        )
        return Counter(item.product_id for item in items)


def _login(credential: str) -> str:
    return credential.split('|', 1)[0].strip()
