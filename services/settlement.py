"""
Settlement — turns a verified payment into sold stock plus an audit trail.

The gateway delivers webhooks at least once and in any order relative to
the reservation timeline. Duplicate protection lives in the stock ledger:
a second finalize finds nothing HELD and becomes a no-op.
"""

import logging

from django.utils import timezone

from tillman.conf import tillman_settings
from tillman.exceptions import RowStoreError, StockError
from tillman.models.enums import ReservationState, SettlementOutcome
from tillman.protocols.notify import BuyerNotifier, OperatorNotifier
from tillman.protocols.rowstore import RowStore
from tillman.records import HISTORY, AuditRecord, PaymentEvent, Reservation, StockItem
from tillman.services.ledger import StockLedger
from tillman.services.registry import OrderRegistry

logger = logging.getLogger('tillman')


def order_id_for(reservation_id: str) -> str:
    """Durable order id recorded on sold items and in history."""
    return f"{tillman_settings.ORDER_ID_PREFIX}{reservation_id}"


class SettlementCoordinator:
    """
    Handles payment events.

    Never raises for settlement problems: the webhook must be acknowledged
    so the gateway stops retrying. Problems go to the operator channel.
    """

    def __init__(self, ledger: StockLedger, registry: OrderRegistry, store: RowStore,
                 buyers: BuyerNotifier, operators: OperatorNotifier):
        self.ledger = ledger
        self.registry = registry
        self.store = store
        self.buyers = buyers
        self.operators = operators

    async def handle(self, event: PaymentEvent) -> SettlementOutcome:
        """
        Settle the reservation a payment refers to.

        Steps:
            1. Ignore non-paid statuses
            2. Unknown reservation -> UNKNOWN (stale or duplicate)
            3. Underpaid -> AMOUNT_MISMATCH, reservation stays pending
            4. Finalize, resolve as SETTLED (resolve disarms the expiry)
            5. Append audit rows, notify buyer and operators

        A stock read failure during finalize answers FAILED and alerts
        operators; the reservation keeps its expiry.
        """
        reference = event.reservation_reference

        if not event.is_paid:
            logger.info("settlement.ignored", extra={"reference": reference, "status": event.status})
            return SettlementOutcome.IGNORED

        reservation = self.registry.get(reference)
        if reservation is None:
            logger.warning(
                "settlement.unknown",
                extra={"reference": reference, "amount": str(event.amount_paid)},
            )
            return SettlementOutcome.UNKNOWN

        if event.amount_paid < reservation.total:
            logger.warning(
                "settlement.amount_mismatch",
                extra={
                    "reservation_id": reference,
                    "paid": str(event.amount_paid),
                    "expected": str(reservation.total),
                },
            )
            await self._alert(
                f"Payment for order {reference} is short: paid {event.amount_paid}, "
                f"expected {reservation.total}. Reservation left pending."
            )
            return SettlementOutcome.AMOUNT_MISMATCH

        order_id = order_id_for(reference)

        # The expiry stays armed until resolve(): if finalize cannot run,
        # the reservation still times out and its hold is released.
        try:
            sold = await self.ledger.finalize(reference, order_id)
        except RowStoreError as e:
            logger.error(
                "settlement.finalize_failed",
                extra={"reservation_id": reference, "error": e.code},
            )
            await self._alert(
                f"Payment received for order {reference} but stock could not be "
                f"read ({e.message}). Manual follow-up needed (buyer {reservation.buyer.id})."
            )
            return SettlementOutcome.FAILED
        except StockError as e:
            if e.code != 'NOTHING_TO_FINALIZE':
                raise
            return await self._nothing_to_finalize(reservation, order_id)

        self.registry.resolve(reference, ReservationState.SETTLED)

        await self._record(reservation, sold, order_id)
        if len(sold) < reservation.quantity:
            await self._alert(
                f"Order {order_id} delivered {len(sold)} of {reservation.quantity} items. "
                f"Manual follow-up needed."
            )

        logger.info(
            "settlement.settled",
            extra={"reservation_id": reference, "order_id": order_id, "qty": len(sold)},
        )
        await self._deliver(reservation, sold, order_id)
        return SettlementOutcome.SETTLED

    async def _nothing_to_finalize(self, reservation: Reservation, order_id: str) -> SettlementOutcome:
        """
        Nothing held for a paid reservation: either another delivery of the
        same webhook already sold it, or the hold was released first.
        """
        reference = reservation.reservation_id
        try:
            already_sold = await self.ledger.sold_under(order_id)
        except RowStoreError as e:
            logger.error(
                "settlement.duplicate_check_failed",
                extra={"reservation_id": reference, "error": e.code},
            )
            already_sold = []

        if already_sold:
            logger.info(
                "settlement.duplicate",
                extra={"reservation_id": reference, "order_id": order_id},
            )
            return SettlementOutcome.DUPLICATE

        logger.warning("settlement.nothing_to_finalize", extra={"reservation_id": reference})
        await self._alert(
            f"Payment received for order {reference} but its stock was already "
            f"released. Manual follow-up needed (buyer {reservation.buyer.id})."
        )
        return SettlementOutcome.DUPLICATE

    async def _record(self, reservation: Reservation, sold: list[StockItem], order_id: str) -> None:
        now = timezone.now()
        records = [
            AuditRecord(
                timestamp=now,
                buyer_id=reservation.buyer.id,
                buyer_username=reservation.buyer.username,
                product_id=reservation.product_id,
                product_name=reservation.product_name,
                credential=item.credential,
                reservation_id=reservation.reservation_id,
                order_id=order_id,
            )
            for item in sold
        ]
        try:
            await self.store.append_rows(HISTORY, [r.as_row() for r in records])
        except RowStoreError as e:
            logger.error(
                "settlement.audit_failed",
                extra={"order_id": order_id, "count": len(records), "error": e.code},
            )
            await self._alert(f"Order {order_id} sold but history was not written: {e.message}")

    async def _deliver(self, reservation: Reservation, sold: list[StockItem], order_id: str) -> None:
        lines = "\n".join(f"{n}. {item.credential}" for n, item in enumerate(sold, 1))
        try:
            await self.buyers.notify(
                reservation.buyer.id,
                f"Payment received. Order {order_id}\n{lines}",
            )
        except Exception as e:
            logger.error(
                "notify.buyer.failed",
                extra={"order_id": order_id, "buyer": reservation.buyer.id, "error": str(e)},
            )
            await self._alert(
                f"Order {order_id} is paid but delivery to buyer {reservation.buyer.id} "
                f"failed: {e}. Send the credentials manually."
            )
        await self._alert(f"New order {order_id}: {reservation.product_name} "
                          f"x{len(sold)} ({reservation.total})")

    async def _alert(self, message: str) -> None:
        try:
            await self.operators.notify_operators(message)
        except Exception as e:
            logger.error("notify.operators.failed", extra={"text": message, "error": str(e)})
