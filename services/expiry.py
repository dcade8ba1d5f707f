"""
Reservation expiry — what happens when a hold's timer fires.
"""

import logging

from tillman.exceptions import RowStoreError
from tillman.models.enums import ReservationState
from tillman.protocols.notify import BuyerNotifier
from tillman.services.ledger import StockLedger
from tillman.services.registry import OrderRegistry

logger = logging.getLogger('tillman')


class ReservationExpiry:
    """
    Expiry callback wired into the order registry.

    Usage:
        expiry = ReservationExpiry(ledger, registry, notifier)
        registry.on_expire = expiry
    """

    def __init__(self, ledger: StockLedger, registry: OrderRegistry, notifier: BuyerNotifier):
        self.ledger = ledger
        self.registry = registry
        self.notifier = notifier

    async def __call__(self, reservation_id: str) -> None:
        reservation = self.registry.get(reservation_id)
        if reservation is None:
            return

        try:
            released = await self.ledger.release(reservation_id)
        except RowStoreError as e:
            logger.error(
                "order.expire.read_failed",
                extra={"reservation_id": reservation_id, "error": e.code},
            )
            released = 0

        # Settlement and cancellation resolve right after they pass the gate,
        # so an entry still here means the reservation is ours to close.
        # Rows that failed to write become orphans for the next sweep.
        if self.registry.resolve(reservation_id, ReservationState.RELEASED) is None:
            return

        logger.info(
            "order.expired",
            extra={"reservation_id": reservation_id, "released": released},
        )
        try:
            await self.notifier.notify(
                reservation.buyer.id,
                f"Order {reservation_id} was cancelled: payment not received in time.",
            )
        except Exception as e:
            logger.warning(
                "notify.buyer.failed",
                extra={"reservation_id": reservation_id, "error": str(e)},
            )
