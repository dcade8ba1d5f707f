"""
Order registry — in-flight reservations and their expiry timers.

Volatile: the registry is the source of truth for pending reservations only
until the process restarts. The durable trace of an outcome is the stock
item status plus the history table.
"""

import logging
import threading
import time
from datetime import timedelta
from typing import Awaitable, Callable

from django.utils import timezone

from tillman.models.enums import ReservationState
from tillman.records import Buyer, Product, Reservation
from tillman.scheduler import Handle, Scheduler

logger = logging.getLogger('tillman')

ExpireCallback = Callable[[str], Awaitable[None]]

_id_lock = threading.Lock()
_last_id = 0


def new_reservation_id() -> str:
    """
    Numeric id derived from the millisecond clock.

    Strictly increasing within the process, so two reservations created in
    the same millisecond still differ. Numeric so it doubles as the payment
    gateway order code.
    """
    global _last_id
    with _id_lock:
        _last_id = max(time.time_ns() // 1_000_000, _last_id + 1)
        return str(_last_id)


class OrderRegistry:
    """
    Pending reservations keyed by reservation id.

    Resolution is exactly-once: resolve() only acts on a pending entry and
    removes it, so every later call for the same id is a no-op.
    """

    def __init__(self, scheduler: Scheduler, on_expire: ExpireCallback | None = None):
        self.scheduler = scheduler
        self.on_expire = on_expire
        self._pending: dict[str, Reservation] = {}
        self._timers: dict[str, Handle] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, reservation_id: str) -> bool:
        return reservation_id in self._pending

    new_id = staticmethod(new_reservation_id)

    def create(self, product: Product, quantity: int, buyer: Buyer, ttl: float,
               reservation_id: str | None = None) -> Reservation:
        """
        Register a pending reservation and arm its expiry ``ttl`` seconds out.
        """
        reservation_id = reservation_id or self.new_id()
        now = timezone.now()
        reservation = Reservation(
            reservation_id=reservation_id,
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.unit_price,
            buyer=buyer,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl),
        )
        self._pending[reservation_id] = reservation
        if self.on_expire is not None:
            self._timers[reservation_id] = self.scheduler.schedule_once(
                ttl, lambda: self.on_expire(reservation_id)
            )
        logger.info(
            "order.created",
            extra={"reservation_id": reservation_id, "buyer": buyer.id, "ttl": ttl},
        )
        return reservation

    def get(self, reservation_id: str) -> Reservation | None:
        return self._pending.get(reservation_id)

    def disarm(self, reservation_id: str) -> None:
        """Cancel the expiry callback. Safe to call repeatedly."""
        handle = self._timers.pop(reservation_id, None)
        if handle is not None:
            handle.cancel()

    def resolve(self, reservation_id: str, outcome: ReservationState) -> Reservation | None:
        """
        Transition PENDING -> SETTLED | RELEASED and forget the reservation.

        Returns:
            The resolved reservation, or None if it was not pending
        """
        if outcome == ReservationState.PENDING:
            raise ValueError("resolve() needs a final state")
        reservation = self._pending.pop(reservation_id, None)
        self.disarm(reservation_id)
        if reservation is None:
            return None
        reservation.state = outcome
        logger.info(
            "order.resolved",
            extra={"reservation_id": reservation_id, "state": str(outcome)},
        )
        return reservation

    def live_ids(self) -> set[str]:
        return set(self._pending)

    def clear(self) -> None:
        """Disarm every timer and drop all entries (shutdown)."""
        for reservation_id in list(self._timers):
            self.disarm(reservation_id)
        self._pending.clear()
