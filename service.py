"""
Shop Service — The single public interface for reservations and settlement.

Usage:
    from tillman import get_shop, StockError

    shop = get_shop()
    await shop.start()
    reservation = await shop.checkout('netflix', 2, Buyer(id='42', username='ana'))
    # ... create the payment link with reservation.reservation_id / .total
    await shop.handle_payment(event)      # from the webhook
    await shop.cancel(reservation.reservation_id, buyer_id='42')
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from tillman.adapters.loader import load_backend
from tillman.conf import tillman_settings
from tillman.exceptions import RowStoreError, StockError
from tillman.models.enums import ReservationState, SettlementOutcome
from tillman.protocols.notify import BuyerNotifier, OperatorNotifier
from tillman.protocols.rowstore import RowStore
from tillman.records import Buyer, PaymentEvent, Product, Reservation, SweepResult
from tillman.scheduler import Scheduler
from tillman.services import (
    Catalog,
    OrderRegistry,
    Reconciler,
    ReservationExpiry,
    SettlementCoordinator,
    StockLedger,
)

logger = logging.getLogger('tillman')


class Shop:
    """
    Wires ledger, registry, expiry, settlement and reconciliation together.

    All collaborators are injected; ``Shop.from_settings()`` builds them
    from the TILLMAN setting. One instance per process: the registry and
    the ledger gate are in-memory.
    """

    def __init__(self, store: RowStore, scheduler: Scheduler,
                 buyers: BuyerNotifier, operators: OperatorNotifier, *,
                 hold_ttl: float = 300, low_stock_threshold: int = 0,
                 sweep_interval: float = 0, reconcile_on_start: bool = True):
        self.store = store
        self.scheduler = scheduler
        self.hold_ttl = hold_ttl
        self.sweep_interval = sweep_interval
        self.reconcile_on_start = reconcile_on_start

        self.ledger = StockLedger(store)
        self.registry = OrderRegistry(scheduler)
        self.registry.on_expire = ReservationExpiry(self.ledger, self.registry, buyers)
        self.settlement = SettlementCoordinator(self.ledger, self.registry, store, buyers, operators)
        self.reconciler = Reconciler(self.ledger, self.registry, operators, scheduler)
        self.catalog = Catalog(store, self.ledger, operators, low_stock_threshold)
        self.started = False

    @classmethod
    def from_settings(cls) -> Shop:
        return cls(
            store=load_backend('ROW_STORE'),
            scheduler=load_backend('SCHEDULER'),
            buyers=load_backend('BUYER_NOTIFIER'),
            operators=load_backend('OPERATOR_NOTIFIER'),
            hold_ttl=tillman_settings.HOLD_TTL_SECONDS,
            low_stock_threshold=tillman_settings.LOW_STOCK_THRESHOLD,
            sweep_interval=tillman_settings.SWEEP_INTERVAL_SECONDS,
            reconcile_on_start=tillman_settings.RECONCILE_ON_START,
        )

    # ══════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════════

    async def start(self) -> SweepResult | None:
        """
        Release holds stranded by a previous process, start periodic sweeps.

        The registry is empty at this point, so every HELD item is an
        orphan. Idempotent.
        """
        if self.started:
            return None
        self.started = True
        result = None
        if self.reconcile_on_start:
            result = await self.reconciler.run()
            logger.info("shop.started", extra={"released": result.released, "failed": result.failed})
        self.reconciler.start_periodic(self.sweep_interval)
        return result

    async def stop(self) -> None:
        """Disarm timers. HELD items stay held until the next start()."""
        self.reconciler.stop_periodic()
        self.registry.clear()
        self.started = False

    # ══════════════════════════════════════════════════════════════
    # CHECKOUT
    # ══════════════════════════════════════════════════════════════

    async def checkout(self, product_id: str, quantity: int, buyer: Buyer,
                       ttl: float | None = None) -> Reservation:
        """
        Hold stock for a buyer and start the payment countdown.

        Returns:
            Pending reservation. Its id is the payment order code and
            ``total`` is the amount to charge.

        Raises:
            StockError('UNKNOWN_PRODUCT' | 'INVALID_QUANTITY'
                       | 'INSUFFICIENT_STOCK' | 'PARTIAL_WRITE')
        """
        product = await self.catalog.get(product_id)
        reservation_id = self.registry.new_id()

        try:
            await self.ledger.reserve(product.id, quantity, reservation_id)
        except StockError as e:
            if e.code == 'PARTIAL_WRITE':
                await self.ledger.release(reservation_id)
            raise

        # No await between reserve() and create(): a sweep must never see
        # the hold before its reservation is live.
        reservation = self.registry.create(
            product, quantity, buyer,
            ttl=self.hold_ttl if ttl is None else ttl,
            reservation_id=reservation_id,
        )
        await self.catalog.check_low_stock(product)
        return reservation

    async def cancel(self, reservation_id: str, buyer_id: str | None = None) -> bool:
        """
        Buyer-initiated cancellation.

        Returns:
            True if this call released the reservation, False if it was
            unknown or already settled/expired.

        Raises:
            StockError('NOT_OWNER'): buyer_id given and not the owner
        """
        reservation = self.registry.get(reservation_id)
        if reservation is None:
            return False
        if buyer_id is not None and reservation.buyer.id != str(buyer_id):
            raise StockError('NOT_OWNER', reservation_id=reservation_id)

        self.registry.disarm(reservation_id)
        try:
            released = await self.ledger.release(reservation_id)
        except RowStoreError as e:
            logger.error(
                "order.cancel.read_failed",
                extra={"reservation_id": reservation_id, "error": e.code},
            )
            released = 0

        # Still registered: nobody else closed it while we were at the gate.
        # Rows that failed to write are left to the sweep.
        resolved = self.registry.resolve(reservation_id, ReservationState.RELEASED)
        if resolved is not None:
            logger.info(
                "order.cancelled",
                extra={"reservation_id": reservation_id, "released": released},
            )
        return resolved is not None

    # ══════════════════════════════════════════════════════════════
    # SETTLEMENT & MAINTENANCE
    # ══════════════════════════════════════════════════════════════

    async def handle_payment(self, event: PaymentEvent) -> SettlementOutcome:
        return await self.settlement.handle(event)

    async def reconcile(self) -> SweepResult:
        return await self.reconciler.run()

    async def restock(self, product_id: str, credentials: Iterable[str]) -> int:
        """Add credentials as AVAILABLE items. Returns how many were added."""
        product = await self.catalog.get(product_id)
        return await self.ledger.restock(product.id, credentials)

    async def listing(self) -> list[tuple[Product, int]]:
        return await self.catalog.listing()

    def get_reservation(self, reservation_id: str) -> Reservation | None:
        return self.registry.get(reservation_id)


_lock = threading.Lock()
_shop: Shop | None = None


def get_shop() -> Shop:
    """Return the process-wide Shop, built from settings on first use."""
    global _shop

    if _shop is None:
        with _lock:
            if _shop is None:  # double-checked
                _shop = Shop.from_settings()
    return _shop


def reset_shop() -> None:
    """Drop the cached Shop. Useful for testing."""
    global _shop
    _shop = None
