"""
Reconciliation — repairs holds whose reservation the registry no longer knows.

Run it on demand (admin endpoint, management command), on startup, or
periodically. It never touches items held by a live reservation.
"""

import logging

from tillman.protocols.notify import OperatorNotifier
from tillman.records import SweepResult
from tillman.scheduler import Handle, Scheduler
from tillman.services.ledger import StockLedger
from tillman.services.registry import OrderRegistry

logger = logging.getLogger('tillman')


class Reconciler:
    """Sweeps orphaned holds back to AVAILABLE."""

    def __init__(self, ledger: StockLedger, registry: OrderRegistry,
                 operators: OperatorNotifier, scheduler: Scheduler | None = None):
        self.ledger = ledger
        self.registry = registry
        self.operators = operators
        self.scheduler = scheduler
        self._periodic: Handle | None = None

    async def run(self) -> SweepResult:
        result = await self.ledger.sweep_orphans(self.registry.live_ids)
        if result.released or result.failed:
            message = f"Reconciliation released {result.released} held item(s)"
            if result.failed:
                message += f", {result.failed} could not be repaired"
            try:
                await self.operators.notify_operators(message)
            except Exception as e:
                logger.error("notify.operators.failed", extra={"text": message, "error": str(e)})
        return result

    def start_periodic(self, interval: float) -> None:
        """Re-run every ``interval`` seconds until stop_periodic()."""
        if self.scheduler is None or interval <= 0:
            return

        async def tick():
            try:
                await self.run()
            finally:
                if self._periodic is not None:
                    self._periodic = self.scheduler.schedule_once(interval, tick)

        self._periodic = self.scheduler.schedule_once(interval, tick)

    def stop_periodic(self) -> None:
        if self._periodic is not None:
            handle, self._periodic = self._periodic, None
            handle.cancel()
