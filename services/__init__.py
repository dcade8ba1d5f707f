"""
Shop services — one module per component.

    from tillman.services import StockLedger, OrderRegistry, SettlementCoordinator
"""

from tillman.services.catalog import Catalog
from tillman.services.expiry import ReservationExpiry
from tillman.services.ledger import StockLedger
from tillman.services.reconcile import Reconciler
from tillman.services.registry import OrderRegistry, new_reservation_id
from tillman.services.settlement import SettlementCoordinator, order_id_for

__all__ = [
    'Catalog',
    'ReservationExpiry',
    'StockLedger',
    'Reconciler',
    'OrderRegistry',
    'new_reservation_id',
    'SettlementCoordinator',
    'order_id_for',
]
