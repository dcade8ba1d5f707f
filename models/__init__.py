"""
Tillman Models.

Django-backed tables for the row store:
- ProductRow: Catalog reference data
- StockRow: Serialized units (available / held / sold)
- HistoryRow: Append-only sales audit
"""

from tillman.models.enums import ItemStatus, ReservationState, SettlementOutcome
from tillman.models.history import HistoryRow
from tillman.models.product import ProductRow
from tillman.models.stock import StockRow

__all__ = [
    'ItemStatus',
    'ReservationState',
    'SettlementOutcome',
    'ProductRow',
    'StockRow',
    'HistoryRow',
]
