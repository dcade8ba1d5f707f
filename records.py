"""
Plain records exchanged between the Tillman services.

Rows coming out of the row store are dicts; these dataclasses are the
parsed, validated form the services work with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from tillman.exceptions import StockError
from tillman.models.enums import ItemStatus, ReservationState

# Row store tables
PRODUCTS = 'products'
STOCK = 'stock'
HISTORY = 'history'

PAID = 'paid'


@dataclass(frozen=True)
class Product:
    """Catalog entry (read-only for Tillman)."""

    id: str
    name: str
    unit_price: Decimal

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Product:
        return cls(
            id=str(row['code']),
            name=row.get('name') or str(row['code']),
            unit_price=Decimal(str(row.get('unit_price') or 0)),
        )


@dataclass(frozen=True)
class StockItem:
    """
    One serialized unit.

    The status/holder pair is checked on construction:
    AVAILABLE never has a holder, HELD and SOLD always do.
    """

    id: Any
    product_id: str
    credential: str
    status: ItemStatus
    holder_id: str | None = None

    def __post_init__(self):
        has_holder = bool(self.holder_id)
        if (self.status == ItemStatus.AVAILABLE) == has_holder:
            raise StockError(
                'MALFORMED_ROW',
                row_id=self.id,
                status=str(self.status),
                holder_id=self.holder_id,
            )

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> StockItem:
        try:
            status = ItemStatus(row.get('status') or ItemStatus.AVAILABLE)
        except ValueError:
            raise StockError('MALFORMED_ROW', row_id=row.get('id'), status=row.get('status')) from None
        return cls(
            id=row['id'],
            product_id=str(row['product_id']),
            credential=row.get('credential') or '',
            status=status,
            holder_id=row.get('holder_id') or None,
        )

    def is_held_by(self, reservation_id: str) -> bool:
        return self.status == ItemStatus.HELD and self.holder_id == reservation_id


@dataclass(frozen=True)
class Buyer:
    """Who is buying. Ids come from the chat transport."""

    id: str
    username: str = ''


@dataclass
class Reservation:
    """A pending checkout. Lives only in the order registry."""

    reservation_id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    buyer: Buyer
    created_at: datetime
    expires_at: datetime
    state: ReservationState = ReservationState.PENDING

    @property
    def total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class AuditRecord:
    """One sold item, as appended to the history table."""

    timestamp: datetime
    buyer_id: str
    buyer_username: str
    product_id: str
    product_name: str
    credential: str
    reservation_id: str
    order_id: str

    def as_row(self) -> dict[str, Any]:
        return {
            'created_at': self.timestamp,
            'buyer_id': self.buyer_id,
            'buyer_username': self.buyer_username,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'credential': self.credential,
            'reservation_id': self.reservation_id,
            'order_id': self.order_id,
        }


@dataclass(frozen=True)
class PaymentEvent:
    """A verified payment gateway webhook."""

    reservation_reference: str
    amount_paid: Decimal
    status: str = PAID
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_paid(self) -> bool:
        return self.status == PAID


@dataclass(frozen=True)
class SweepResult:
    """Outcome of a reconciliation sweep."""

    released: int = 0
    failed: int = 0
