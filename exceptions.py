"""
Exceptions for Tillman.

All errors carry a structured code for programmatic handling.
"""

from decimal import Decimal
from typing import Any


class BaseError(Exception):
    """
    Base for coded errors.

    Usage:
        raise StockError('INSUFFICIENT_STOCK', available=1, requested=2)

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class StockError(BaseError):
    """
    Structured exception for stock ledger and checkout operations.

    Usage:
        try:
            shop.checkout('netflix', 2, buyer)
        except StockError as e:
            if e.code == 'INSUFFICIENT_STOCK':
                print(f"Only {e.available} left")
    """

    _default_messages = {
        'INSUFFICIENT_STOCK': 'Not enough stock for the requested quantity',
        'INVALID_QUANTITY': 'Quantity must be positive',
        'PARTIAL_WRITE': 'Stock hold failed part-way through',
        'NOTHING_TO_FINALIZE': 'No held items for this reservation',
        'UNKNOWN_PRODUCT': 'Product not found',
        'NOT_OWNER': 'Reservation belongs to another buyer',
        'MALFORMED_ROW': 'Stock row has an inconsistent status/holder pair',
    }

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)


class PaymentError(BaseError):
    """Raised by payment verifiers for payloads that cannot be trusted."""

    _default_messages = {
        'INVALID_SIGNATURE': 'Webhook signature does not match',
        'INVALID_PAYLOAD': 'Webhook payload is malformed',
    }


class RowStoreError(BaseError):
    """Raised by row store adapters."""

    _default_messages = {
        'UNKNOWN_TABLE': 'Table does not exist',
        'ROW_NOT_FOUND': 'Row does not exist',
        'WRITE_FAILED': 'Row store write failed',
    }
