"""
Django Tillman — reservation and settlement engine for serialized stock.

Holds credential stock during checkout, settles it exactly once when the
payment gateway confirms, and repairs orphaned holds.

Usage:
    from tillman import get_shop, Buyer, StockError

    shop = get_shop()
    reservation = await shop.checkout('netflix', 2, Buyer(id='42'))
    await shop.cancel(reservation.reservation_id, buyer_id='42')
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name in ('Shop', 'get_shop', 'reset_shop'):
        from tillman import service
        return getattr(service, name)
    elif name in ('StockError', 'PaymentError', 'RowStoreError'):
        from tillman import exceptions
        return getattr(exceptions, name)
    elif name in ('Buyer', 'Product', 'Reservation', 'PaymentEvent', 'SweepResult'):
        from tillman import records
        return getattr(records, name)
    elif name in ('ItemStatus', 'ReservationState', 'SettlementOutcome'):
        from tillman.models import enums
        return getattr(enums, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'Shop',
    'get_shop',
    'reset_shop',
    'StockError',
    'PaymentError',
    'RowStoreError',
    'Buyer',
    'Product',
    'Reservation',
    'PaymentEvent',
    'SweepResult',
    'ItemStatus',
    'ReservationState',
    'SettlementOutcome',
]

__version__ = '0.1.0'
