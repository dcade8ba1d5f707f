"""
Enums for Tillman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class ItemStatus(models.TextChoices):
    """
    Stock item status.

    AVAILABLE: For sale. holder_id is empty.
    HELD:      Claimed by a pending reservation. holder_id = reservation id.
    SOLD:      Settled. holder_id = final order id. Terminal for Tillman.
    """
    AVAILABLE = 'available', _('Available')
    HELD = 'held', _('Held')
    SOLD = 'sold', _('Sold')


class ReservationState(models.TextChoices):
    """Reservation lifecycle state."""
    PENDING = 'pending', _('Pending')       # Holding stock, awaiting payment
    SETTLED = 'settled', _('Settled')       # Paid, items sold
    RELEASED = 'released', _('Released')    # Expired or cancelled


class SettlementOutcome(models.TextChoices):
    """How a payment webhook was handled. Every outcome is acknowledged."""
    SETTLED = 'settled', _('Settled')                        # Items sold, audit written
    DUPLICATE = 'duplicate', _('Duplicate')                  # Nothing left to finalize
    UNKNOWN = 'unknown', _('Unknown reservation')            # Stale or never existed
    AMOUNT_MISMATCH = 'amount_mismatch', _('Amount mismatch')  # Underpaid, left pending
    IGNORED = 'ignored', _('Ignored')                        # Not a paid status
    FAILED = 'failed', _('Failed')                           # Stock unreadable, operators alerted
