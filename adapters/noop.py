"""
Noop adapters — Stand-ins for development and testing.

- LoggingNotifier: implements BuyerNotifier and OperatorNotifier by logging
- NoopPaymentVerifier: trusts any webhook payload

Usage in settings.py:
    TILLMAN = {
        "BUYER_NOTIFIER": "tillman.adapters.noop.LoggingNotifier",
        "OPERATOR_NOTIFIER": "tillman.adapters.noop.LoggingNotifier",
        "PAYMENT_VERIFIER": "tillman.adapters.noop.NoopPaymentVerifier",
    }

WARNING: Do NOT use NoopPaymentVerifier in production. Anyone who can reach
the webhook could mark orders as paid.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from tillman.exceptions import PaymentError
from tillman.records import PAID, PaymentEvent

logger = logging.getLogger('tillman.notify')


class LoggingNotifier:
    """Writes every notification to the ``tillman.notify`` logger."""

    async def notify(self, buyer_id: str, message: str) -> None:
        logger.info("notify.buyer", extra={"buyer_id": buyer_id, "text": message})

    async def notify_operators(self, message: str) -> None:
        logger.info("notify.operators", extra={"text": message})


class NoopPaymentVerifier:
    """
    Accepts payloads without checking any signature.

    Expected shape:
        {"reservation_reference": "1718000000000", "amount_paid": "20000", "status": "paid"}
    """

    def verify(self, payload: dict[str, Any]) -> PaymentEvent:
        try:
            reference = str(payload['reservation_reference'])
            amount = Decimal(str(payload['amount_paid']))
        except (KeyError, TypeError, InvalidOperation):
            raise PaymentError('INVALID_PAYLOAD') from None
        return PaymentEvent(
            reservation_reference=reference,
            amount_paid=amount,
            status=str(payload.get('status', PAID)),
            raw=payload,
        )
