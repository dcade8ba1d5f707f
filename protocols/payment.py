"""
Payment Verification Protocol — Authenticates gateway webhooks.

Signature schemes are gateway specific and live outside Tillman.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from tillman.records import PaymentEvent


@runtime_checkable
class PaymentVerifier(Protocol):
    """
    Protocol for webhook verification.

    Implementations check the payload signature and map the gateway's
    fields onto a PaymentEvent:

    - reservation_reference: the order code the payment link was created with
    - amount_paid: amount actually received
    - status: "paid" for a confirmed payment
    """

    def verify(self, payload: dict[str, Any]) -> PaymentEvent:
        """
        Args:
            payload: Decoded webhook JSON body

        Returns:
            PaymentEvent

        Raises:
            PaymentError: If the payload is malformed or not authentic
        """
        ...
