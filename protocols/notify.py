"""
Notification Protocols — Outbound messages to buyers and shop operators.

Delivery is best-effort. A failed notification never rolls back a sale;
callers log it and route it to the operator channel.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class BuyerNotifier(Protocol):
    """Sends a message to one buyer (e.g. a Telegram chat)."""

    async def notify(self, buyer_id: str, message: str) -> None:
        ...


@runtime_checkable
class OperatorNotifier(Protocol):
    """Sends a message to every shop operator."""

    async def notify_operators(self, message: str) -> None:
        ...
