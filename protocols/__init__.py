"""
Tillman Protocols.

Defines interfaces for external system integration.
"""

from tillman.protocols.notify import BuyerNotifier, OperatorNotifier
from tillman.protocols.payment import PaymentVerifier
from tillman.protocols.rowstore import Predicate, Row, RowStore

__all__ = [
    "BuyerNotifier",
    "OperatorNotifier",
    "PaymentVerifier",
    "Predicate",
    "Row",
    "RowStore",
]
