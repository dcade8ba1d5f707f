"""
Tillman Adapters.

Implementations of protocols for external systems.
"""

from tillman.adapters.loader import load_backend
from tillman.adapters.memory import InMemoryRowStore
from tillman.adapters.noop import LoggingNotifier, NoopPaymentVerifier

__all__ = [
    "load_backend",
    "InMemoryRowStore",
    "LoggingNotifier",
    "NoopPaymentVerifier",
]
