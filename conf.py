"""
Tillman configuration.

Usage in settings.py:
    TILLMAN = {
        "ROW_STORE": "tillman.adapters.orm.DjangoRowStore",
        "PAYMENT_VERIFIER": "myshop.payos.PayOSVerifier",
        "BUYER_NOTIFIER": "myshop.telegram.TelegramNotifier",
        "OPERATOR_NOTIFIER": "myshop.telegram.TelegramNotifier",
        "HOLD_TTL_SECONDS": 300,
        "LOW_STOCK_THRESHOLD": 3,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class TillmanSettings:
    """Tillman configuration settings."""

    # Seconds a reservation holds stock before it is released
    HOLD_TTL_SECONDS: int = 300

    # Notify operators when availability drops below this (0 = off)
    LOW_STOCK_THRESHOLD: int = 0

    # Durable order id = prefix + reservation id
    ORDER_ID_PREFIX: str = "ORD_BOT_"

    # Backends (dotted paths)
    ROW_STORE: str = "tillman.adapters.orm.DjangoRowStore"
    SCHEDULER: str = "tillman.scheduler.AsyncioScheduler"
    BUYER_NOTIFIER: str = "tillman.adapters.noop.LoggingNotifier"
    OPERATOR_NOTIFIER: str = "tillman.adapters.noop.LoggingNotifier"
    PAYMENT_VERIFIER: str = ""

    # Release stranded holds when the shop starts
    RECONCILE_ON_START: bool = True

    # Periodic reconciliation (0 = only on demand)
    SWEEP_INTERVAL_SECONDS: int = 0

    # Shared secret for the reconcile endpoint ("" = endpoint disabled)
    ADMIN_TOKEN: str = ""


def get_tillman_settings() -> TillmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "TILLMAN", {})
    return TillmanSettings(**{
        k: v for k, v in user_settings.items()
        if k in TillmanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_tillman_settings(), name)


tillman_settings = _LazySettings()
