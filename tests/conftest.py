"""
Pytest fixtures for Tillman tests.
"""

from decimal import Decimal

import pytest
from asgiref.sync import async_to_sync

from tillman.adapters.memory import InMemoryRowStore
from tillman.records import PRODUCTS, Buyer
from tillman.service import Shop
from tillman.tests.fakes import ManualScheduler, RecordingNotifier


@pytest.fixture
def store():
    """In-memory store with two products and no stock."""
    store = InMemoryRowStore(latency=0)
    async_to_sync(store.append_rows)(PRODUCTS, [
        {'code': 'netflix', 'name': 'Netflix Premium', 'unit_price': Decimal('10000')},
        {'code': 'spotify', 'name': 'Spotify Family', 'unit_price': Decimal('25000')},
    ])
    return store


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def shop(store, scheduler, notifier):
    """Shop wired to the in-memory store, 180s holds."""
    return Shop(store, scheduler, notifier, notifier, hold_ttl=180)


@pytest.fixture
def ana():
    return Buyer(id='1001', username='ana')


@pytest.fixture
def bruno():
    return Buyer(id='1002', username='bruno')
