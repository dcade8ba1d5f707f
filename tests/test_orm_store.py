"""
Tests for the Django-backed row store.
"""

from decimal import Decimal

import pytest
from asgiref.sync import async_to_sync

from tillman.adapters.orm import DjangoRowStore
from tillman.exceptions import RowStoreError
from tillman.models import HistoryRow, ItemStatus, ProductRow, SettlementOutcome, StockRow
from tillman.records import HISTORY, PRODUCTS, STOCK, Buyer, PaymentEvent
from tillman.service import Shop
from tillman.tests.fakes import ManualScheduler, RecordingNotifier

pytestmark = pytest.mark.django_db


@pytest.fixture
def orm_store():
    ProductRow.objects.create(code='netflix', name='Netflix Premium', unit_price=Decimal('10000'))
    return DjangoRowStore()


@pytest.fixture
def stock_rows():
    return [
        StockRow.objects.create(product_id='netflix', credential=f'user{n}@mail.test | pw{n}')
        for n in range(1, 4)
    ]


class TestDjangoRowStore:

    def test_list_rows_in_primary_key_order(self, orm_store, stock_rows):
        rows = async_to_sync(orm_store.list_rows)(STOCK)

        assert [row['id'] for row in rows] == [obj.pk for obj in stock_rows]
        assert rows[0]['credential'] == 'user1@mail.test | pw1'
        assert rows[0]['status'] == ItemStatus.AVAILABLE
        assert rows[0]['holder_id'] is None

    def test_list_rows_with_predicate(self, orm_store, stock_rows):
        last = stock_rows[-1].pk

        rows = async_to_sync(orm_store.list_rows)(STOCK, lambda row: row['id'] == last)

        assert [row['id'] for row in rows] == [last]

    def test_products_table(self, orm_store):
        [row] = async_to_sync(orm_store.list_rows)(PRODUCTS)

        assert row['code'] == 'netflix'
        assert row['unit_price'] == Decimal('10000')

    def test_update_row(self, orm_store, stock_rows):
        pk = stock_rows[0].pk

        async_to_sync(orm_store.update_row)(STOCK, pk, {'status': 'held', 'holder_id': 'r1', 'id': 999})

        row = StockRow.objects.get(pk=pk)
        assert (row.status, row.holder_id) == ('held', 'r1')

    def test_update_missing_row(self, orm_store):
        with pytest.raises(RowStoreError) as exc:
            async_to_sync(orm_store.update_row)(STOCK, 12345, {'status': 'held'})

        assert exc.value.code == 'ROW_NOT_FOUND'

    def test_unknown_table(self, orm_store):
        with pytest.raises(RowStoreError) as exc:
            async_to_sync(orm_store.list_rows)('paid')

        assert exc.value.code == 'UNKNOWN_TABLE'

    def test_append_rows_returns_ids(self, orm_store):
        ids = async_to_sync(orm_store.append_rows)(STOCK, [
            {'product_id': 'netflix', 'credential': 'a | 1', 'status': 'available', 'holder_id': None},
            {'product_id': 'netflix', 'credential': 'b | 2', 'status': 'available', 'holder_id': None},
        ])

        assert len(ids) == 2
        assert list(StockRow.objects.filter(pk__in=ids).values_list('credential', flat=True)) == [
            'a | 1', 'b | 2',
        ]


class TestShopOverOrm:

    def test_checkout_and_settle(self, orm_store, stock_rows):
        notifier = RecordingNotifier()
        shop = Shop(orm_store, ManualScheduler(), notifier, notifier, hold_ttl=180)
        buyer = Buyer(id='1001', username='ana')

        reservation = async_to_sync(shop.checkout)('netflix', 2, buyer)
        rid = reservation.reservation_id
        assert StockRow.objects.filter(status=ItemStatus.HELD, holder_id=rid).count() == 2

        event = PaymentEvent(reservation_reference=rid, amount_paid=reservation.total)
        outcome = async_to_sync(shop.handle_payment)(event)

        assert outcome == SettlementOutcome.SETTLED
        assert StockRow.objects.filter(status=ItemStatus.SOLD, holder_id=f'ORD_BOT_{rid}').count() == 2
        assert StockRow.objects.filter(status=ItemStatus.AVAILABLE).count() == 1
        history = HistoryRow.objects.order_by('id')
        assert [row.credential for row in history] == [
            'user1@mail.test | pw1',
            'user2@mail.test | pw2',
        ]
        assert {row.order_id for row in history} == {f'ORD_BOT_{rid}'}

    def test_expiry_over_orm(self, orm_store, stock_rows):
        scheduler = ManualScheduler()
        notifier = RecordingNotifier()
        shop = Shop(orm_store, scheduler, notifier, notifier, hold_ttl=180)

        async_to_sync(shop.checkout)('netflix', 3, Buyer(id='1001'))
        async_to_sync(scheduler.advance)(181)

        assert StockRow.objects.filter(status=ItemStatus.AVAILABLE, holder_id=None).count() == 3
        assert not HistoryRow.objects.exists()

    def test_start_sweeps_stranded_holds(self, orm_store, stock_rows):
        StockRow.objects.filter(pk=stock_rows[0].pk).update(status=ItemStatus.HELD, holder_id='17000')
        notifier = RecordingNotifier()
        shop = Shop(orm_store, ManualScheduler(), notifier, notifier)

        result = async_to_sync(shop.start)()

        assert result.released == 1
        assert not StockRow.objects.filter(status=ItemStatus.HELD).exists()

    def test_history_is_written_to_history_table(self, orm_store):
        async_to_sync(orm_store.append_rows)(HISTORY, [{
            'buyer_id': '1001',
            'product_id': 'netflix',
            'credential': 'a | 1',
            'reservation_id': 'r1',
            'order_id': 'ORD_BOT_r1',
        }])

        row = HistoryRow.objects.get()
        assert row.order_id == 'ORD_BOT_r1'
        assert row.created_at is not None
