"""
Tests for the webhook and reconcile endpoints.
"""

import json

import pytest
from asgiref.sync import async_to_sync

from tillman.exceptions import RowStoreError
from tillman.records import STOCK
from tillman.tests.fakes import add_stock, statuses


@pytest.fixture(autouse=True)
def wired_shop(shop, monkeypatch):
    monkeypatch.setattr('tillman.views.get_shop', lambda: shop)
    return shop


def post_json(client, url, payload, **extra):
    return client.post(url, data=json.dumps(payload), content_type='application/json', **extra)


class TestPaymentWebhook:

    url = '/shop/webhook/'

    def test_paid_webhook_settles(self, client, shop, store, ana):
        add_stock(store, 2)
        reservation = async_to_sync(shop.checkout)('netflix', 2, ana)
        rid = reservation.reservation_id

        response = post_json(client, self.url, {
            'reservation_reference': rid,
            'amount_paid': '20000',
            'status': 'paid',
        })

        assert response.status_code == 200
        assert response.json() == {'success': True, 'outcome': 'settled'}
        assert statuses(store) == [('sold', f'ORD_BOT_{rid}')] * 2

    def test_unknown_reference_is_still_acknowledged(self, client):
        response = post_json(client, self.url, {'reservation_reference': '1', 'amount_paid': 5})

        assert response.status_code == 200
        assert response.json() == {'success': True, 'outcome': 'unknown'}

    def test_invalid_json(self, client):
        response = client.post(self.url, data=b'not json', content_type='application/json')

        assert response.status_code == 400
        assert response.json() == {'success': False}

    def test_payload_missing_fields(self, client):
        response = post_json(client, self.url, {'reservation_reference': '1'})

        assert response.status_code == 400

    def test_stock_read_failure_is_still_acknowledged(self, client, shop, store, ana):
        add_stock(store, 1)
        reservation = async_to_sync(shop.checkout)('netflix', 1, ana)
        shop.reconcile_on_start = False
        list_rows = store.list_rows

        async def stock_unreadable(table, predicate=None):
            if table == STOCK:
                raise RowStoreError('UNKNOWN_TABLE', table=table)
            return await list_rows(table, predicate)

        store.list_rows = stock_unreadable

        response = post_json(client, self.url, {
            'reservation_reference': reservation.reservation_id,
            'amount_paid': '10000',
        })

        assert response.status_code == 200
        assert response.json() == {'success': True, 'outcome': 'failed'}

    def test_get_not_allowed(self, client):
        assert client.get(self.url).status_code == 405

    def test_first_request_starts_the_shop(self, client, shop, store):
        add_stock(store, 1)
        async_to_sync(store.update_row)(STOCK, 1, {'status': 'held', 'holder_id': 'old'})

        post_json(client, self.url, {'reservation_reference': '1', 'amount_paid': 5})

        assert shop.started
        assert statuses(store) == [('available', None)]


class TestReconcileView:

    url = '/shop/reconcile/'

    def test_requires_token(self, client):
        assert client.post(self.url).status_code == 403

    def test_wrong_token(self, client):
        response = client.post(self.url, HTTP_X_TILLMAN_TOKEN='nope')

        assert response.status_code == 403
        assert response.json() == {'error': 'forbidden'}

    def test_reports_sweep_result(self, client, shop, store):
        shop.reconcile_on_start = False
        add_stock(store, 2)
        async_to_sync(store.update_row)(STOCK, 2, {'status': 'held', 'holder_id': 'old'})

        response = client.post(self.url, HTTP_X_TILLMAN_TOKEN='letmein')

        assert response.status_code == 200
        assert response.json() == {'released': 1, 'failed': 0}
        assert statuses(store) == [('available', None)] * 2

    def test_disabled_without_configured_token(self, client, settings):
        settings.TILLMAN = {**settings.TILLMAN, 'ADMIN_TOKEN': ''}

        response = client.post(self.url, HTTP_X_TILLMAN_TOKEN='')

        assert response.status_code == 403
