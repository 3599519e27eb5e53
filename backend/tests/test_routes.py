# Overview: Pytest coverage for the HTTP API through the Flask test client.

import pytest

from shopledger.extensions import db
from shopledger.models import Checkout, InventoryItem
from shopledger.services import checkout_service, inventory_service
from shopledger.time_utils import utcnow


def sale_payload(store, customer, staff, items, **extra) -> dict:
    """Helper to build a checkout request body."""
    body = {
        'store_id': store.id,
        'customer_id': customer.id,
        'staff_id': staff.id,
        'items': items,
    }
    body.update(extra)
    return body


class TestHealth:
    def test_health_ok(self, client, db_session):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.json['status'] == 'healthy'
        assert response.json['database']['status'] == 'healthy'


class TestCheckoutRoute:
    def test_checkout_created(self, client, store, customer, staff, product):
        response = client.post('/api/sales/checkout', json=sale_payload(
            store, customer, staff, [{'inventory_id': product.id, 'quantity': 3}]
        ))

        assert response.status_code == 201
        body = response.json
        assert body['success'] is True
        assert body['message'] == 'Sale completed successfully'
        assert len(body['checkout_ids']) == 1
        assert body['total_price_cents'] == 240
        assert db.session.get(Checkout, body['checkout_ids'][0]).sale_reference == body['sale_reference']

    def test_insufficient_stock_is_400(self, client, store, customer, staff, product):
        response = client.post('/api/sales/checkout', json=sale_payload(
            store, customer, staff, [{'inventory_id': product.id, 'quantity': 11}]
        ))
        assert response.status_code == 400
        assert response.json['error'] == 'Sorry, we only have 10 Widget Pro in stock.'
        assert response.json['code'] == 'INSUFFICIENT_STOCK'

    def test_not_found_is_400(self, client, store, customer, staff):
        response = client.post('/api/sales/checkout', json=sale_payload(
            store, customer, staff, [{'inventory_id': 99999, 'quantity': 1}]
        ))
        assert response.status_code == 400
        assert response.json['code'] == 'NOT_FOUND'

    @pytest.mark.parametrize('items', [
        [{'inventory_id': 1, 'quantity': '1e3'}],
        [{'inventory_id': 1, 'quantity': 2.5}],
        [{'inventory_id': 1}],
        'not-a-list',
    ])
    def test_malformed_items_are_400(self, client, store, customer, staff, items):
        response = client.post('/api/sales/checkout', json=sale_payload(store, customer, staff, items))
        assert response.status_code == 400
        assert response.json['code'] == 'INVALID_ARGUMENT'

    def test_missing_body_is_400(self, client, db_session):
        response = client.post('/api/sales/checkout', data='nope', content_type='text/plain')
        assert response.status_code == 400

    def test_unexpected_error_is_generic_500(self, client, store, customer, staff, product, monkeypatch):
        def explode(**kwargs):
            raise RuntimeError("connection pool exhausted at 0xdeadbeef")

        monkeypatch.setattr(checkout_service, 'checkout', explode)
        response = client.post('/api/sales/checkout', json=sale_payload(
            store, customer, staff, [{'inventory_id': product.id, 'quantity': 1}]
        ))
        assert response.status_code == 500
        assert 'deadbeef' not in response.get_data(as_text=True)
        assert 'Traceback' not in response.get_data(as_text=True)

    def test_transactions_listing(self, client, store, customer, staff, product):
        client.post('/api/sales/checkout', json=sale_payload(
            store, customer, staff, [{'inventory_id': product.id, 'quantity': 2}]
        ))

        response = client.get(f'/api/transactions?store_id={store.id}')
        assert response.status_code == 200
        assert len(response.json) == 1
        row = response.json[0]
        assert row['customer']['customer_number'] == 'DT01001'
        assert row['inventory']['name'] == 'Widget Pro'
        assert row['checkout']['total_price_cents'] == 160

    def test_transactions_date_filter(self, client, store, customer, staff, product):
        client.post('/api/sales/checkout', json=sale_payload(
            store, customer, staff, [{'inventory_id': product.id, 'quantity': 1}]
        ))
        response = client.get(f'/api/transactions?store_id={store.id}&start=2000-01-01&end=2000-12-31')
        assert response.status_code == 200
        assert response.json == []

    def test_transactions_same_day_range_includes_the_day(self, client, store, customer, staff, product):
        client.post('/api/sales/checkout', json=sale_payload(
            store, customer, staff, [{'inventory_id': product.id, 'quantity': 1}]
        ))
        today = utcnow().date().isoformat()

        response = client.get(f'/api/transactions?store_id={store.id}&start={today}&end={today}')
        assert response.status_code == 200
        assert len(response.json) == 1

    def test_transactions_timed_end_is_exact(self, client, store, customer, staff, product):
        client.post('/api/sales/checkout', json=sale_payload(
            store, customer, staff, [{'inventory_id': product.id, 'quantity': 1}]
        ))
        today = utcnow().date().isoformat()

        response = client.get(f'/api/transactions?store_id={store.id}&start={today}&end={today}T00:00:00Z')
        assert response.status_code == 200
        assert response.json == []

    def test_transactions_require_store(self, client, db_session):
        assert client.get('/api/transactions').status_code == 400

    def test_transactions_bad_date(self, client, store):
        response = client.get(f'/api/transactions?store_id={store.id}&start=yesterday')
        assert response.status_code == 400


class TestRestockRoute:
    def test_restock_created(self, client, product, staff):
        response = client.post(f'/api/inventory/{product.id}/restock', json={
            'quantity_added': 5,
            'unit_cost_cents': 80,
            'cost_strategy': 'weighted',
            'update_selling_price': True,
            'new_selling_price_cents': 120,
            'notes': 'delivery',
            'staff_id': staff.id,
        })

        assert response.status_code == 201
        item = response.json['item']
        event = response.json['restock_event']
        # (10*50 + 5*80) / 15 = 60
        assert (item['quantity'], item['cost_price_cents'], item['selling_price_cents']) == (15, 60, 120)
        assert event['cost_strategy'] == 'weighted'
        assert event['staff_id'] == staff.id

    def test_restock_service_is_400(self, client, service_item):
        response = client.post(f'/api/inventory/{service_item.id}/restock', json={
            'quantity_added': 1, 'unit_cost_cents': 1, 'cost_strategy': 'last',
        })
        assert response.status_code == 400
        assert response.json['code'] == 'INVALID_OPERATION'

    def test_restock_bad_strategy_is_400(self, client, product):
        response = client.post(f'/api/inventory/{product.id}/restock', json={
            'quantity_added': 1, 'unit_cost_cents': 1, 'cost_strategy': 'fifo',
        })
        assert response.status_code == 400
        assert response.json['code'] == 'INVALID_ARGUMENT'

    def test_restock_unknown_item_is_404(self, client, db_session):
        response = client.post('/api/inventory/99999/restock', json={
            'quantity_added': 1, 'unit_cost_cents': 1, 'cost_strategy': 'last',
        })
        assert response.status_code == 404

    def test_restock_history(self, client, product):
        for cost in (60, 70):
            client.post(f'/api/inventory/{product.id}/restock', json={
                'quantity_added': 1, 'unit_cost_cents': cost, 'cost_strategy': 'last',
            })
        response = client.get(f'/api/inventory/{product.id}/restocks')
        assert response.status_code == 200
        assert [e['unit_cost_cents'] for e in response.json] == [70, 60]

    def test_restock_history_unknown_item(self, client, db_session):
        assert client.get('/api/inventory/99999/restocks').status_code == 404

    def test_restock_history_unexpected_error_is_generic_500(self, client, product, monkeypatch):
        def explode(**kwargs):
            raise RuntimeError("database is locked at 0xdeadbeef")

        monkeypatch.setattr(inventory_service, 'list_restock_events', explode)
        response = client.get(f'/api/inventory/{product.id}/restocks')
        assert response.status_code == 500
        assert 'deadbeef' not in response.get_data(as_text=True)

    def test_delete_item(self, client, product):
        item_id = product.id
        assert client.delete(f'/api/inventory/{item_id}').status_code == 204
        assert db.session.get(InventoryItem, item_id) is None


class TestCustomerAndStaffRoutes:
    def test_create_customer(self, client, store):
        response = client.post('/api/customers', json={'store_id': store.id, 'name': 'Tolu'})
        assert response.status_code == 201
        assert response.json['customer_number'] == 'DT01001'

    def test_create_customer_unknown_store(self, client, db_session):
        response = client.post('/api/customers', json={'store_id': 99999, 'name': 'Tolu'})
        assert response.status_code == 404

    def test_create_customer_requires_name(self, client, store):
        response = client.post('/api/customers', json={'store_id': store.id, 'name': '  '})
        assert response.status_code == 400

    def test_customer_lifecycle(self, client, customer):
        assert client.delete(f'/api/customers/{customer.id}/permanent').status_code == 400
        assert client.delete(f'/api/customers/{customer.id}').status_code == 204

        response = client.post(f'/api/customers/{customer.id}/restore')
        assert response.status_code == 200
        assert response.json['is_archived'] is False

        assert client.delete(f'/api/customers/{customer.id}').status_code == 204
        assert client.delete(f'/api/customers/{customer.id}/permanent').status_code == 204
        assert client.delete(f'/api/customers/{customer.id}').status_code == 404

    def test_staff_lifecycle(self, client, staff):
        assert client.delete(f'/api/staff/{staff.id}').status_code == 204
        assert client.post(f'/api/staff/{staff.id}/restore').json['is_archived'] is False
        assert client.delete(f'/api/staff/{staff.id}/permanent').status_code == 400

    def test_list_staff(self, client, store, staff):
        response = client.get(f'/api/staff?store_id={store.id}')
        assert response.status_code == 200
        assert [s['staff_number'] for s in response.json] == ['DT01-S001']

        client.delete(f'/api/staff/{staff.id}')
        assert client.get(f'/api/staff?store_id={store.id}').json == []
        archived = client.get(f'/api/staff?store_id={store.id}&include_archived=true').json
        assert archived[0]['is_archived'] is True


class TestReportRoutes:
    @pytest.fixture
    def sold(self, client, store, customer, staff, product, second_product):
        client.post('/api/sales/checkout', json=sale_payload(store, customer, staff, [
            {'inventory_id': product.id, 'quantity': 6},
            {'inventory_id': second_product.id, 'quantity': 1},
        ]))
        return store

    def test_profit_loss(self, client, sold):
        response = client.get(f'/api/profit-loss?store_id={sold.id}')
        assert response.status_code == 200
        by_name = {r['inventory']['name']: r for r in response.json}
        assert by_name['Widget Pro']['total_net_profit_cents'] == 6 * 80 - 6 * 50
        assert by_name['Gadget']['quantity_remaining'] == 3

    def test_dashboard_stats(self, client, sold):
        stats = client.get(f'/api/dashboard/stats?store_id={sold.id}').json
        assert stats['total_customers'] == 1
        assert stats['total_staff'] == 1
        assert stats['total_products'] == 2
        assert stats['total_transactions'] == 2
        assert stats['total_revenue_cents'] == 480 + 350
        assert stats['total_profit_cents'] == 180 + 150
        # Widget Pro has 4 left and Gadget 3, both at or below the threshold of 5
        assert {i['name'] for i in stats['low_stock_items']} == {'Widget Pro', 'Gadget'}

    def test_sales_trends(self, client, sold):
        trends = client.get(f'/api/charts/sales-trends?store_id={sold.id}').json
        assert len(trends) == 1
        assert trends[0]['revenue_cents'] == 830
        assert trends[0]['transactions'] == 2

    def test_revenue_by_type(self, client, sold):
        rows = client.get(f'/api/charts/revenue-by-type?store_id={sold.id}').json
        assert rows[0] == {'name': 'Widget Pro', 'value_cents': 480, 'type': 'product'}

    def test_ledger_events(self, client, sold):
        events = client.get(f'/api/ledger?store_id={sold.id}&entity_type=checkout').json
        assert len(events) == 2
        assert {e['event_type'] for e in events} == {'sale.completed'}

    @pytest.mark.parametrize('path', [
        '/api/profit-loss', '/api/dashboard/stats', '/api/charts/sales-trends', '/api/charts/revenue-by-type',
    ])
    def test_reports_require_store(self, client, db_session, path):
        assert client.get(path).status_code == 400
        assert client.get(f'{path}?store_id=99999').status_code == 400
