"""
Pytest fixtures for shopledger backend tests.

Provides test database setup, tenant fixtures (business, store, staff,
customer, inventory) and test client.
"""

import pytest

from shopledger import create_app
from shopledger.extensions import db
from shopledger.models.inventory import ITEM_TYPE_SERVICE
from shopledger.services import customer_service, inventory_service, staff_service, store_service


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'TX_RETRY_BACKOFF': 0,
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def business(db_session):
    return store_service.create_business("Acme Retail")


@pytest.fixture(scope='function')
def store(db_session, business):
    """Store DT01 with a fresh customer counter."""
    return store_service.create_store(business_id=business.id, name="Downtown", code="DT01")


@pytest.fixture(scope='function')
def other_store(db_session, business):
    return store_service.create_store(business_id=business.id, name="Uptown", code="UP01")


@pytest.fixture(scope='function')
def staff(db_session, store):
    return staff_service.create_staff(store_id=store.id, name="Ada Cashier")


@pytest.fixture(scope='function')
def customer(db_session, store):
    return customer_service.create_customer(store_id=store.id, name="Bola Customer", mobile_number="8012345678")


@pytest.fixture(scope='function')
def product(db_session, store):
    """10 units, cost 50, price 80."""
    return inventory_service.create_item(
        store_id=store.id,
        name="Widget Pro",
        cost_price_cents=50,
        selling_price_cents=80,
        quantity=10,
    )


@pytest.fixture(scope='function')
def second_product(db_session, store):
    return inventory_service.create_item(
        store_id=store.id,
        name="Gadget",
        cost_price_cents=200,
        selling_price_cents=350,
        quantity=4,
    )


@pytest.fixture(scope='function')
def service_item(db_session, store):
    return inventory_service.create_item(
        store_id=store.id,
        name="Installation",
        item_type=ITEM_TYPE_SERVICE,
        cost_price_cents=0,
        selling_price_cents=1500,
    )
