# Overview: Pytest coverage for archive, restore and guarded permanent deletion.

import pytest

from shopledger.extensions import db
from shopledger.models import Customer, InventoryItem, LedgerEvent, ProfitLoss, Staff
from shopledger.services import archive_service, checkout_service, profit_loss_service
from shopledger.services.errors import InvalidOperationError, NotFoundError


def _sell_one(store, customer, staff, item):
    result = checkout_service.checkout(
        store_id=store.id,
        customer_id=customer.id,
        staff_id=staff.id,
        items=[{"inventory_id": item.id, "quantity": 1}],
    )
    assert result.success


class TestCustomerLifecycle:
    def test_archive_and_restore(self, db_session, customer):
        assert archive_service.archive_customer(customer.id).is_archived is True
        assert archive_service.restore_customer(customer.id).is_archived is False

        types = [e.event_type for e in db.session.query(LedgerEvent).order_by(LedgerEvent.id)]
        assert types[-2:] == ["customer.archived", "customer.restored"]

    def test_archive_twice_writes_one_event(self, db_session, customer):
        archive_service.archive_customer(customer.id)
        archive_service.archive_customer(customer.id)
        assert db.session.query(LedgerEvent).filter_by(event_type="customer.archived").count() == 1

    def test_permanent_delete_requires_archive(self, db_session, customer):
        with pytest.raises(InvalidOperationError):
            archive_service.delete_customer_permanently(customer.id)

    def test_permanent_delete_of_archived_customer(self, db_session, customer):
        customer_id = customer.id
        archive_service.archive_customer(customer_id)
        archive_service.delete_customer_permanently(customer_id)
        assert db.session.get(Customer, customer_id) is None

    def test_transactions_block_permanent_delete(self, db_session, store, customer, staff, product):
        _sell_one(store, customer, staff, product)
        archive_service.archive_customer(customer.id)

        with pytest.raises(InvalidOperationError) as exc:
            archive_service.delete_customer_permanently(customer.id)
        assert "purchase history" in exc.value.message
        db.session.expire_all()
        assert db.session.get(Customer, customer.id) is not None

    def test_unknown_customer(self, db_session):
        with pytest.raises(NotFoundError):
            archive_service.archive_customer(99999)


class TestStaffLifecycle:
    def test_archive_and_restore(self, db_session, staff):
        assert archive_service.archive_staff(staff.id).is_archived is True
        assert archive_service.restore_staff(staff.id).is_archived is False

    def test_checkouts_block_permanent_delete(self, db_session, store, customer, staff, product):
        _sell_one(store, customer, staff, product)
        archive_service.archive_staff(staff.id)
        with pytest.raises(InvalidOperationError):
            archive_service.delete_staff_permanently(staff.id)

    def test_permanent_delete_without_history(self, db_session, staff):
        staff_id = staff.id
        archive_service.archive_staff(staff_id)
        archive_service.delete_staff_permanently(staff_id)
        assert db.session.get(Staff, staff_id) is None


class TestInventoryDeletion:
    def test_unsold_item_can_be_deleted(self, db_session, store, product):
        item_id = product.id
        profit_loss_service.refresh_profit_loss_now(store.id, item_id)

        archive_service.delete_inventory_item(item_id)

        assert db.session.get(InventoryItem, item_id) is None
        assert db.session.query(ProfitLoss).filter_by(inventory_id=item_id).count() == 0
        assert db.session.query(LedgerEvent).filter_by(event_type="inventory.deleted").count() == 1

    def test_sold_item_cannot_be_deleted(self, db_session, store, customer, staff, product):
        _sell_one(store, customer, staff, product)
        with pytest.raises(InvalidOperationError):
            archive_service.delete_inventory_item(product.id)
        db.session.expire_all()
        assert db.session.get(InventoryItem, product.id) is not None

    def test_unknown_item(self, db_session):
        with pytest.raises(NotFoundError):
            archive_service.delete_inventory_item(99999)
