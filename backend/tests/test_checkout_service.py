# Overview: Pytest coverage for the all-or-nothing checkout processor.

"""
Checkout Tests

Covers:
- Happy path: orders, checkouts, transactions, stock and profit/loss
- Validation order: customer, staff, then items and stock
- Atomicity: any failing line leaves no trace of the sale
- Lost stock races reported as insufficient stock
"""

import pytest
from sqlalchemy import update

from shopledger.extensions import db
from shopledger.models import (
    Checkout,
    InventoryItem,
    LedgerEvent,
    Order,
    ProfitLoss,
    SaleTransaction,
)
from shopledger.services import archive_service, checkout_service, customer_service, inventory_service
from shopledger.services.checkout_service import CheckoutItem
from shopledger.services.errors import InsufficientStockError, StockConflictError


def _checkout(store, customer, staff, items, **kwargs):
    return checkout_service.checkout(
        store_id=store.id,
        customer_id=customer.id,
        staff_id=staff.id,
        items=items,
        **kwargs,
    )


def _quantity(item_id):
    db.session.expire_all()
    return db.session.get(InventoryItem, item_id).quantity


def _sales_rows():
    return (
        db.session.query(Order).count(),
        db.session.query(Checkout).count(),
        db.session.query(SaleTransaction).count(),
    )


class TestSuccessfulCheckout:
    def test_end_to_end_single_line(self, db_session, store, customer, staff, product):
        result = _checkout(store, customer, staff, [{"inventory_id": product.id, "quantity": 3}])

        assert result.success
        assert result.message == "Sale completed successfully"
        assert len(result.checkout_ids) == 1
        assert result.total_price_cents == 240

        order = db.session.query(Order).one()
        assert (order.quantity, order.unit_price_cents, order.total_price_cents) == (3, 80, 240)
        assert _quantity(product.id) == 7

        row = db.session.query(ProfitLoss).filter_by(inventory_id=product.id).one()
        assert row.totals() == (3, 7, 240, 90)

        # A second sale for more than remains is rejected and changes nothing
        result = _checkout(store, customer, staff, [{"inventory_id": product.id, "quantity": 8}])
        assert not result.success
        assert result.error_code == "INSUFFICIENT_STOCK"
        assert result.details["available"] == 7
        assert result.message == "Sorry, we only have 7 Widget Pro in stock."
        assert _quantity(product.id) == 7
        assert _sales_rows() == (1, 1, 1)

    def test_multi_line_sale_shares_reference(
        self, db_session, store, customer, staff, product, second_product, service_item
    ):
        result = _checkout(store, customer, staff, [
            CheckoutItem(inventory_id=product.id, quantity=2),
            CheckoutItem(inventory_id=second_product.id, quantity=1, custom_price_cents=300),
            CheckoutItem(inventory_id=service_item.id, quantity=1),
        ], payment_method="transfer")

        assert result.success
        assert len(result.checkout_ids) == 3
        assert result.total_price_cents == 160 + 300 + 1500

        checkouts = db.session.query(Checkout).order_by(Checkout.id).all()
        assert {c.sale_reference for c in checkouts} == {result.sale_reference}
        assert {c.payment_method for c in checkouts} == {"transfer"}
        assert {c.payment_status for c in checkouts} == {"completed"}
        assert [c.id for c in checkouts] == result.checkout_ids

        txs = db.session.query(SaleTransaction).all()
        assert {t.customer_id for t in txs} == {customer.id}
        assert sorted(t.checkout_id for t in txs) == result.checkout_ids

        assert _quantity(product.id) == 8
        assert _quantity(second_product.id) == 3
        assert _quantity(service_item.id) == 0

        assert db.session.query(LedgerEvent).filter_by(event_type="sale.completed").count() == 3

    def test_gateway_payment_is_pending(self, db_session, store, customer, staff, product):
        result = _checkout(
            store, customer, staff, [{"inventory_id": product.id, "quantity": 1}],
            payment_method="flutterwave", payment_reference="FLW-123",
        )
        assert result.success
        checkout = db.session.get(Checkout, result.checkout_ids[0])
        assert checkout.payment_status == "pending"
        assert checkout.payment_reference == "FLW-123"

    def test_services_never_run_out(self, db_session, store, customer, staff, service_item):
        result = _checkout(store, customer, staff, [{"inventory_id": service_item.id, "quantity": 500}])
        assert result.success
        assert _quantity(service_item.id) == 0

    def test_exact_stock_can_be_sold(self, db_session, store, customer, staff, product):
        assert _checkout(store, customer, staff, [{"inventory_id": product.id, "quantity": 10}]).success
        assert _quantity(product.id) == 0


class TestValidation:
    def test_unknown_customer(self, db_session, store, staff, product):
        result = checkout_service.checkout(
            store_id=store.id, customer_id=99999, staff_id=staff.id,
            items=[{"inventory_id": product.id, "quantity": 1}],
        )
        assert result.error_code == "NOT_FOUND"
        assert result.message == "Please select a valid customer to complete this sale."

    def test_customer_checked_before_staff(self, db_session, store, product):
        result = checkout_service.checkout(
            store_id=store.id, customer_id=99999, staff_id=99999,
            items=[{"inventory_id": product.id, "quantity": 1}],
        )
        assert result.details["entity"] == "customer"

    def test_customer_of_other_store(self, db_session, store, other_store, staff, product):
        outsider = customer_service.create_customer(store_id=other_store.id, name="Outsider")
        result = _checkout(store, outsider, staff, [{"inventory_id": product.id, "quantity": 1}])
        assert result.error_code == "NOT_FOUND"

    def test_archived_customer(self, db_session, store, customer, staff, product):
        archive_service.archive_customer(customer.id)
        result = _checkout(store, customer, staff, [{"inventory_id": product.id, "quantity": 1}])
        assert result.error_code == "NOT_FOUND"
        assert result.details["entity"] == "customer"

    def test_unknown_staff(self, db_session, store, customer, product):
        result = checkout_service.checkout(
            store_id=store.id, customer_id=customer.id, staff_id=99999,
            items=[{"inventory_id": product.id, "quantity": 1}],
        )
        assert result.message == "Please select a valid staff member to complete this sale."

    def test_archived_staff(self, db_session, store, customer, staff, product):
        archive_service.archive_staff(staff.id)
        result = _checkout(store, customer, staff, [{"inventory_id": product.id, "quantity": 1}])
        assert result.details["entity"] == "staff"

    def test_unknown_item(self, db_session, store, customer, staff):
        result = _checkout(store, customer, staff, [{"inventory_id": 99999, "quantity": 1}])
        assert result.error_code == "NOT_FOUND"
        assert result.message == "One of the items in your cart is no longer available."

    def test_item_of_other_store(self, db_session, store, other_store, customer, staff):
        foreign = inventory_service.create_item(store_id=other_store.id, name="Foreign", quantity=5)
        result = _checkout(store, customer, staff, [{"inventory_id": foreign.id, "quantity": 1}])
        assert result.error_code == "NOT_FOUND"
        assert _quantity(foreign.id) == 5

    @pytest.mark.parametrize("items", [
        [],
        [{"inventory_id": 1, "quantity": 0}],
        [{"inventory_id": 1, "quantity": -2}],
        [{"inventory_id": 1, "quantity": 1.5}],
        [{"inventory_id": 1, "quantity": 1, "custom_price_cents": -1}],
        ["not-an-item"],
    ])
    def test_invalid_items(self, db_session, store, customer, staff, items):
        result = _checkout(store, customer, staff, items)
        assert result.error_code == "INVALID_ARGUMENT"

    def test_unknown_payment_method(self, db_session, store, customer, staff, product):
        result = _checkout(
            store, customer, staff, [{"inventory_id": product.id, "quantity": 1}], payment_method="cheque"
        )
        assert result.error_code == "INVALID_ARGUMENT"


class TestAtomicity:
    def test_failing_line_rolls_back_whole_sale(
        self, db_session, store, customer, staff, product, second_product
    ):
        result = _checkout(store, customer, staff, [
            {"inventory_id": product.id, "quantity": 2},
            {"inventory_id": second_product.id, "quantity": 5},  # only 4 in stock
        ])

        assert not result.success
        assert result.error_code == "INSUFFICIENT_STOCK"
        assert result.details["item"] == "Gadget"
        assert result.details["available"] == 4
        assert _sales_rows() == (0, 0, 0)
        assert _quantity(product.id) == 10
        assert _quantity(second_product.id) == 4
        assert db.session.query(ProfitLoss).count() == 0

    def test_repeated_item_quantities_are_summed(self, db_session, store, customer, staff, product):
        result = _checkout(store, customer, staff, [
            {"inventory_id": product.id, "quantity": 6},
            {"inventory_id": product.id, "quantity": 6},
        ])
        assert result.error_code == "INSUFFICIENT_STOCK"
        assert result.details["requested"] == 12
        assert _quantity(product.id) == 10

    def test_write_failure_midway_rolls_back(
        self, db_session, store, customer, staff, product, second_product, monkeypatch
    ):
        real_decrement = checkout_service.decrement_stock

        def flaky_decrement(item, quantity):
            if item.id == second_product.id:
                raise RuntimeError("disk full")
            return real_decrement(item, quantity)

        monkeypatch.setattr(checkout_service, "decrement_stock", flaky_decrement)

        with pytest.raises(RuntimeError):
            _checkout(store, customer, staff, [
                {"inventory_id": product.id, "quantity": 2},
                {"inventory_id": second_product.id, "quantity": 1},
            ])

        assert _sales_rows() == (0, 0, 0)
        assert _quantity(product.id) == 10
        assert db.session.query(LedgerEvent).filter_by(event_type="sale.completed").count() == 0

    def test_lost_race_reports_fresh_stock(
        self, db_session, store, customer, staff, product, monkeypatch
    ):
        def racing_decrement(item, quantity):
            raise StockConflictError(item.id, quantity)

        monkeypatch.setattr(checkout_service, "decrement_stock", racing_decrement)

        with pytest.raises(InsufficientStockError) as exc:
            checkout_service.process_checkout(
                store_id=store.id,
                customer_id=customer.id,
                staff_id=staff.id,
                items=[{"inventory_id": product.id, "quantity": 3}],
            )

        assert exc.value.available == 10
        assert exc.value.requested == 3
        assert _sales_rows() == (0, 0, 0)

    def test_conflict_at_write_time_reports_stored_stock(
        self, db_session, store, customer, staff, product, monkeypatch
    ):
        # Another till sold 8 units after this cart passed its stock check
        db.session.execute(
            update(InventoryItem)
            .where(InventoryItem.id == product.id)
            .values(quantity=2)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()

        def load_without_check(store_id, lines):
            return {
                line.inventory_id: inventory_service.get_item(line.inventory_id, store_id=store_id, lock=True)
                for line in lines
            }

        monkeypatch.setattr(checkout_service, "_load_and_check_stock", load_without_check)

        with pytest.raises(InsufficientStockError) as exc:
            checkout_service.process_checkout(
                store_id=store.id,
                customer_id=customer.id,
                staff_id=staff.id,
                items=[{"inventory_id": product.id, "quantity": 3}],
            )

        assert exc.value.message == "Sorry, we only have 2 Widget Pro in stock."
        assert exc.value.available == 2
        assert exc.value.requested == 3
        assert _sales_rows() == (0, 0, 0)
        assert _quantity(product.id) == 2
        assert db.session.query(ProfitLoss).count() == 0
