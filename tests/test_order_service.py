import re
from decimal import Decimal

import pytest
from sqlalchemy import update

from common.exceptions import (
    AuthenticationRequiredError, AuthorizationError, ConflictError,
    IllegalTransitionError, NotFoundError, ValidationError,
)
from modules.cart.service import cart_service
from modules.order.checkout import CheckoutDetails
from modules.order.models import Order, OrderStatusLog
from modules.order.service import OrderService, order_service
from modules.order.state_machine import TransitionPolicy


def _details(**overrides):
    fields = dict(
        street="1 Main St", city="Springfield", zip_code="10001",
        phone="+15551230001", payment_method="card",
    )
    fields.update(overrides)
    return CheckoutDetails.build(**fields)


def _fill_cart(db, customer, menu):
    cart_service.add_item(db, customer.id, menu["burger"].id, 2)
    cart_service.add_item(db, customer.id, menu["salad"].id, 1)


@pytest.fixture()
def placed_order(db, customer, menu):
    _fill_cart(db, customer, menu)
    order = order_service.checkout(db, customer, _details())
    db.commit()
    return order


# ==========================================
# Checkout
# ==========================================

def test_checkout_freezes_items_and_prices(db, customer, menu):
    _fill_cart(db, customer, menu)

    order = order_service.checkout(db, customer, _details())
    db.commit()

    assert order.status == "pending"
    assert re.fullmatch(r"ORD\d{13}\d{3,}", order.order_number)
    assert [(i.name, i.quantity) for i in order.items] == [("Burger", 2), ("Salad", 1)]
    assert order.subtotal == Decimal("13.50")
    assert order.delivery_fee == Decimal("2.99")
    assert order.tax == Decimal("1.35")
    assert order.total == Decimal("17.84")
    assert order.email == customer.email
    assert order.estimated_delivery_minutes == 30


def test_checkout_clears_the_cart(db, customer, menu):
    _fill_cart(db, customer, menu)
    order_service.checkout(db, customer, _details())
    db.commit()

    assert cart_service.get_ledger(db, customer.id).is_empty()


def test_checkout_writes_creation_log(db, placed_order):
    logs = order_service.get_status_history(db, placed_order.id)
    assert [(log.from_status, log.to_status) for log in logs] == [(None, "pending")]


def test_checkout_requires_identity(db):
    with pytest.raises(AuthenticationRequiredError):
        order_service.checkout(db, None, _details())


def test_checkout_rejects_empty_cart(db, customer, menu):
    with pytest.raises(ValidationError) as exc:
        order_service.checkout(db, customer, _details())
    assert exc.value.field == "items"
    assert db.query(Order).count() == 0


@pytest.mark.parametrize("override, field", [
    ({"street": "  "}, "delivery_address.street"),
    ({"city": ""}, "delivery_address.city"),
    ({"zip_code": ""}, "delivery_address.zip_code"),
    ({"phone": ""}, "contact_info.phone"),
    ({"payment_method": "bitcoin"}, "payment_method"),
])
def test_checkout_validation_leaves_cart_and_orders_untouched(db, customer, menu, override, field):
    _fill_cart(db, customer, menu)
    db.commit()

    with pytest.raises(ValidationError) as exc:
        order_service.checkout(db, customer, _details(**override))
    db.rollback()

    assert exc.value.field == field
    assert db.query(Order).count() == 0
    assert cart_service.get_ledger(db, customer.id).item_count == 3


def test_later_price_change_does_not_touch_order(db, placed_order, menu):
    menu["burger"].price = Decimal("9.00")
    db.commit()
    db.refresh(placed_order)

    assert placed_order.items[0].unit_price == Decimal("5.00")
    assert placed_order.total == Decimal("17.84")


def test_order_numbers_are_unique(db, customer, menu):
    numbers = set()
    for _ in range(3):
        cart_service.add_item(db, customer.id, menu["soda"].id, 1)
        numbers.add(order_service.checkout(db, customer, _details()).order_number)
    assert len(numbers) == 3


# ==========================================
# Admin-created orders
# ==========================================

def test_admin_creates_order_for_customer(db, admin, customer, menu):
    cart_service.add_item(db, customer.id, menu["soda"].id, 4)

    order = order_service.create_order_for_customer(
        db, admin, customer.id, [(menu["burger"].id, 1), (menu["soda"].id, 2)], _details(payment_method="cash"),
    )
    db.commit()

    assert order.customer_id == customer.id
    assert order.subtotal == Decimal("7.50")
    assert order.payment_method == "cash"
    # The customer's own cart is left alone
    assert cart_service.get_ledger(db, customer.id).item_count == 4


def test_admin_create_order_checks_roles_and_items(db, admin, customer, menu):
    with pytest.raises(AuthorizationError):
        order_service.create_order_for_customer(db, customer, customer.id, [(menu["soda"].id, 1)], _details())
    with pytest.raises(NotFoundError):
        order_service.create_order_for_customer(db, admin, 9999, [(menu["soda"].id, 1)], _details())
    with pytest.raises(ValidationError) as exc:
        order_service.create_order_for_customer(db, admin, customer.id, [], _details())
    assert exc.value.field == "items"


# ==========================================
# Status transitions
# ==========================================

def test_admin_walks_order_to_delivered(db, admin, placed_order):
    for status in ("confirmed", "preparing", "out_for_delivery"):
        order_service.update_status(db, placed_order.id, status, admin)
        assert placed_order.actual_delivery_time is None

    order_service.update_status(db, placed_order.id, "delivered", admin)
    db.commit()

    assert placed_order.status == "delivered"
    assert placed_order.actual_delivery_time is not None
    history = [log.to_status for log in order_service.get_status_history(db, placed_order.id)]
    assert history == ["pending", "confirmed", "preparing", "out_for_delivery", "delivered"]


def test_delivery_time_is_stamped_once(db, admin, placed_order):
    order_service.update_status(db, placed_order.id, "delivered", admin)
    db.commit()
    stamped = placed_order.actual_delivery_time

    with pytest.raises(IllegalTransitionError):
        order_service.update_status(db, placed_order.id, "delivered", admin)
    db.rollback()
    db.refresh(placed_order)

    assert placed_order.actual_delivery_time == stamped


def test_status_update_requires_admin(db, customer, placed_order):
    with pytest.raises(AuthenticationRequiredError):
        order_service.update_status(db, placed_order.id, "confirmed", None)
    with pytest.raises(AuthorizationError):
        order_service.update_status(db, placed_order.id, "confirmed", customer)


def test_status_update_unknown_order(db, admin):
    with pytest.raises(NotFoundError):
        order_service.update_status(db, 12345, "confirmed", admin)


def test_terminal_order_is_immutable(db, admin, placed_order):
    order_service.update_status(db, placed_order.id, "cancelled", admin)
    db.commit()

    with pytest.raises(IllegalTransitionError) as exc:
        order_service.update_status(db, placed_order.id, "confirmed", admin)
    assert exc.value.current == "cancelled"
    assert placed_order.status == "cancelled"


def test_sequential_policy_rejects_skips(db, admin, placed_order):
    strict = OrderService(policy=TransitionPolicy.SEQUENTIAL)

    with pytest.raises(IllegalTransitionError):
        strict.update_status(db, placed_order.id, "delivered", admin)
    strict.update_status(db, placed_order.id, "confirmed", admin)

    assert placed_order.status == "confirmed"


def test_permissive_policy_allows_skips(db, admin, placed_order):
    OrderService(policy=TransitionPolicy.PERMISSIVE).update_status(db, placed_order.id, "delivered", admin)
    assert placed_order.status == "delivered"


def test_stale_read_cannot_overwrite_terminal_status(db, admin, placed_order):
    assert placed_order.status == "pending"
    # Another writer cancels the order behind this session's back
    db.execute(
        update(Order)
        .where(Order.id == placed_order.id)
        .values(status="cancelled")
        .execution_options(synchronize_session=False)
    )
    assert placed_order.status == "pending"

    with pytest.raises(IllegalTransitionError) as exc:
        order_service.update_status(db, placed_order.id, "confirmed", admin)

    assert exc.value.current == "cancelled"
    assert placed_order.status == "cancelled"
    assert db.query(OrderStatusLog).filter(OrderStatusLog.to_status == "confirmed").count() == 0


def test_history_records_status_found_at_write_time(db, admin, placed_order):
    assert placed_order.status == "pending"
    # Another writer confirms the order behind this session's back
    db.execute(
        update(Order)
        .where(Order.id == placed_order.id)
        .values(status="confirmed")
        .execution_options(synchronize_session=False)
    )

    order_service.update_status(db, placed_order.id, "preparing", admin)

    last = order_service.get_status_history(db, placed_order.id)[-1]
    assert (last.from_status, last.to_status) == ("confirmed", "preparing")
    assert placed_order.status == "preparing"


def test_order_number_collision_is_a_conflict(db, customer, menu, placed_order, monkeypatch):
    taken = placed_order.order_number
    monkeypatch.setattr("modules.order.service.generate_order_number", lambda session: taken)
    cart_service.add_item(db, customer.id, menu["soda"].id, 1)
    db.commit()

    with pytest.raises(ConflictError):
        order_service.checkout(db, customer, _details())
    db.rollback()

    assert db.query(Order).count() == 1
    assert cart_service.get_ledger(db, customer.id).item_count == 1


# ==========================================
# Customer cancel and reads
# ==========================================

def test_customer_cancel_is_off_by_default(db, customer, placed_order):
    assert order_service.customer_self_cancel is False

    with pytest.raises(AuthorizationError):
        order_service.cancel_by_customer(db, customer.id, placed_order.id)
    db.refresh(placed_order)

    assert placed_order.status == "pending"
    assert [log.to_status for log in placed_order.status_logs] == ["pending"]


def test_customer_can_cancel_pending_order_when_enabled(db, customer, placed_order):
    self_cancel = OrderService(customer_self_cancel=True)

    order = self_cancel.cancel_by_customer(db, customer.id, placed_order.id)

    assert order.status == "cancelled"
    assert order.status_logs[-1].note == "Cancelled by customer"


def test_customer_cannot_cancel_once_preparing(db, admin, customer, placed_order):
    order_service.update_status(db, placed_order.id, "preparing", admin)

    with pytest.raises(IllegalTransitionError) as exc:
        OrderService(customer_self_cancel=True).cancel_by_customer(db, customer.id, placed_order.id)
    assert exc.value.current == "preparing"


def test_customer_cannot_touch_other_customers_order(db, other_customer, placed_order):
    with pytest.raises(NotFoundError):
        order_service.get_order_for_customer(db, other_customer.id, placed_order.id)
    with pytest.raises(NotFoundError):
        OrderService(customer_self_cancel=True).cancel_by_customer(db, other_customer.id, placed_order.id)


def test_status_counts(db, admin, customer, menu):
    for _ in range(3):
        cart_service.add_item(db, customer.id, menu["soda"].id, 1)
        order_service.checkout(db, customer, _details())
    first = db.query(Order).order_by(Order.id).first()
    order_service.update_status(db, first.id, "confirmed", admin)

    counts = order_service.get_status_counts(db)

    assert counts["pending"] == 2
    assert counts["confirmed"] == 1
    assert counts["delivered"] == 0
    assert counts["total"] == 3


def test_admin_list_filters_and_paginates(db, admin, customer, menu):
    for _ in range(5):
        cart_service.add_item(db, customer.id, menu["soda"].id, 1)
        order_service.checkout(db, customer, _details())
    newest = db.query(Order).order_by(Order.id.desc()).first()
    order_service.update_status(db, newest.id, "confirmed", admin)

    orders, meta = order_service.list_orders(db, page=1, limit=2)
    assert [o.id for o in orders][0] == newest.id
    assert meta == {"current_page": 1, "total_pages": 3, "total_orders": 5, "has_next": True, "has_prev": False}

    confirmed, meta = order_service.list_orders(db, status="confirmed")
    assert [o.id for o in confirmed] == [newest.id]

    everything, meta = order_service.list_orders(db, status="bogus")
    assert meta["total_orders"] == 5
