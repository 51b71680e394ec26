"""
Order Module - Service Layer
===============================
Checkout, admin-created orders, status transitions, and order queries.
"""

import logging
import time
from typing import Dict, List, Optional, Tuple

from sqlalchemy import desc, func as sa_func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.settings import (
    ORDER_TRANSITION_POLICY, ESTIMATED_DELIVERY_MINUTES, CUSTOMER_SELF_CANCEL,
    DEFAULT_PAGE_SIZE, CUSTOMER_MAX_PAGE_SIZE, ADMIN_MAX_PAGE_SIZE,
)
from common.exceptions import (
    AuthenticationRequiredError, AuthorizationError, ConflictError,
    IllegalTransitionError, NotFoundError, ValidationError,
)
from common.helpers import now_utc, clamp_page, pagination_meta, money
from modules.cart.ledger import CartLedger, CartLineItem
from modules.cart.service import cart_service
from modules.catalog.service import catalog_service
from modules.order.checkout import CheckoutDetails, validate_checkout
from modules.order.models import Order, OrderItem, OrderStatusLog
from modules.order.state_machine import (
    OrderStatus, TransitionPolicy, CUSTOMER_CANCELLABLE,
    parse_policy, parse_status, validate_transition,
)
from modules.pricing.calculator import PriceBreakdown, calculate_breakdown
from modules.user.models import User

logger = logging.getLogger("dineflow.order")

# Compare-and-swap rounds before a status write gives up under contention
STATUS_WRITE_ATTEMPTS = 3


def generate_order_number(db: Session) -> str:
    """ORD + epoch millis + 3-digit running count, e.g. ORD1718000000000042."""
    count = db.query(sa_func.count(Order.id)).scalar() or 0
    timestamp = int(time.time() * 1000)
    seq = count + 1
    while True:
        number = f"ORD{timestamp}{seq:03d}"
        if not db.query(Order.id).filter(Order.order_number == number).first():
            return number
        seq += 1


class OrderService:

    def __init__(self, policy: Optional[TransitionPolicy] = None, customer_self_cancel: Optional[bool] = None):
        self.policy = policy or parse_policy(ORDER_TRANSITION_POLICY)
        self.customer_self_cancel = CUSTOMER_SELF_CANCEL if customer_self_cancel is None else customer_self_cancel

    # ==========================================
    # Checkout
    # ==========================================

    def checkout(self, db: Session, customer: Optional[User], details: CheckoutDetails) -> Order:
        """
        Create an order from the customer's cart:
        1. Validate cart + address + contact + payment (field-level errors)
        2. Freeze items and the cent-rounded price breakdown
        3. Insert a `pending` order with a fresh order number
        4. Clear the cart

        Everything happens in the caller's transaction; on any error nothing
        is written and the cart is untouched.
        """
        if customer is None:
            raise AuthenticationRequiredError("Please sign in to place an order")

        ledger = cart_service.get_ledger(db, customer.id)
        lines = ledger.lines
        validate_checkout(lines, details)

        order = self._create_order(db, customer, lines, details, created_by=customer.id)
        ledger.clear()
        db.flush()

        logger.info(
            f"Order {order.order_number} placed by customer #{customer.id} "
            f"({len(lines)} lines, total {order.total})"
        )
        return order

    def create_order_for_customer(
        self,
        db: Session,
        admin: Optional[User],
        customer_id: int,
        items: List[Tuple[int, int]],
        details: CheckoutDetails,
    ) -> Order:
        """
        Admin places an order on a customer's behalf from explicit
        (food_id, quantity) pairs, priced at current menu prices.
        The customer's own cart is not touched.
        """
        self._require_admin(admin)

        customer = db.query(User).filter(User.id == customer_id).first()
        if not customer:
            raise NotFoundError(f"Customer {customer_id} not found")

        ledger = CartLedger()
        for food_id, quantity in items:
            if quantity < 1:
                raise ValidationError("items", "Quantity must be at least 1")
            item = catalog_service.get_orderable_item(db, food_id, field="items")
            ledger.add_item(item.id, item.price, quantity, name=item.name)

        validate_checkout(ledger.lines, details)
        order = self._create_order(db, customer, ledger.lines, details, created_by=admin.id)
        db.flush()

        logger.info(f"Order {order.order_number} created by admin #{admin.id} for customer #{customer.id}")
        return order

    # ==========================================
    # Status transitions
    # ==========================================

    def update_status(self, db: Session, order_id: int, target, actor: Optional[User]) -> Order:
        """
        Admin status change, validated against the configured policy.
        The write only lands if the status is still the one that was validated,
        so a concurrent move into a terminal status is never overwritten.
        """
        self._require_admin(actor)
        order = self.get_order(db, order_id)

        def check(current):
            validate_transition(current, target_status, self.policy)

        try:
            target_status = parse_status(target, order.status)
            self._apply_transition(db, order, target_status, check, actor_id=actor.id)
        except IllegalTransitionError as e:
            logger.warning(f"Rejected status change on {order.order_number}: {e.message}")
            raise
        logger.info(f"Order {order.order_number}: status -> {target_status.value} by admin #{actor.id}")
        return order

    def cancel_by_customer(self, db: Session, customer_id: int, order_id: int) -> Order:
        """
        Customers may cancel their own order while it is pending or confirmed,
        and only when CUSTOMER_SELF_CANCEL is on. Otherwise status changes are
        admin-only.
        """
        if not self.customer_self_cancel:
            raise AuthorizationError("Orders can only be cancelled by the restaurant")
        order = self.get_order_for_customer(db, customer_id, order_id)

        def check(current):
            if OrderStatus(current) not in CUSTOMER_CANCELLABLE:
                raise IllegalTransitionError(
                    current=current,
                    target=OrderStatus.CANCELLED.value,
                    message="Order cannot be cancelled at this stage",
                )

        self._apply_transition(
            db, order, OrderStatus.CANCELLED, check,
            actor_id=customer_id,
            note="Cancelled by customer",
        )
        logger.info(f"Order {order.order_number} cancelled by customer #{customer_id}")
        return order

    # ==========================================
    # Query
    # ==========================================

    def get_order(self, db: Session, order_id: int) -> Order:
        order = db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    def get_order_for_customer(self, db: Session, customer_id: int, order_id: int) -> Order:
        """Customers only see their own orders; anyone else's reads as not found."""
        order = db.query(Order).filter(
            Order.id == order_id,
            Order.customer_id == customer_id,
        ).first()
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    def list_customer_orders(
        self, db: Session, customer_id: int, page: int = 1, limit: int = None,
    ) -> Tuple[List[Order], dict]:
        page, limit = clamp_page(page, limit, DEFAULT_PAGE_SIZE, CUSTOMER_MAX_PAGE_SIZE)
        q = db.query(Order).filter(Order.customer_id == customer_id)
        return self._paginate(q, page, limit)

    def list_orders(
        self, db: Session, page: int = 1, limit: int = None, status: str = None,
    ) -> Tuple[List[Order], dict]:
        """Admin list, newest first. An unrecognised status filter is ignored."""
        page, limit = clamp_page(page, limit, DEFAULT_PAGE_SIZE, ADMIN_MAX_PAGE_SIZE)
        q = db.query(Order)
        if status and status in {s.value for s in OrderStatus}:
            q = q.filter(Order.status == status)
        return self._paginate(q, page, limit)

    def get_status_counts(self, db: Session) -> Dict[str, int]:
        """Order count per status (every status present, zero if unused) plus total."""
        rows = db.query(Order.status, sa_func.count(Order.id)).group_by(Order.status).all()
        counts = {s.value: 0 for s in OrderStatus}
        for status, count in rows:
            counts[status] = count
        counts["total"] = sum(count for _, count in rows)
        return counts

    def get_status_history(self, db: Session, order_id: int) -> List[OrderStatusLog]:
        order = self.get_order(db, order_id)
        return list(order.status_logs)

    # ==========================================
    # Private Helpers
    # ==========================================

    def _create_order(
        self,
        db: Session,
        customer: User,
        lines: List[CartLineItem],
        details: CheckoutDetails,
        created_by: int,
    ) -> Order:
        pricing: PriceBreakdown = calculate_breakdown(lines).rounded()
        now = now_utc()

        order = Order(
            order_number=generate_order_number(db),
            customer_id=customer.id,
            status=OrderStatus.PENDING.value,
            street=details.address.street,
            city=details.address.city,
            zip_code=details.address.zip_code,
            phone=details.contact.phone,
            email=details.contact.email or customer.email,
            payment_method=details.payment_method,
            special_instructions=details.special_instructions,
            subtotal=pricing.subtotal,
            delivery_fee=pricing.delivery_fee,
            tax=pricing.tax,
            total=pricing.total,
            estimated_delivery_minutes=ESTIMATED_DELIVERY_MINUTES,
            created_at=now,
        )
        for line in lines:
            order.items.append(OrderItem(
                food_id=line.product_id,
                name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                line_total=money(line.line_total),
            ))
        db.add(order)
        try:
            db.flush()  # get order.id
        except IntegrityError as e:
            if "order_number" not in str(e.orig):
                raise
            # A concurrent checkout took the same number first
            logger.warning(f"Order number {order.order_number} already taken: {e.orig}")
            raise ConflictError("Another order was placed at the same moment; please try again")

        db.add(OrderStatusLog(
            order_id=order.id,
            from_status=None,
            to_status=OrderStatus.PENDING.value,
            changed_by=created_by,
            created_at=now,
        ))
        return order

    def _apply_transition(
        self,
        db: Session,
        order: Order,
        target: OrderStatus,
        check,
        actor_id: int,
        note: str = None,
    ) -> None:
        """
        Compare-and-swap the order status.
        `check(current)` raises IllegalTransitionError when `current -> target`
        is not allowed. The UPDATE is conditioned on the exact status that was
        checked; if another writer changed it in between, the order is reloaded
        and checked again against what it is now.
        """
        for _ in range(STATUS_WRITE_ATTEMPTS):
            previous = order.status
            check(previous)

            now = now_utc()
            values = {"status": target.value, "updated_at": now}
            if target == OrderStatus.DELIVERED:
                values["actual_delivery_time"] = now

            result = db.execute(
                update(Order)
                .where(Order.id == order.id, Order.status == previous)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                db.add(OrderStatusLog(
                    order_id=order.id,
                    from_status=previous,
                    to_status=target.value,
                    changed_by=actor_id,
                    note=note,
                    created_at=now,
                ))
                db.flush()
                db.refresh(order)
                return

            db.refresh(order)
            logger.warning(
                f"Concurrent status change on {order.order_number}: "
                f"expected {previous}, found {order.status}"
            )

        raise ConflictError(f"Order {order.order_number} is being updated by someone else; please try again")

    def _paginate(self, q, page: int, limit: int) -> Tuple[List[Order], dict]:
        total = q.count()
        orders = (
            q.order_by(desc(Order.created_at), desc(Order.id))
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return orders, pagination_meta(page, limit, total)

    def _require_admin(self, actor: Optional[User]) -> None:
        if actor is None:
            raise AuthenticationRequiredError()
        if not actor.is_admin:
            raise AuthorizationError()


# Singleton
order_service = OrderService()
