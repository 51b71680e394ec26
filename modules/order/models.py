"""
Order Module - Models
======================
Order with a frozen item + price snapshot, and its status history.
"""

from sqlalchemy import (
    Column, Integer, String, Numeric, Text,
    ForeignKey, DateTime, Index, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from config.database import Base
from modules.order.state_machine import OrderStatus, TERMINAL_STATUSES


class PaymentMethod:
    CASH = "cash"
    CARD = "card"

    ALL = (CASH, CARD)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String, unique=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    status = Column(String, default=OrderStatus.PENDING.value, nullable=False, index=True)

    # Delivery address
    street = Column(String, nullable=False)
    city = Column(String, nullable=False)
    zip_code = Column(String, nullable=False)

    # Contact
    phone = Column(String, nullable=False)
    email = Column(String, nullable=True)

    payment_method = Column(String, nullable=False)  # cash / card
    special_instructions = Column(Text, default="", nullable=False)

    # Pricing snapshot (cent-rounded at creation)
    subtotal = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    estimated_delivery_minutes = Column(Integer, default=30, nullable=False)
    actual_delivery_time = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    customer = relationship("User", foreign_keys=[customer_id])
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id")
    status_logs = relationship("OrderStatusLog", back_populates="order", order_by="OrderStatusLog.id")

    __table_args__ = (
        Index("ix_orders_customer_created", "customer_id", "created_at"),
        CheckConstraint("payment_method IN ('cash', 'card')", name="ck_order_payment_method"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in {s.value for s in TERMINAL_STATUSES}

    def __repr__(self):
        return f"<Order {self.order_number} ({self.status})>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    food_id = Column(Integer, ForeignKey("food_items.id", ondelete="RESTRICT"), nullable=False)

    # Snapshot at time of purchase
    name = Column(String, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    line_total = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    food = relationship("FoodItem")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_item_qty"),
    )


class OrderStatusLog(Base):
    __tablename__ = "order_status_logs"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    from_status = Column(String, nullable=True)  # None for the creation entry
    to_status = Column(String, nullable=False)
    changed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    note = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    order = relationship("Order", back_populates="status_logs")
