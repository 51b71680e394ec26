"""
Cart Module - Models
=====================
Durable cart storage: one cart per customer, one row per product.
"""

from sqlalchemy import (
    Column, Integer, String, Numeric, ForeignKey, DateTime,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from config.database import Base


class Cart(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    customer = relationship("User", foreign_keys=[customer_id])
    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.position",
    )


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("food_items.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, default="", nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)  # snapshot at first add
    quantity = Column(Integer, default=1, nullable=False)
    position = Column(Integer, default=0, nullable=False)  # insertion order for display

    cart = relationship("Cart", back_populates="items")
    product = relationship("FoodItem")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_product"),
        CheckConstraint("quantity >= 1", name="ck_cart_qty"),
        CheckConstraint("unit_price >= 0", name="ck_cart_price"),
    )
