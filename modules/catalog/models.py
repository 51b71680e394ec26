"""
Catalog Module - Models
========================
Menu categories and the food items listed under them.
"""

from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, Text,
    ForeignKey, DateTime, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from config.database import Base


# ==========================================
# 🗂️ Menu Category
# ==========================================

class MenuCategory(Base):
    __tablename__ = "menu_categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    sort_order = Column(Integer, default=0)
    is_available = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    items = relationship("FoodItem", back_populates="category")

    def __repr__(self):
        return f"<MenuCategory {self.name}>"


# ==========================================
# 🍔 Food Item
# ==========================================

class FoodItem(Base):
    __tablename__ = "food_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, default="", nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category_id = Column(Integer, ForeignKey("menu_categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    image = Column(String, nullable=True)  # URL managed by the storage service
    is_available = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    category = relationship("MenuCategory", back_populates="items")

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_food_price"),
    )

    @property
    def category_name(self) -> str:
        return self.category.name if self.category else ""

    def __repr__(self):
        return f"<FoodItem {self.name} ({self.price})>"
