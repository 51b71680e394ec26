"""
Catalog Module - Service Layer
================================
Menu reads for the shop and cart, plus admin maintenance of categories and items.
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from common.exceptions import NotFoundError, ValidationError
from common.helpers import to_decimal
from modules.catalog.models import MenuCategory, FoodItem


class CatalogService:

    # ==========================================
    # Reads
    # ==========================================

    def list_categories(self, db: Session, include_hidden: bool = False) -> List[MenuCategory]:
        q = db.query(MenuCategory)
        if not include_hidden:
            q = q.filter(MenuCategory.is_available == True)
        return q.order_by(MenuCategory.sort_order, MenuCategory.name).all()

    def get_item(self, db: Session, item_id: int) -> Optional[FoodItem]:
        return db.query(FoodItem).filter(FoodItem.id == item_id).first()

    def list_items(self, db: Session, category_name: str = None, include_hidden: bool = False) -> List[FoodItem]:
        """Items for the menu page, optionally restricted to one category (by name)."""
        q = db.query(FoodItem).join(MenuCategory)
        if category_name:
            q = q.filter(MenuCategory.name == category_name)
        if not include_hidden:
            q = q.filter(FoodItem.is_available == True, MenuCategory.is_available == True)
        return q.order_by(MenuCategory.sort_order, FoodItem.name).all()

    def get_orderable_item(self, db: Session, item_id: int, field: str = "product_id") -> FoodItem:
        """
        Fetch an item that may go into a cart or an order.
        Raises NotFoundError for unknown ids, ValidationError for hidden items.
        """
        item = self.get_item(db, item_id)
        if not item:
            raise NotFoundError(f"Food item {item_id} not found")
        if not item.is_available or not item.category.is_available:
            raise ValidationError(field, f"'{item.name}' is currently unavailable")
        return item

    # ==========================================
    # Admin maintenance
    # ==========================================

    def create_category(self, db: Session, name: str, sort_order: int = 0) -> MenuCategory:
        name = (name or "").strip()
        if not name:
            raise ValidationError("name", "Category name is required")
        if db.query(MenuCategory.id).filter(MenuCategory.name == name).first():
            raise ValidationError("name", f"Category '{name}' already exists")
        category = MenuCategory(name=name, sort_order=sort_order)
        db.add(category)
        db.flush()
        return category

    def create_item(
        self,
        db: Session,
        name: str,
        price,
        category_id: int,
        description: str = "",
        image: str = None,
    ) -> FoodItem:
        name = (name or "").strip()
        if not name:
            raise ValidationError("name", "Item name is required")
        price = self._valid_price(price)
        category = db.query(MenuCategory).filter(MenuCategory.id == category_id).first()
        if not category:
            raise NotFoundError(f"Category {category_id} not found")

        item = FoodItem(
            name=name,
            price=price,
            category_id=category.id,
            description=description or "",
            image=image,
        )
        db.add(item)
        db.flush()
        return item

    def update_item(self, db: Session, item_id: int, **changes) -> FoodItem:
        """Partial update. Price changes never touch carts' or orders' snapshots."""
        item = self.get_item(db, item_id)
        if not item:
            raise NotFoundError(f"Food item {item_id} not found")

        if changes.get("name") is not None:
            name = changes["name"].strip()
            if not name:
                raise ValidationError("name", "Item name is required")
            item.name = name
        if changes.get("price") is not None:
            item.price = self._valid_price(changes["price"])
        if changes.get("description") is not None:
            item.description = changes["description"]
        if changes.get("is_available") is not None:
            item.is_available = bool(changes["is_available"])
        if changes.get("category_id") is not None:
            if not db.query(MenuCategory.id).filter(MenuCategory.id == changes["category_id"]).first():
                raise NotFoundError(f"Category {changes['category_id']} not found")
            item.category_id = changes["category_id"]

        db.flush()
        return item

    def deactivate_item(self, db: Session, item_id: int) -> FoodItem:
        """Soft delete: ordered items keep their reference."""
        return self.update_item(db, item_id, is_available=False)

    # ==========================================
    # Private helpers
    # ==========================================

    def _valid_price(self, price) -> Decimal:
        value = to_decimal(price)
        if value < 0:
            raise ValidationError("price", "Price cannot be negative")
        return value


# Singleton
catalog_service = CatalogService()
