"""
Cart Module - Service Layer
==============================
Cart management: load/persist a customer's ledger, add/set/remove items, price it.
"""

import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from config.settings import CART_STORE_DIR
from common.exceptions import ValidationError
from modules.cart.ledger import CartLedger, CartLineItem, FileCartStorage
from modules.cart.models import Cart, CartItem
from modules.catalog.service import catalog_service
from modules.pricing.calculator import PriceBreakdown, calculate_breakdown

logger = logging.getLogger("dineflow.cart")


class DbCartStorage:
    """
    Ledger storage backed by the carts/cart_items tables.
    `save` rewrites the customer's rows inside the caller's transaction;
    the route commits.
    """

    def __init__(self, db: Session, customer_id: int):
        self.db = db
        self.customer_id = customer_id

    def load(self) -> List[CartLineItem]:
        cart = self._cart()
        if not cart:
            return []
        return [
            CartLineItem(
                product_id=row.product_id,
                unit_price=row.unit_price,
                quantity=row.quantity,
                name=row.name,
            )
            for row in cart.items
        ]

    def save(self, lines: List[CartLineItem]) -> None:
        cart = self._cart()
        if not cart:
            cart = Cart(customer_id=self.customer_id)
            self.db.add(cart)
            self.db.flush()

        # Old rows must be gone before re-inserting (uq_cart_product)
        cart.items.clear()
        self.db.flush()
        for position, line in enumerate(lines):
            cart.items.append(CartItem(
                product_id=line.product_id,
                name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                position=position,
            ))
        self.db.flush()

    def _cart(self):
        return self.db.query(Cart).filter(Cart.customer_id == self.customer_id).first()


class CartService:

    def get_ledger(self, db: Session, customer_id: int) -> CartLedger:
        """Rehydrate the customer's ledger, bound to database storage."""
        return CartLedger.rehydrate(DbCartStorage(db, customer_id))

    def get_local_ledger(self, session_key: str, directory: str = None) -> CartLedger:
        """Ledger kept in a JSON file per client session (kiosks, offline clients)."""
        return CartLedger.rehydrate(FileCartStorage(directory or CART_STORE_DIR, session_key))

    def add_item(self, db: Session, customer_id: int, product_id: int, quantity: int = 1) -> CartLedger:
        """Add a menu item at its current price. Quantity must be >= 1."""
        if quantity < 1:
            raise ValidationError("quantity", "Quantity must be at least 1")
        item = catalog_service.get_orderable_item(db, product_id)
        ledger = self.get_ledger(db, customer_id)
        ledger.add_item(item.id, item.price, quantity, name=item.name)
        logger.debug(f"Cart {customer_id}: +{quantity} x item {item.id}")
        return ledger

    def set_quantity(self, db: Session, customer_id: int, product_id: int, quantity: int) -> CartLedger:
        ledger = self.get_ledger(db, customer_id)
        ledger.set_quantity(product_id, quantity)
        return ledger

    def remove_item(self, db: Session, customer_id: int, product_id: int) -> CartLedger:
        ledger = self.get_ledger(db, customer_id)
        ledger.remove_item(product_id)
        return ledger

    def clear_cart(self, db: Session, customer_id: int) -> CartLedger:
        """Remove all items from customer's cart."""
        ledger = self.get_ledger(db, customer_id)
        ledger.clear()
        return ledger

    def get_cart_with_pricing(self, db: Session, customer_id: int) -> Tuple[CartLedger, PriceBreakdown]:
        ledger = self.get_ledger(db, customer_id)
        return ledger, calculate_breakdown(ledger.lines)


def cart_payload(ledger: CartLedger, breakdown: PriceBreakdown) -> dict:
    """JSON body shared by all cart endpoints."""
    return {
        "items": [
            {**line.to_dict(), "line_total": str(breakdown.line_total(line))}
            for line in ledger.lines
        ],
        "item_count": ledger.item_count,
        "pricing": breakdown.rounded().to_dict(),
    }


# Singleton
cart_service = CartService()
