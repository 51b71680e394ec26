"""
Cart Routes
=============
JSON cart API for the signed-in customer. Every response carries the
current lines and the priced breakdown.

Endpoints:
  GET    /api/cart                      : Current cart + pricing
  POST   /api/cart/items                : Add (accumulates on repeat)
  PUT    /api/cart/items/{product_id}   : Set quantity (<= 0 removes)
  DELETE /api/cart/items/{product_id}   : Remove line
  DELETE /api/cart                      : Empty cart
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_login
from modules.cart.service import cart_service, cart_payload
from modules.pricing.calculator import calculate_breakdown

router = APIRouter(prefix="/api/cart", tags=["cart"])


# ==========================================
# Schemas
# ==========================================

class AddItemRequest(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)


class SetQuantityRequest(BaseModel):
    quantity: int


def _respond(ledger):
    return cart_payload(ledger, calculate_breakdown(ledger.lines))


# ==========================================
# 🛒 View Cart
# ==========================================

@router.get("")
async def view_cart(
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    ledger, breakdown = cart_service.get_cart_with_pricing(db, me.id)
    return cart_payload(ledger, breakdown)


# ==========================================
# ➕➖ Update Cart
# ==========================================

@router.post("/items")
async def add_to_cart(
    body: AddItemRequest,
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    ledger = cart_service.add_item(db, me.id, body.product_id, body.quantity)
    db.commit()
    return _respond(ledger)


@router.put("/items/{product_id}")
async def set_cart_quantity(
    product_id: int,
    body: SetQuantityRequest,
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    ledger = cart_service.set_quantity(db, me.id, product_id, body.quantity)
    db.commit()
    return _respond(ledger)


@router.delete("/items/{product_id}")
async def remove_from_cart(
    product_id: int,
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    ledger = cart_service.remove_item(db, me.id, product_id)
    db.commit()
    return _respond(ledger)


@router.delete("")
async def clear_cart(
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    ledger = cart_service.clear_cart(db, me.id)
    db.commit()
    return _respond(ledger)
