"""
Order Module - Customer Routes
================================
Checkout from cart, order history, order detail, self-cancel.

Endpoints:
  POST /api/orders               : Place order from the current cart
  GET  /api/orders               : Own orders (paginated, newest first)
  GET  /api/orders/{id}          : One own order
  PUT  /api/orders/{id}/cancel   : Cancel while pending/confirmed
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_login
from modules.order.schemas import CheckoutRequest, order_to_dict
from modules.order.service import order_service

router = APIRouter(prefix="/api/orders", tags=["order"])


# ==========================================
# POST /api/orders
# ==========================================

@router.post("")
async def place_order(
    body: CheckoutRequest,
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    order = order_service.checkout(db, me, body.to_details())
    db.commit()
    db.refresh(order)
    return JSONResponse({
        "message": "Order placed successfully",
        "order_number": order.order_number,
        "order": order_to_dict(order),
    }, status_code=201)


# ==========================================
# GET /api/orders
# ==========================================

@router.get("")
async def my_orders(
    page: int = Query(1),
    limit: int = Query(None),
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    orders, pagination = order_service.list_customer_orders(db, me.id, page=page, limit=limit)
    return {
        "orders": [order_to_dict(o) for o in orders],
        "pagination": pagination,
    }


# ==========================================
# GET /api/orders/{order_id}
# ==========================================

@router.get("/{order_id}")
async def my_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    order = order_service.get_order_for_customer(db, me.id, order_id)
    return {"order": order_to_dict(order)}


# ==========================================
# PUT /api/orders/{order_id}/cancel
# ==========================================

@router.put("/{order_id}/cancel")
async def cancel_my_order(
    order_id: int,
    db: Session = Depends(get_db),
    me=Depends(require_login),
):
    order = order_service.cancel_by_customer(db, me.id, order_id)
    db.commit()
    return {
        "message": "Order cancelled successfully",
        "order": order_to_dict(order),
    }
