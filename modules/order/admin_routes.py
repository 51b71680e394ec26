"""
Order Module - Admin Routes
==============================
Order management for admin: list, status changes, orders on behalf of
customers, per-status counts, status history.

Status refresh is pull-based: dashboards call GET /api/admin/orders
(or /stats) on their own interval.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_admin
from modules.order.schemas import (
    AdminCreateOrderRequest, StatusUpdateRequest,
    order_to_dict, status_log_to_dict,
)
from modules.order.service import order_service

router = APIRouter(prefix="/api/admin/orders", tags=["order-admin"])


@router.get("")
async def admin_orders(
    page: int = Query(1),
    limit: int = Query(None),
    status: str = Query(None),
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    orders, pagination = order_service.list_orders(db, page=page, limit=limit, status=status)
    return {
        "orders": [order_to_dict(o) for o in orders],
        "pagination": pagination,
    }


@router.get("/stats")
async def admin_order_stats(
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    """Order count per status for the dashboard."""
    return {"counts": order_service.get_status_counts(db)}


@router.post("")
async def admin_create_order(
    body: AdminCreateOrderRequest,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    """Admin places an order for a customer (phone orders, walk-ins)."""
    order = order_service.create_order_for_customer(
        db,
        admin=user,
        customer_id=body.customer_id,
        items=[(it.food_id, it.quantity) for it in body.items],
        details=body.to_details(),
    )
    db.commit()
    db.refresh(order)
    return JSONResponse({
        "message": "Order placed successfully",
        "order_number": order.order_number,
        "order": order_to_dict(order),
    }, status_code=201)


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: int,
    body: StatusUpdateRequest,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    order = order_service.update_status(db, order_id, body.status, actor=user)
    db.commit()
    return {
        "message": "Order status updated successfully",
        "order": order_to_dict(order),
    }


@router.get("/{order_id}/history")
async def order_status_history(
    order_id: int,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    logs = order_service.get_status_history(db, order_id)
    return {"order_id": order_id, "history": [status_log_to_dict(log) for log in logs]}
