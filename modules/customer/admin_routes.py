"""
Customer Admin Routes
=======================
Admin customer management: paginated list with search, activate/deactivate.
"""

import math

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from config.database import get_db
from config.settings import DEFAULT_PAGE_SIZE, ADMIN_MAX_PAGE_SIZE
from common.helpers import clamp_page
from modules.auth.deps import require_admin
from modules.customer.admin_service import customer_admin_service
from modules.user.models import User

router = APIRouter(prefix="/api/admin/customers", tags=["admin-customer"])


class ActiveUpdate(BaseModel):
    is_active: bool


def customer_to_dict(customer: User, order_count: int = 0) -> dict:
    return {
        "id": customer.id,
        "name": customer.name,
        "email": customer.email,
        "phone": customer.phone,
        "is_active": customer.is_active,
        "order_count": order_count,
        "created_at": customer.created_at.isoformat() if customer.created_at else None,
    }


@router.get("")
async def admin_customer_list(
    page: int = Query(1),
    limit: int = Query(None),
    search: str = Query(None),
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    page, per_page = clamp_page(page, limit, DEFAULT_PAGE_SIZE, ADMIN_MAX_PAGE_SIZE)
    customers, total = customer_admin_service.list_customers(db, page=page, per_page=per_page, search=search)
    counts = customer_admin_service.order_counts(db, [c.id for c in customers])
    return {
        "customers": [customer_to_dict(c, counts.get(c.id, 0)) for c in customers],
        "total": total,
        "page": page,
        "total_pages": max(1, math.ceil(total / per_page)),
    }


@router.put("/{customer_id}/active")
async def admin_customer_set_active(
    customer_id: int,
    body: ActiveUpdate,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    customer = customer_admin_service.set_active(db, customer_id, body.is_active)
    db.commit()
    return {"customer": customer_to_dict(customer)}
