"""
Customer Admin Service
========================
Queries for admin customer management: list, search, activate/deactivate.
"""

from typing import List, Tuple

from sqlalchemy.orm import Session
from sqlalchemy import func as sa_func, or_

from config.settings import DEFAULT_PAGE_SIZE, ADMIN_MAX_PAGE_SIZE
from common.exceptions import NotFoundError
from common.helpers import clamp_page
from modules.order.models import Order
from modules.user.models import User


class CustomerAdminService:

    def list_customers(
        self,
        db: Session,
        page: int = 1,
        per_page: int = None,
        search: str = None,
    ) -> Tuple[List[User], int]:
        page, per_page = clamp_page(page, per_page, DEFAULT_PAGE_SIZE, ADMIN_MAX_PAGE_SIZE)
        q = db.query(User).filter(User.is_admin == False)
        if search:
            term = f"%{search}%"
            q = q.filter(
                or_(
                    User.name.ilike(term),
                    User.email.ilike(term),
                    User.phone.ilike(term),
                )
            )

        total = q.count()
        customers = (
            q.order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return customers, total

    def order_counts(self, db: Session, customer_ids: List[int]) -> dict:
        """{customer_id: number_of_orders} for one page of customers."""
        if not customer_ids:
            return {}
        rows = (
            db.query(Order.customer_id, sa_func.count(Order.id))
            .filter(Order.customer_id.in_(customer_ids))
            .group_by(Order.customer_id)
            .all()
        )
        return {cid: cnt for cid, cnt in rows}

    def set_active(self, db: Session, customer_id: int, is_active: bool) -> User:
        customer = db.query(User).filter(User.id == customer_id, User.is_admin == False).first()
        if not customer:
            raise NotFoundError(f"Customer {customer_id} not found")
        customer.is_active = is_active
        db.flush()
        return customer


customer_admin_service = CustomerAdminService()
