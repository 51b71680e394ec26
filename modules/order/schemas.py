"""
Order Module - Request Schemas & Serializers
==============================================
Pydantic bodies for order endpoints and dict serializers for responses.
Field presence is checked by the checkout validator, not here, so that a
missing field comes back as one field-level error.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from modules.order.checkout import CheckoutDetails
from modules.order.models import Order, OrderStatusLog


# ==========================================
# Request bodies
# ==========================================

class DeliveryAddressIn(BaseModel):
    street: str = ""
    city: str = ""
    zip_code: str = ""


class ContactInfoIn(BaseModel):
    phone: str = ""
    email: Optional[str] = None


class CheckoutRequest(BaseModel):
    delivery_address: DeliveryAddressIn = Field(default_factory=DeliveryAddressIn)
    contact_info: ContactInfoIn = Field(default_factory=ContactInfoIn)
    payment_method: str = ""
    special_instructions: str = ""

    def to_details(self) -> CheckoutDetails:
        return CheckoutDetails.build(
            street=self.delivery_address.street,
            city=self.delivery_address.city,
            zip_code=self.delivery_address.zip_code,
            phone=self.contact_info.phone,
            email=self.contact_info.email,
            payment_method=self.payment_method,
            special_instructions=self.special_instructions,
        )


class AdminOrderItemIn(BaseModel):
    food_id: int
    quantity: int = Field(1, ge=1)


class AdminCreateOrderRequest(CheckoutRequest):
    customer_id: int
    items: List[AdminOrderItemIn] = Field(default_factory=list)


class StatusUpdateRequest(BaseModel):
    status: str = Field(..., min_length=1)


# ==========================================
# Serializers
# ==========================================

def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def order_to_dict(order: Order) -> dict:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "customer_id": order.customer_id,
        "status": order.status,
        "is_terminal": order.is_terminal,
        "items": [
            {
                "food_id": item.food_id,
                "name": item.name,
                "unit_price": str(item.unit_price),
                "quantity": item.quantity,
                "line_total": str(item.line_total),
            }
            for item in order.items
        ],
        "pricing": {
            "subtotal": str(order.subtotal),
            "delivery_fee": str(order.delivery_fee),
            "tax": str(order.tax),
            "total": str(order.total),
        },
        "delivery_address": {
            "street": order.street,
            "city": order.city,
            "zip_code": order.zip_code,
        },
        "contact_info": {
            "phone": order.phone,
            "email": order.email,
        },
        "payment_method": order.payment_method,
        "special_instructions": order.special_instructions,
        "estimated_delivery_minutes": order.estimated_delivery_minutes,
        "actual_delivery_time": _iso(order.actual_delivery_time),
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }


def status_log_to_dict(log: OrderStatusLog) -> dict:
    return {
        "from_status": log.from_status,
        "to_status": log.to_status,
        "changed_by": log.changed_by,
        "note": log.note,
        "created_at": _iso(log.created_at),
    }
