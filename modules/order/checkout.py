"""
Order Module - Checkout Input
===============================
Validated value types for what a customer submits at checkout, and the
precondition check that runs before any order row is written.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from common.exceptions import ValidationError
from modules.order.models import PaymentMethod


@dataclass(frozen=True)
class DeliveryAddress:
    street: str
    city: str
    zip_code: str


@dataclass(frozen=True)
class ContactInfo:
    phone: str
    email: Optional[str] = None


@dataclass(frozen=True)
class CheckoutDetails:
    address: DeliveryAddress
    contact: ContactInfo
    payment_method: str
    special_instructions: str = ""

    @classmethod
    def build(
        cls,
        street: str = "",
        city: str = "",
        zip_code: str = "",
        phone: str = "",
        email: Optional[str] = None,
        payment_method: str = "",
        special_instructions: str = "",
    ) -> "CheckoutDetails":
        """Trim raw form values into a CheckoutDetails (not yet validated)."""
        return cls(
            address=DeliveryAddress(
                street=(street or "").strip(),
                city=(city or "").strip(),
                zip_code=(zip_code or "").strip(),
            ),
            contact=ContactInfo(
                phone=(phone or "").strip(),
                email=(email or "").strip() or None,
            ),
            payment_method=(payment_method or "").strip().lower(),
            special_instructions=(special_instructions or "").strip(),
        )


def validate_checkout(lines: Iterable, details: CheckoutDetails) -> None:
    """
    Raise ValidationError for the first unmet precondition, in form order:
    items, street, city, zip code, phone, payment method.
    """
    if not list(lines):
        raise ValidationError("items", "Your cart is empty")

    address = details.address
    if not address.street:
        raise ValidationError("delivery_address.street", "Street is required")
    if not address.city:
        raise ValidationError("delivery_address.city", "City is required")
    if not address.zip_code:
        raise ValidationError("delivery_address.zip_code", "Zip code is required")

    if not details.contact.phone:
        raise ValidationError("contact_info.phone", "Phone number is required")

    if details.payment_method not in PaymentMethod.ALL:
        raise ValidationError("payment_method", "Payment method must be 'cash' or 'card'")
