"""
DineFlow - Custom Exceptions
=============================
Business-level exceptions that can be caught and converted to HTTP responses.
"""

from typing import Optional


class DineFlowError(Exception):
    """Base exception for all business logic errors."""
    status_code = 400

    def __init__(self, message: str = "An unexpected error occurred."):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message}


class ValidationError(DineFlowError):
    """Raised when checkout/order input is incomplete. Names the offending field."""
    status_code = 422

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "field": self.field}


class IllegalTransitionError(DineFlowError):
    """Raised when an order status change is not allowed from its current status."""
    status_code = 409

    def __init__(self, current: Optional[str], target: str, message: str = ""):
        self.current = current
        self.target = target
        super().__init__(message or f"Cannot change order status from '{current}' to '{target}'")

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "current_status": self.current,
            "target_status": self.target,
        }


class NotFoundError(DineFlowError):
    """Raised when a requested resource doesn't exist."""
    status_code = 404


class AuthenticationRequiredError(DineFlowError):
    """Raised when an operation needs a valid identity and none was supplied."""
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(DineFlowError):
    """Raised when user lacks permission."""
    status_code = 403

    def __init__(self, message: str = "Admin privileges required"):
        super().__init__(message)


class ConflictError(DineFlowError):
    """Raised when a write lost a race with another request; retrying may succeed."""
    status_code = 409
