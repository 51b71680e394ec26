"""
Order Module - Status State Machine
=====================================
Valid order statuses and the transitions between them.

Happy path:  pending -> confirmed -> preparing -> out_for_delivery -> delivered
Side exit:   any non-terminal status -> cancelled
Terminal:    delivered, cancelled (nothing leaves them)

Whether an admin may skip ahead on the happy path is a policy choice:
PERMISSIVE accepts any forward move, SEQUENTIAL only the next step.
"""

import enum
from typing import FrozenSet, Tuple

from common.exceptions import IllegalTransitionError


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class TransitionPolicy(str, enum.Enum):
    PERMISSIVE = "permissive"
    SEQUENTIAL = "sequential"


HAPPY_PATH: Tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

# Customers may withdraw an order only before the kitchen starts on it
CUSTOMER_CANCELLABLE: FrozenSet[OrderStatus] = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


def parse_status(value, current=None) -> OrderStatus:
    """Map a raw value to OrderStatus; unknown values are an illegal transition target."""
    try:
        return OrderStatus(value)
    except ValueError:
        raise IllegalTransitionError(
            current=_value(current),
            target=str(value),
            message=f"Unknown order status '{value}'",
        )


def parse_policy(value) -> TransitionPolicy:
    try:
        return TransitionPolicy(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown order transition policy '{value}'")


def allowed_targets(current, policy: TransitionPolicy = TransitionPolicy.PERMISSIVE) -> FrozenSet[OrderStatus]:
    """Every status `current` may move to under `policy`."""
    current = OrderStatus(current)
    if current in TERMINAL_STATUSES:
        return frozenset()

    position = HAPPY_PATH.index(current)
    if policy == TransitionPolicy.SEQUENTIAL:
        forward = HAPPY_PATH[position + 1:position + 2]
    else:
        forward = HAPPY_PATH[position + 1:]
    return frozenset(forward) | {OrderStatus.CANCELLED}


def can_transition(current, target, policy: TransitionPolicy = TransitionPolicy.PERMISSIVE) -> bool:
    return OrderStatus(target) in allowed_targets(current, policy)


def validate_transition(current, target, policy: TransitionPolicy = TransitionPolicy.PERMISSIVE) -> OrderStatus:
    """
    Check a requested status change.
    Returns the parsed target; raises IllegalTransitionError otherwise.
    """
    target_status = parse_status(target, current)
    current_status = OrderStatus(current)

    if current_status in TERMINAL_STATUSES:
        raise IllegalTransitionError(
            current=current_status.value,
            target=target_status.value,
            message=f"Order is already {current_status.value}; its status can no longer change",
        )
    if target_status not in allowed_targets(current_status, policy):
        raise IllegalTransitionError(current=current_status.value, target=target_status.value)
    return target_status


def _value(status):
    if status is None:
        return None
    return status.value if isinstance(status, OrderStatus) else str(status)
