"""Order status lifecycle."""
from enum import Enum
from typing import Dict, FrozenSet

from teapos.core.errors import InvalidStatusTransition


class OrderStatus(str, Enum):
    """Fulfillment state of a submitted order. Independent of payment status."""

    PENDING = "pending"  # Created at submission
    IN_PROGRESS = "in_progress"  # Being prepared
    READY = "ready"  # Waiting for pickup
    OUT_FOR_DELIVERY = "out_for_delivery"  # Handed to a courier
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        """Return the string value of the status."""
        return self.value

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]


# Only explicit admin actions move an order along these edges
ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.IN_PROGRESS, OrderStatus.READY, OrderStatus.COMPLETED, OrderStatus.CANCELLED}
    ),
    OrderStatus.IN_PROGRESS: frozenset(
        {OrderStatus.READY, OrderStatus.COMPLETED, OrderStatus.CANCELLED}
    ),
    OrderStatus.READY: frozenset(
        {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.COMPLETED, OrderStatus.CANCELLED}
    ),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: OrderStatus, new: OrderStatus) -> None:
    """Raise InvalidStatusTransition unless ``current -> new`` is allowed."""
    if not can_transition(current, new):
        raise InvalidStatusTransition(
            f"Cannot move order from {current.display_name} to {new.display_name}"
        )
