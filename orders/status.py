r"""
Order lifecycle states and the transitions staff (or payment
verification) may apply.

    pending -> accepted -> preparing -> ready -> delivered
       \__________\___________\__________\_____-> cancelled

Any forward jump is allowed, so ``pending -> ready`` stores ``ready`` with
nothing recorded in between. ``delivered`` and ``cancelled`` are terminal.
"""

from django.db import models
from rest_framework.exceptions import ValidationError


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    PREPARING = "preparing", "Preparing"
    READY = "ready", "Ready"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


PIPELINE = (
    OrderStatus.PENDING,
    OrderStatus.ACCEPTED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
)

ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({
        OrderStatus.ACCEPTED,
        OrderStatus.PREPARING,
        OrderStatus.READY,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.ACCEPTED: frozenset({
        OrderStatus.PREPARING,
        OrderStatus.READY,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.PREPARING: frozenset({
        OrderStatus.READY,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.READY: frozenset({
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Names used by older dashboards
STATUS_ALIASES = {
    "confirmed": OrderStatus.ACCEPTED,
    "done": OrderStatus.READY,
    "completed": OrderStatus.DELIVERED,
}


class InvalidTransition(ValidationError):
    default_code = "invalid_transition"

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(
            {
                "error": f"Cannot change status from {current} to {target}",
                "allowed_statuses": sorted(ALLOWED_TRANSITIONS[OrderStatus(current)]),
            }
        )


def parse_status(value):
    """Map user input (any case, legacy aliases) onto an ``OrderStatus``."""
    key = (value or "").strip().lower()
    if not key:
        raise ValidationError({"error": "status is required"})
    if key in STATUS_ALIASES:
        return STATUS_ALIASES[key]
    try:
        return OrderStatus(key)
    except ValueError:
        raise ValidationError(
            {
                "error": "Invalid status value",
                "allowed_statuses": [choice for choice, _ in OrderStatus.choices],
            }
        ) from None


def can_transition(current, target):
    return OrderStatus(target) in ALLOWED_TRANSITIONS[OrderStatus(current)]


def next_status(current):
    """The one-step advance along the pipeline, or None at the end."""
    current = OrderStatus(current)
    if current in TERMINAL_STATUSES:
        return None
    return PIPELINE[PIPELINE.index(current) + 1]


def is_active(status):
    return OrderStatus(status) not in TERMINAL_STATUSES
