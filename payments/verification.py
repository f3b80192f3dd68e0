"""
Checks applied to a customer's manual UPI payment proof before it is
recorded. Every check raises a DRF ``ValidationError`` whose detail carries
an ``error`` message the checkout page shows as-is.
"""

import re
from datetime import timedelta

from rest_framework.exceptions import ValidationError

from orders.status import OrderStatus

from .models import Payment

UTR_PATTERN = re.compile(r"^\d{12}$")

MAX_PROOF_AGE = timedelta(hours=24)


def normalize_utr(value):
    utr = (value or "").strip()
    if not UTR_PATTERN.match(utr):
        raise ValidationError({"error": "UTR must be exactly 12 digits"})
    return utr


def check_submission_time(time_submitted, now):
    if time_submitted is None:
        raise ValidationError({"error": "Payment time is required"})
    if time_submitted > now:
        raise ValidationError({"error": "Payment time cannot be in the future"})
    if now - time_submitted > MAX_PROOF_AGE:
        raise ValidationError({"error": "Payment time must be within the last 24 hours"})


def check_order_accepts_proof(order):
    if order.payment_method != "online":
        raise ValidationError({"error": "Order is not an online payment order"})
    if order.status == OrderStatus.CANCELLED:
        raise ValidationError({"error": "Order has been cancelled"})
    if order.payment_verified:
        raise ValidationError({"error": "Payment for this order is already verified"})


def check_duplicate_utr(order, utr):
    if Payment.objects.filter(order=order, utr=utr).exists():
        raise ValidationError(
            {"error": "This UTR has already been submitted for this order"},
            code="duplicate",
        )
