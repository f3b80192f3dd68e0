import logging
import uuid

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from orders.status import OrderStatus, can_transition

from .gateway import PhonePeClient, merchant_transaction_id, order_id_from_transaction
from .models import Payment
from .verification import (
    check_duplicate_utr,
    check_order_accepts_proof,
    check_submission_time,
    normalize_utr,
)

logger = logging.getLogger(__name__)

DECISIONS = ("success", "failed")


def submit_upi_payment(order, utr, time_submitted, now=None):
    """
    Record a customer's UPI proof as a pending payment for staff review.
    The amount is always the order total.
    """
    now = now or timezone.now()

    utr = normalize_utr(utr)
    check_duplicate_utr(order, utr)
    check_order_accepts_proof(order)
    check_submission_time(time_submitted, now)

    payment = Payment.objects.create(
        order=order,
        method="upi",
        utr=utr,
        amount=order.total,
        time_submitted=time_submitted,
        status="pending",
    )

    logger.info("UPI proof %s submitted for order %s (utr=%s)", payment.id, order.id, utr)
    return payment


def apply_payment_outcome(order, success, notes=None):
    """
    Reflect a payment decision on its order: success accepts it, failure
    cancels it. A status the transition table forbids is left alone.
    """
    target = OrderStatus.ACCEPTED if success else OrderStatus.CANCELLED

    order.payment_verified = bool(success)
    fields = ["payment_verified", "updated_at"]

    if notes is not None:
        order.payment_verification_notes = notes
        fields.append("payment_verification_notes")

    if order.status != target:
        if can_transition(order.status, target):
            order.status = target
            fields.append("status")
        else:
            logger.warning(
                "Order %s left at %s after payment %s",
                order.id, order.status, "success" if success else "failure",
            )

    order.save(update_fields=fields)
    return order


def resolve_payment(payment, decision, verifier=None, notes="", now=None):
    decision = (decision or "").strip().lower()
    if decision not in DECISIONS:
        raise ValidationError({"error": "Decision must be success or failed"})

    if payment.is_resolved:
        raise ValidationError(
            {"error": "Payment already resolved", "status": payment.status}
        )

    notes = (notes or "").strip()

    payment.status = decision
    payment.verified_by = verifier
    payment.verified_at = now or timezone.now()
    payment.admin_notes = notes
    payment.save(update_fields=[
        "status", "verified_by", "verified_at", "admin_notes", "updated_at",
    ])

    # Second write; the payment decision above stays even if this fails
    try:
        apply_payment_outcome(payment.order, decision == "success", notes)
    except Exception:
        logger.exception("Payment %s resolved but order %s was not updated", payment.id, payment.order_id)
        raise

    logger.info(
        "Payment %s marked %s by %s",
        payment.id, decision, getattr(verifier, "username", None),
    )
    return payment


def update_payment_notes(payment, notes):
    notes = (notes or "").strip()

    payment.admin_notes = notes
    payment.save(update_fields=["admin_notes", "updated_at"])

    if payment.is_resolved:
        order = payment.order
        order.payment_verification_notes = notes
        order.save(update_fields=["payment_verification_notes", "updated_at"])

    return payment


# -------------------------------
# GATEWAY
# -------------------------------

def initiate_gateway_payment(order, client=None, now=None):
    """
    Start a hosted gateway payment for ``order`` and record it as pending.
    Returns ``(payment, gateway_result)``.
    """
    check_order_accepts_proof(order)

    client = client or PhonePeClient()
    merchant_txn = merchant_transaction_id(order, now)
    result = client.pay(order, merchant_txn)

    payment = Payment.objects.create(
        order=order,
        method="gateway",
        merchant_transaction_id=merchant_txn,
        gateway_transaction_id=result.get("transaction_id"),
        amount=order.total,
        time_submitted=timezone.now(),
        status="pending",
    )

    logger.info("Gateway payment %s started for order %s", merchant_txn, order.id)
    return payment, result


def find_pending_gateway_payment(merchant_txn):
    qs = Payment.objects.select_related("order").filter(method="gateway", status="pending")

    payment = qs.filter(merchant_transaction_id=merchant_txn).first()
    if payment is not None:
        return payment

    # Older transactions only carried the order id
    order_id = order_id_from_transaction(merchant_txn)
    try:
        order_id = uuid.UUID(order_id) if order_id else None
    except ValueError:
        order_id = None
    if order_id is None:
        return None

    return qs.filter(order_id=order_id).order_by("created_at").first()


def handle_gateway_notification(notification, now=None):
    """
    Apply a decoded gateway notification. Raises ``Payment.DoesNotExist``
    when a success arrives for a transaction with no pending payment.
    """
    data = notification.get("data") or notification

    merchant_txn = data.get("merchantTransactionId") or ""
    if not order_id_from_transaction(merchant_txn):
        raise ValidationError({"error": "Invalid transaction ID format"})

    state = data.get("state")
    response_code = data.get("responseCode")
    transaction_id = data.get("transactionId")

    if state == "COMPLETED" and response_code == "SUCCESS":
        payment = find_pending_gateway_payment(merchant_txn)
        if payment is None:
            logger.warning("No pending payment for gateway transaction %s", merchant_txn)
            raise Payment.DoesNotExist(merchant_txn)

        instrument = data.get("paymentInstrument") or {}

        payment.status = "success"
        payment.utr = instrument.get("utr") or transaction_id
        payment.gateway_transaction_id = transaction_id
        payment.verified_at = now or timezone.now()
        payment.save(update_fields=[
            "status", "utr", "gateway_transaction_id", "verified_at", "updated_at",
        ])

        try:
            apply_payment_outcome(payment.order, True)
        except Exception:
            logger.exception("Gateway payment %s succeeded but order was not updated", merchant_txn)
            raise

        logger.info("Gateway payment %s verified for order %s", merchant_txn, payment.order_id)
        return {
            "success": True,
            "message": "Payment verified successfully",
            "order_id": str(payment.order_id),
            "transaction_id": transaction_id,
        }

    if state == "FAILED":
        payment = find_pending_gateway_payment(merchant_txn)
        if payment is not None:
            payment.status = "failed"
            payment.gateway_transaction_id = transaction_id
            payment.save(update_fields=["status", "gateway_transaction_id", "updated_at"])
        else:
            logger.warning("Failure reported for unknown gateway transaction %s", merchant_txn)

        logger.info("Gateway payment %s failed", merchant_txn)
        return {
            "success": True,
            "message": "Payment failure recorded",
            "order_id": order_id_from_transaction(merchant_txn),
            "transaction_id": transaction_id,
        }

    return {"success": True, "message": "Webhook processed", "state": state}
