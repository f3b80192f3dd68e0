import json
import uuid
from dataclasses import dataclass, field

from django.utils import timezone

ADMIN_TOPIC = "admin"

ORDER_CREATED = "order.created"
ORDER_STATUS_CHANGED = "order.status_changed"
ORDER_PAYMENT_VERIFIED = "order.payment_verified"
ORDER_SNAPSHOT = "order.snapshot"
PAYMENT_SUBMITTED = "payment.submitted"
PAYMENT_RESOLVED = "payment.resolved"

# Alert tones the dashboard and order page know how to play
SOUND_NEW_ORDER = "new-order"
SOUND_NEW_PAYMENT = "new-payment"
SOUND_STATUS = "status"


def order_topic(order_id):
    return f"order:{order_id}"


def _now():
    return timezone.now().isoformat()


def _new_id():
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Event:
    type: str
    topics: tuple
    data: dict
    notification: dict = None
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=_now)

    def as_dict(self):
        return {
            "id": self.id,
            "type": self.type,
            "data": self.data,
            "notification": self.notification,
            "created_at": self.created_at,
        }

    def to_json(self):
        return json.dumps(dict(self.as_dict(), topics=list(self.topics)), default=str)

    @classmethod
    def from_json(cls, raw):
        payload = json.loads(raw)
        return cls(
            type=payload["type"],
            topics=tuple(payload.get("topics") or ()),
            data=payload.get("data") or {},
            notification=payload.get("notification"),
            id=payload["id"],
            created_at=payload["created_at"],
        )

    def to_sse(self):
        payload = json.dumps(self.as_dict(), default=str)
        return f"id: {self.id}\nevent: {self.type}\ndata: {payload}\n\n"


def notification(title, body, sound):
    return {"title": title, "body": body, "sound": sound}


def order_data(order):
    return {
        "order_id": str(order.id),
        "token_number": order.token_number,
        "status": order.status,
        "order_type": order.order_type,
        "table_number": order.table_number,
        "payment_method": order.payment_method,
        "payment_verified": order.payment_verified,
        "customer_name": order.customer_name,
        "total": str(order.total),
    }


def order_created(order):
    return Event(
        type=ORDER_CREATED,
        topics=(order_topic(order.id), ADMIN_TOPIC),
        data=dict(order_data(order), items_count=order.items.count()),
        notification=notification(
            "New order",
            f"Order #{order.token_number} ({order.order_type}) for ₹{order.total}",
            SOUND_NEW_ORDER,
        ),
    )


def order_status_changed(order, previous_status):
    return Event(
        type=ORDER_STATUS_CHANGED,
        topics=(order_topic(order.id), ADMIN_TOPIC),
        data=dict(order_data(order), previous_status=previous_status),
        notification=notification(
            "Order updated",
            f"Order #{order.token_number} is now {order.status}",
            SOUND_STATUS,
        ),
    )


def order_payment_verified(order):
    return Event(
        type=ORDER_PAYMENT_VERIFIED,
        topics=(order_topic(order.id), ADMIN_TOPIC),
        data=order_data(order),
        notification=notification(
            "Payment verified",
            f"Payment for order #{order.token_number} is confirmed",
            SOUND_STATUS,
        ),
    )


def order_snapshot(order):
    """Current state, sent once when a customer stream opens."""
    return Event(
        type=ORDER_SNAPSHOT,
        topics=(order_topic(order.id),),
        data=order_data(order),
    )


def payment_data(payment):
    return {
        "payment_id": str(payment.id),
        "order_id": str(payment.order_id),
        "token_number": payment.order.token_number,
        "method": payment.method,
        "utr": payment.utr,
        "amount": str(payment.amount),
        "status": payment.status,
    }


# Payment events carry the UTR, so only staff streams get them
def payment_submitted(payment):
    return Event(
        type=PAYMENT_SUBMITTED,
        topics=(ADMIN_TOPIC,),
        data=payment_data(payment),
        notification=notification(
            "New payment",
            f"₹{payment.amount} for order #{payment.order.token_number} awaits verification",
            SOUND_NEW_PAYMENT,
        ),
    )


def payment_resolved(payment):
    return Event(
        type=PAYMENT_RESOLVED,
        topics=(ADMIN_TOPIC,),
        data=payment_data(payment),
        notification=notification(
            "Payment " + ("verified" if payment.status == "success" else "rejected"),
            f"Order #{payment.order.token_number}: ₹{payment.amount}",
            SOUND_STATUS,
        ),
    )
