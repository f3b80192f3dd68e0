import random
import string
from datetime import timedelta
from urllib.parse import quote

from django.conf import settings
from django.utils import timezone

from .pricing import SGST_RATE


def generate_token_number():
    """
    Display token such as ``K417``. There is no collision check, so two
    orders may carry the same token.
    """
    letter = random.choice(string.ascii_uppercase)
    number = random.randint(100, 999)
    return f"{letter}{number}"


def upi_payment_link(order):
    payee = quote(settings.UPI_PAYEE_NAME)
    return (
        f"upi://pay?pa={settings.UPI_VPA}"
        f"&pn={payee}"
        f"&am={order.total}"
        f"&tn=Order+{order.id}"
        f"&mc={settings.UPI_MERCHANT_CODE}"
        f"&mode=02&purpose=00"
    )


def pickup_slots(now=None, last_hour=None, step_minutes=30, lead_minutes=15):
    """
    Half-hour pickup slots ("HH:MM") for the rest of today, starting at
    least ``lead_minutes`` from now and ending before ``last_hour``.
    """
    now = timezone.localtime(now) if now is not None else timezone.localtime()
    last_hour = settings.ORDER_LAST_PICKUP_HOUR if last_hour is None else last_hour

    earliest = now + timedelta(minutes=lead_minutes)
    slot = now.replace(minute=0, second=0, microsecond=0)

    slots = []
    while slot.hour < last_hour and slot.date() == now.date():
        if slot > earliest:
            slots.append(slot.strftime("%H:%M"))
        slot += timedelta(minutes=step_minutes)
    return slots


# -------------------------------
# ORDER SLIP
# -------------------------------

SLIP_WIDTH = 32


def payment_label(order):
    if order.payment_method == "cash":
        return "Pay at Counter"
    if order.payment_verified:
        return "Paid Online"
    return "Online (awaiting verification)"


def order_slip(order):
    """Everything the printable customer slip shows, money as strings."""
    items = [
        {
            "name": item.name,
            "quantity": item.quantity,
            "price": str(item.price),
            "customizations": item.customizations or [],
            "line_total": str(item.line_total),
        }
        for item in order.items.all()
    ]

    return {
        "order_id": str(order.id),
        "token_number": order.token_number,
        "date": timezone.localtime(order.created_at).strftime("%d %b %Y, %I:%M %p"),
        "order_type": order.order_type,
        "table_number": order.table_number,
        "pickup_time": order.pickup_time.strftime("%H:%M") if order.pickup_time else None,
        "customer_name": order.customer_name,
        "customer_phone": order.customer_phone,
        "items": items,
        "subtotal": str(order.subtotal),
        "sgst": str(order.sgst),
        "cgst": str(order.cgst),
        "total_tax": str(order.total_tax),
        "total": str(order.total),
        "payment_method": order.payment_method,
        "payment": payment_label(order),
        "payment_verified": order.payment_verified,
        "status": order.status,
    }


def _slip_row(left, right=""):
    return f"{left:<{SLIP_WIDTH - len(right)}}{right}"


def slip_text(slip):
    rule = "-" * SLIP_WIDTH
    rate = f"{(SGST_RATE * 100).normalize()}%"

    lines = [
        "TEA MATES".center(SLIP_WIDTH),
        "Order Slip".center(SLIP_WIDTH),
        rule,
        _slip_row("Token:", slip["token_number"]),
        _slip_row("Date:", slip["date"]),
        _slip_row("Type:", "Dine-In" if slip["order_type"] == "dine-in" else "Takeaway"),
    ]
    if slip["table_number"]:
        lines.append(_slip_row("Table:", f"#{slip['table_number']}"))
    if slip["pickup_time"]:
        lines.append(_slip_row("Pickup:", slip["pickup_time"]))
    if slip["customer_name"]:
        lines.append(_slip_row("Customer:", slip["customer_name"]))
    if slip["customer_phone"]:
        lines.append(_slip_row("Phone:", slip["customer_phone"]))

    lines.append(rule)
    for item in slip["items"]:
        lines.append(_slip_row(f"{item['quantity']}x {item['name']}", f"Rs.{item['line_total']}"))
        for note in item["customizations"]:
            lines.append(f"  + {note}")

    lines += [
        rule,
        _slip_row("Subtotal", f"Rs.{slip['subtotal']}"),
        _slip_row(f"SGST {rate}", f"Rs.{slip['sgst']}"),
        _slip_row(f"CGST {rate}", f"Rs.{slip['cgst']}"),
        _slip_row("TOTAL", f"Rs.{slip['total']}"),
        _slip_row("Payment:", slip["payment"]),
        _slip_row("Status:", slip["status"]),
        rule,
        "Thank you for your order!",
        "Please keep this slip for reference",
    ]
    if slip["order_type"] == "takeaway":
        lines.append("Show this slip when collecting your order")

    return "\n".join(lines) + "\n"
