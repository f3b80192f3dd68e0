import logging
import re

from django.conf import settings
from twilio.rest import Client

logger = logging.getLogger(__name__)


def whatsapp_number(phone):
    """Twilio WhatsApp address; bare 10-digit numbers are taken as Indian."""
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        return None
    if len(digits) == 10:
        digits = "91" + digits
    return f"whatsapp:+{digits}"


def ready_message(order):
    where = (
        f"Table {order.table_number}" if order.order_type == "dine-in" and order.table_number
        else "the counter"
    )
    return (
        f"🍵 *TEA MATES*\n\n"
        f"Hi {order.customer_name or 'there'}, your order #{order.token_number} is ready.\n"
        f"Please collect it at {where}.\n\n"
        f"Total: ₹{order.total}\n"
        f"Thank you for visiting 🙏"
    )


def send_ready_notice(order):
    if not settings.NOTIFY_WHATSAPP_ENABLED:
        return False

    to_number = whatsapp_number(order.customer_phone)
    if not to_number:
        return False

    try:
        client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        client.messages.create(
            body=ready_message(order),
            from_=settings.TWILIO_WHATSAPP_FROM,
            to=to_number
        )
    except Exception:
        # The status change already happened; a failed notice must not undo it
        logger.exception("WhatsApp notice for order %s failed", order.id)
        return False

    logger.info("WhatsApp ready notice sent for order %s", order.id)
    return True
