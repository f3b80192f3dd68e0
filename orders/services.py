import logging

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import ValidationError

from menu.models import MenuItem

from . import cart as session_cart
from .cart import AddItem, ClearCart, cart_item_from_menu, cart_totals, reduce
from .models import Order, OrderItem
from .status import InvalidTransition, OrderStatus, can_transition, parse_status
from .utils import generate_token_number

logger = logging.getLogger(__name__)

ORDER_TYPE_ALIASES = {
    "dine-in": "dine-in",
    "dine_in": "dine-in",
    "dinein": "dine-in",
    "takeaway": "takeaway",
    "take_away": "takeaway",
    "take-away": "takeaway",
}

PAYMENT_METHOD_ALIASES = {
    "cash": "cash",
    "online": "online",
    "upi": "online",
}


def normalize_order_type(value):
    key = (value or "").strip().lower()
    if key not in ORDER_TYPE_ALIASES:
        raise ValidationError({"error": "Invalid order type"})
    return ORDER_TYPE_ALIASES[key]


def normalize_payment_method(value):
    key = (value or "").strip().lower()
    if key not in PAYMENT_METHOD_ALIASES:
        raise ValidationError({"error": "Invalid payment method"})
    return PAYMENT_METHOD_ALIASES[key]


def build_cart(entries):
    """
    Turn ``(menu_item, quantity, customizations)`` entries into cart lines,
    merging repeats the same way the session cart does.
    """
    cart = ()
    for menu_item, quantity, customizations in entries:
        cart = reduce(cart, AddItem(cart_item_from_menu(menu_item, quantity, customizations)))
    return cart


def check_availability(lines):
    wanted = {str(line.menu_item_id) for line in lines}
    available = {
        str(pk) for pk in
        MenuItem.objects.filter(pk__in=wanted, available=True).values_list("pk", flat=True)
    }

    missing = [line.name for line in lines if str(line.menu_item_id) not in available]
    if missing:
        raise ValidationError(
            {"error": "Some items are no longer available", "items": missing}
        )


def place_order(
    *,
    lines,
    order_type,
    payment_method,
    customer_name=None,
    customer_phone=None,
    table_number=None,
    pickup_time=None,
):
    """
    Persist an order for ``lines`` (cart items).

    Cash orders are verified on the spot; online orders wait for payment
    proof or the gateway. Both start ``pending``.
    """
    lines = tuple(lines)
    if not lines:
        raise ValidationError({"error": "Cart is empty"})

    order_type = normalize_order_type(order_type)
    payment_method = normalize_payment_method(payment_method)

    customer_name = (customer_name or "").strip() or None
    customer_phone = (customer_phone or "").strip() or None

    if settings.ORDER_REQUIRE_CUSTOMER_NAME and not customer_name:
        raise ValidationError({"error": "Customer name is required"})

    if order_type == "dine-in":
        pickup_time = None
        table_number = (str(table_number).strip() or None) if table_number else None
    else:
        table_number = None

    check_availability(lines)

    totals = cart_totals(lines)

    with transaction.atomic():

        order = Order(
            order_type=order_type,
            table_number=table_number,
            pickup_time=pickup_time,
            payment_method=payment_method,
            payment_verified=(payment_method == "cash"),
            status=OrderStatus.PENDING,
            token_number=generate_token_number(),
            customer_name=customer_name,
            customer_phone=customer_phone,
        )
        order.apply_totals(totals)
        order.save()

        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                menu_item_id=line.menu_item_id,
                line_id=line.id,
                name=line.name,
                category=line.category,
                image=line.image,
                price=line.price,
                quantity=line.quantity,
                customizations=(
                    list(line.customizations) if line.customizations is not None else None
                ),
            )
            for line in lines
        ])

    logger.info(
        "Order %s placed: token=%s type=%s payment=%s total=%s",
        order.id, order.token_number, order.order_type, order.payment_method, order.total,
    )
    return order


def update_order_status(order, new_status):
    """
    Move ``order`` to ``new_status`` if the transition table allows it.
    Re-applying the current status is a no-op.
    """
    target = parse_status(new_status)

    if order.status == target:
        return order

    if not can_transition(order.status, target):
        raise InvalidTransition(order.status, target)

    previous = order.status
    order.status = target
    order.save(update_fields=["status", "updated_at"])

    logger.info("Order %s status %s -> %s", order.id, previous, target)
    return order


def settle_checkout(session):
    """
    Clear the session cart once the online order it was checked out into
    is paid. Gateway confirmations reach the server outside the customer's
    session, so the cart catches up on the customer's next cart request.
    A cancelled order keeps the cart for another attempt.
    """
    order_id = session_cart.checkout_order_id(session)
    if not order_id:
        return False

    order = Order.objects.filter(pk=order_id).only("status", "payment_verified").first()

    if order is None or order.status == OrderStatus.CANCELLED:
        session_cart.forget_checkout(session)
        return False

    if not order.payment_verified:
        return False

    session_cart.dispatch(session, ClearCart())
    session_cart.forget_checkout(session)
    logger.info("Cart cleared for paid order %s", order.id)
    return True
