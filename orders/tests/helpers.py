from decimal import Decimal

from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import AdminSession, User
from menu.models import MenuItem
from orders.services import build_cart, place_order


def make_menu_item(**kwargs):
    defaults = {
        "name": "Masala Chai",
        "price": Decimal("25.00"),
        "category": "Signature Teas",
        "image": "🫖",
        "available": True,
    }
    defaults.update(kwargs)
    return MenuItem.objects.create(**defaults)


def make_order(entries, **kwargs):
    """``entries`` is a list of ``(menu_item, quantity)`` pairs."""
    defaults = {
        "order_type": "takeaway",
        "payment_method": "online",
        "customer_name": "Asha",
        "customer_phone": "9876543210",
    }
    defaults.update(kwargs)
    lines = build_cart((item, qty, None) for item, qty in entries)
    return place_order(lines=lines, **defaults)


def make_user(username="staff", role="STAFF", password="pass12345"):
    return User.objects.create_user(username=username, password=password, role=role)


def authenticate(client, user):
    """Give ``client`` a bearer token bound to a fresh dashboard session."""
    session = AdminSession.open(user)
    refresh = RefreshToken.for_user(user)
    refresh["sid"] = str(session.id)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return session
