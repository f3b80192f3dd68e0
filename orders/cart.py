"""
Cart reducer.

A cart is a tuple of ``CartItem`` lines. ``reduce`` applies one action and
returns a new cart; it never mutates its input. Lines whose quantity drops
to zero or below are removed, so no reachable cart holds such a line.
"""

import json
import time
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional, Tuple

from .pricing import compute_totals, to_decimal

SESSION_KEY = "cart"


@dataclass(frozen=True)
class CartItem:
    id: str
    menu_item_id: str
    name: str
    price: Decimal
    quantity: int
    category: str = ""
    customizations: Optional[Tuple[str, ...]] = None
    image: str = ""

    def customization_key(self):
        # Order-sensitive; "no customizations" (None) and an empty list differ.
        if self.customizations is None:
            return "null"
        return json.dumps(list(self.customizations))

    def same_line(self, other):
        return (
            self.menu_item_id == other.menu_item_id
            and self.customization_key() == other.customization_key()
        )

    @property
    def line_total(self):
        return self.price * self.quantity

    def to_dict(self):
        return {
            "id": self.id,
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "price": str(self.price),
            "quantity": self.quantity,
            "category": self.category,
            "customizations": (
                list(self.customizations) if self.customizations is not None else None
            ),
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data):
        customizations = data.get("customizations")
        return cls(
            id=data["id"],
            menu_item_id=str(data["menu_item_id"]),
            name=data["name"],
            price=to_decimal(data["price"]),
            quantity=int(data["quantity"]),
            category=data.get("category") or "",
            customizations=tuple(customizations) if customizations is not None else None,
            image=data.get("image") or "",
        )


def new_line_id(menu_item_id, now=None):
    millis = int((now if now is not None else time.time()) * 1000)
    return f"{menu_item_id}_{millis}"


def cart_item_from_menu(menu_item, quantity=1, customizations=None, now=None):
    return CartItem(
        id=new_line_id(menu_item.id, now),
        menu_item_id=str(menu_item.id),
        name=menu_item.name,
        price=to_decimal(menu_item.price),
        quantity=int(quantity),
        category=menu_item.category,
        customizations=tuple(customizations) if customizations is not None else None,
        image=menu_item.image,
    )


# -------------------------------
# ACTIONS
# -------------------------------

@dataclass(frozen=True)
class AddItem:
    item: CartItem


@dataclass(frozen=True)
class RemoveItem:
    line_id: str


@dataclass(frozen=True)
class SetQuantity:
    line_id: str
    quantity: int


@dataclass(frozen=True)
class ClearCart:
    pass


def reduce(cart, action):
    cart = tuple(cart)

    if isinstance(action, AddItem):
        incoming = action.item
        existing = next((line for line in cart if line.same_line(incoming)), None)
        if existing is not None:
            cart = tuple(
                replace(line, quantity=line.quantity + incoming.quantity)
                if line is existing else line
                for line in cart
            )
        else:
            cart = cart + (incoming,)

    elif isinstance(action, RemoveItem):
        cart = tuple(line for line in cart if line.id != action.line_id)

    elif isinstance(action, SetQuantity):
        cart = tuple(
            replace(line, quantity=int(action.quantity)) if line.id == action.line_id else line
            for line in cart
        )

    elif isinstance(action, ClearCart):
        cart = ()

    else:
        raise TypeError(f"Unknown cart action: {action!r}")

    return tuple(line for line in cart if line.quantity > 0)


def cart_totals(cart):
    return compute_totals((line.price, line.quantity) for line in cart)


def item_count(cart):
    return sum(line.quantity for line in cart)


# -------------------------------
# SESSION STORE
# -------------------------------

def load_cart(session):
    return tuple(CartItem.from_dict(data) for data in session.get(SESSION_KEY, []))


def save_cart(session, cart):
    session[SESSION_KEY] = [line.to_dict() for line in cart]
    session.modified = True


def dispatch(session, action):
    cart = reduce(load_cart(session), action)
    save_cart(session, cart)
    return cart


# Online order the session's cart was checked out into, awaiting payment
CHECKOUT_KEY = "checkout_order"


def remember_checkout(session, order_id):
    session[CHECKOUT_KEY] = str(order_id)
    session.modified = True


def checkout_order_id(session):
    return session.get(CHECKOUT_KEY)


def forget_checkout(session):
    if session.pop(CHECKOUT_KEY, None) is not None:
        session.modified = True
