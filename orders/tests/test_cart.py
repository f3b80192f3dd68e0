from decimal import Decimal

from django.test import SimpleTestCase

from orders.cart import (
    AddItem,
    CartItem,
    ClearCart,
    RemoveItem,
    SetQuantity,
    cart_totals,
    dispatch,
    item_count,
    load_cart,
    reduce,
)


class FakeSession(dict):
    modified = False


def line(line_id="chai_1", menu_item_id="chai", quantity=1, customizations=None, price="25"):
    return CartItem(
        id=line_id,
        menu_item_id=menu_item_id,
        name="Masala Chai",
        price=Decimal(price),
        quantity=quantity,
        category="Signature Teas",
        customizations=customizations,
    )


class ReduceTests(SimpleTestCase):

    def test_add_merges_same_item_and_customizations(self):
        cart = reduce((), AddItem(line("a", quantity=1, customizations=("less sugar",))))
        cart = reduce(cart, AddItem(line("b", quantity=2, customizations=("less sugar",))))

        self.assertEqual(len(cart), 1)
        self.assertEqual(cart[0].id, "a")
        self.assertEqual(cart[0].quantity, 3)

    def test_different_customizations_are_separate_lines(self):
        cart = reduce((), AddItem(line("a", customizations=("ginger",))))
        cart = reduce(cart, AddItem(line("b", customizations=("cardamom",))))

        self.assertEqual(len(cart), 2)

    def test_customization_order_matters(self):
        cart = reduce((), AddItem(line("a", customizations=("ginger", "cardamom"))))
        cart = reduce(cart, AddItem(line("b", customizations=("cardamom", "ginger"))))

        self.assertEqual(len(cart), 2)

    def test_none_and_empty_customizations_differ(self):
        cart = reduce((), AddItem(line("a", customizations=None)))
        cart = reduce(cart, AddItem(line("b", customizations=())))

        self.assertEqual(len(cart), 2)

    def test_set_quantity_to_zero_removes_line(self):
        cart = reduce((), AddItem(line("a", quantity=2)))
        cart = reduce(cart, SetQuantity("a", 0))

        self.assertEqual(cart, ())

    def test_negative_quantity_removes_line(self):
        cart = reduce((), AddItem(line("a", quantity=2)))
        self.assertEqual(reduce(cart, SetQuantity("a", -3)), ())

    def test_set_quantity_unknown_line_is_noop(self):
        cart = reduce((), AddItem(line("a", quantity=2)))
        self.assertEqual(reduce(cart, SetQuantity("zzz", 5)), cart)

    def test_add_with_non_positive_quantity_is_dropped(self):
        self.assertEqual(reduce((), AddItem(line("a", quantity=0))), ())

    def test_remove_and_clear(self):
        cart = reduce((), AddItem(line("a")))
        cart = reduce(cart, AddItem(line("b", menu_item_id="samosa", price="15")))

        cart = reduce(cart, RemoveItem("a"))
        self.assertEqual([l.id for l in cart], ["b"])

        self.assertEqual(reduce(cart, ClearCart()), ())

    def test_input_is_not_mutated(self):
        original = (line("a", quantity=1),)
        reduce(original, SetQuantity("a", 4))
        self.assertEqual(original[0].quantity, 1)

    def test_unknown_action(self):
        with self.assertRaises(TypeError):
            reduce((), "add")

    def test_totals_and_count(self):
        cart = reduce((), AddItem(line("a", quantity=2)))
        cart = reduce(cart, AddItem(line("b", menu_item_id="samosa", price="15", quantity=1)))

        self.assertEqual(item_count(cart), 3)
        self.assertEqual(cart_totals(cart).subtotal, Decimal("65.00"))


class SessionStoreTests(SimpleTestCase):

    def test_dispatch_persists_cart(self):
        session = FakeSession()

        dispatch(session, AddItem(line("a", quantity=2, customizations=("ginger",))))

        self.assertTrue(session.modified)
        cart = load_cart(session)
        self.assertEqual(len(cart), 1)
        self.assertEqual(cart[0].price, Decimal("25"))
        self.assertEqual(cart[0].customizations, ("ginger",))

    def test_empty_session(self):
        self.assertEqual(load_cart(FakeSession()), ())
