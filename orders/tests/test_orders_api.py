from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from orders.models import Order
from orders.tests.helpers import authenticate, make_menu_item, make_order, make_user


class CartApiTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.chai = make_menu_item()

    def add(self, quantity=1, customizations=None):
        payload = {"menu_item": str(self.chai.id), "quantity": quantity}
        if customizations is not None:
            payload["customizations"] = customizations
        return self.client.post("/api/cart/add/", payload, format="json")

    def test_add_merges_and_prices(self):
        self.add(1)
        r = self.add(1)

        self.assertEqual(r.status_code, 200)
        data = r.json()
        self.assertEqual(len(data["items"]), 1)
        self.assertEqual(data["item_count"], 2)
        self.assertEqual(data["subtotal"], "50.00")
        self.assertEqual(data["total"], "52.50")

    def test_quantity_zero_removes_line(self):
        line_id = self.add(2).json()["items"][0]["id"]

        r = self.client.post("/api/cart/quantity/", {"line_id": line_id, "quantity": 0}, format="json")

        self.assertEqual(r.json()["items"], [])
        self.assertEqual(r.json()["total"], "0.00")

    def test_remove_and_clear(self):
        line_id = self.add(1, ["ginger"]).json()["items"][0]["id"]
        self.add(1)

        r = self.client.post("/api/cart/remove/", {"line_id": line_id}, format="json")
        self.assertEqual(len(r.json()["items"]), 1)

        r = self.client.post("/api/cart/clear/")
        self.assertEqual(r.json()["item_count"], 0)

    def test_unavailable_item_cannot_be_added(self):
        self.chai.available = False
        self.chai.save()

        self.assertEqual(self.add(1).status_code, 400)


class PlaceOrderApiTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.chai = make_menu_item()
        self.client.post(
            "/api/cart/add/",
            {"menu_item": str(self.chai.id), "quantity": 2},
            format="json",
        )

    def place(self, **overrides):
        payload = {
            "order_type": "takeaway",
            "payment_method": "cash",
            "customer_name": "Asha",
            "pickup_time": "18:30",
        }
        payload.update(overrides)
        return self.client.post("/api/orders/place/", payload, format="json")

    def test_cash_order_is_verified_and_clears_cart(self):
        r = self.place()

        self.assertEqual(r.status_code, 201)
        order = r.json()["order"]
        self.assertEqual(order["status"], "pending")
        self.assertTrue(order["payment_verified"])
        self.assertEqual(order["total"], "52.50")
        self.assertEqual(order["pickup_time"], "18:30:00")
        self.assertEqual(r.json()["next_step"], {"type": "none"})

        self.assertEqual(self.client.get("/api/cart/").json()["item_count"], 0)

    def test_online_order_waits_for_payment(self):
        r = self.place(payment_method="upi")

        self.assertEqual(r.status_code, 201)
        data = r.json()
        self.assertEqual(data["order"]["payment_method"], "online")
        self.assertFalse(data["order"]["payment_verified"])
        self.assertEqual(data["next_step"]["type"], "online_payment")
        self.assertIn("am=52.50", data["next_step"]["upi_link"])

        # Cart stays until proof is submitted
        self.assertEqual(self.client.get("/api/cart/").json()["item_count"], 2)

    def test_items_are_snapshotted(self):
        order_id = self.place().json()["order"]["id"]

        self.chai.price = Decimal("99.00")
        self.chai.save()

        item = Order.objects.get(pk=order_id).items.get()
        self.assertEqual(item.price, Decimal("25.00"))
        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.name, "Masala Chai")

    def test_dine_in_ignores_pickup_time(self):
        r = self.place(order_type="dine-in", table_number="4")

        order = r.json()["order"]
        self.assertEqual(order["table_number"], "4")
        self.assertIsNone(order["pickup_time"])

    def test_customer_name_required(self):
        r = self.place(customer_name="  ")
        self.assertEqual(r.status_code, 400)
        self.assertFalse(Order.objects.exists())

    @override_settings(ORDER_REQUIRE_CUSTOMER_NAME=False)
    def test_customer_name_optional_when_configured(self):
        self.assertEqual(self.place(customer_name="").status_code, 201)

    def test_empty_cart(self):
        self.client.post("/api/cart/clear/")
        r = self.place()

        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Cart is empty")

    def test_item_gone_unavailable_before_checkout(self):
        self.chai.available = False
        self.chai.save()

        r = self.place()
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["items"], ["Masala Chai"])

    def test_invalid_order_type(self):
        self.assertEqual(self.place(order_type="delivery").status_code, 400)

    def test_explicit_items_skip_session_cart(self):
        samosa = make_menu_item(name="Samosa", price=Decimal("15.00"), category="Snacks")
        r = self.place(items=[{"menu_item": str(samosa.id), "quantity": 3}])

        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.json()["order"]["subtotal"], "45.00")
        # Session cart untouched
        self.assertEqual(self.client.get("/api/cart/").json()["item_count"], 2)

    def test_track_order(self):
        order_id = self.place().json()["order"]["id"]

        r = APIClient().get(f"/api/orders/track/{order_id}/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["status"], "pending")
        self.assertNotIn("customer_phone", r.json())


class StaffOrderApiTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        authenticate(self.client, make_user())
        self.chai = make_menu_item()
        self.order = make_order([(self.chai, 1)], payment_method="cash")

    def set_status(self, value, order=None):
        order = order or self.order
        return self.client.patch(
            f"/api/orders/status/{order.id}/", {"status": value}, format="json"
        )

    def test_forward_jump_is_stored_exactly(self):
        r = self.set_status("ready")

        self.assertEqual(r.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "ready")

    def test_same_status_is_noop(self):
        self.assertEqual(self.set_status("pending").status_code, 200)

    def test_backward_move_rejected(self):
        self.set_status("ready")
        r = self.set_status("accepted")

        self.assertEqual(r.status_code, 400)
        self.assertEqual(sorted(r.json()["allowed_statuses"]), ["cancelled", "delivered"])

    def test_alias(self):
        self.set_status("completed")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "delivered")

    def test_unknown_status(self):
        self.assertEqual(self.set_status("served").status_code, 400)

    def test_unknown_order(self):
        r = self.client.patch(
            "/api/orders/status/00000000-0000-0000-0000-000000000000/",
            {"status": "ready"},
            format="json",
        )
        self.assertEqual(r.status_code, 404)

    def test_advance(self):
        r = self.client.post(f"/api/orders/advance/{self.order.id}/")
        self.assertEqual(r.json()["status"], "accepted")

        self.set_status("delivered")
        r = self.client.post(f"/api/orders/advance/{self.order.id}/")
        self.assertEqual(r.status_code, 400)

    def test_list_filters(self):
        cancelled = make_order([(self.chai, 1)])
        self.set_status("cancelled", cancelled)

        r = self.client.get("/api/orders/list/", {"filter": "active"})
        ids = [row["id"] for row in r.json()]
        self.assertEqual(ids, [str(self.order.id)])
        self.assertEqual(r.json()[0]["items_count"], 1)

        r = self.client.get("/api/orders/list/", {"status": "cancelled"})
        self.assertEqual([row["id"] for row in r.json()], [str(cancelled.id)])

    def test_today_hides_cancelled_by_default(self):
        cancelled = make_order([(self.chai, 1)])
        self.set_status("cancelled", cancelled)

        r = self.client.get("/api/orders/today/")
        self.assertEqual([row["id"] for row in r.json()], [str(self.order.id)])

    def test_detail(self):
        r = self.client.get(f"/api/orders/{self.order.id}/")
        self.assertEqual(r.json()["next_status"], "accepted")
        self.assertEqual(len(r.json()["items"]), 1)


class OrderSlipApiTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.chai = make_menu_item()

    def test_slip_carries_token_items_and_taxes(self):
        order = make_order([(self.chai, 2)])

        r = self.client.get(f"/api/orders/slip/{order.id}/")

        self.assertEqual(r.status_code, 200)
        slip = r.json()
        self.assertEqual(slip["token_number"], order.token_number)
        self.assertEqual(slip["customer_name"], "Asha")
        self.assertEqual(slip["items"][0]["name"], "Masala Chai")
        self.assertEqual(slip["items"][0]["line_total"], "50.00")
        self.assertEqual(slip["subtotal"], "50.00")
        self.assertEqual(slip["sgst"], "1.25")
        self.assertEqual(slip["cgst"], "1.25")
        self.assertEqual(slip["total"], "52.50")
        self.assertEqual(slip["payment"], "Online (awaiting verification)")

    def test_text_download(self):
        order = make_order(
            [(self.chai, 2)],
            order_type="dine-in",
            table_number="4",
            payment_method="cash",
        )

        r = self.client.get(f"/api/orders/slip/{order.id}/", {"format": "txt"})

        self.assertEqual(r.status_code, 200)
        self.assertTrue(r["Content-Type"].startswith("text/plain"))
        self.assertEqual(
            r["Content-Disposition"],
            f'attachment; filename="order-slip-{order.token_number}.txt"',
        )

        text = r.content.decode()
        self.assertIn(order.token_number, text)
        self.assertIn("Dine-In", text)
        self.assertIn("#4", text)
        self.assertIn("2x Masala Chai", text)
        self.assertIn("SGST 2.5%", text)
        self.assertIn("Rs.52.50", text)
        self.assertIn("Pay at Counter", text)
        self.assertNotIn("collecting your order", text)

    def test_unknown_order(self):
        r = self.client.get("/api/orders/slip/00000000-0000-0000-0000-000000000000/")
        self.assertEqual(r.status_code, 404)
