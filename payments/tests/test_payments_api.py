from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from orders.tests.helpers import authenticate, make_menu_item, make_order, make_user
from payments.models import Payment
from payments.services import resolve_payment, submit_upi_payment


class SubmitProofApiTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.chai = make_menu_item()
        self.client.post(
            "/api/cart/add/",
            {"menu_item": str(self.chai.id), "quantity": 2},
            format="json",
        )
        r = self.client.post(
            "/api/orders/place/",
            {"order_type": "takeaway", "payment_method": "online", "customer_name": "Asha"},
            format="json",
        )
        self.order_id = r.json()["order"]["id"]

    def submit(self, utr="123456789012"):
        return self.client.post(
            "/api/payments/upi/submit/",
            {
                "order": self.order_id,
                "utr": utr,
                "time_submitted": timezone.now().isoformat(),
            },
            format="json",
        )

    def test_submit_records_payment_and_clears_cart(self):
        r = self.submit()

        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.json()["status"], "pending")
        self.assertEqual(r.json()["amount"], "52.50")
        self.assertEqual(self.client.get("/api/cart/").json()["item_count"], 0)

    def test_cart_refilled_after_proof_survives_verification(self):
        self.submit()
        self.client.post("/api/cart/add/", {"menu_item": str(self.chai.id)}, format="json")

        resolve_payment(Payment.objects.get(), "success", verifier=make_user())

        self.assertEqual(self.client.get("/api/cart/").json()["item_count"], 1)

    def test_bad_utr(self):
        r = self.submit(utr="12345")

        self.assertEqual(r.status_code, 400)
        self.assertIn("12 digits", r.json()["error"])
        # Cart kept so the customer can retry
        self.assertEqual(self.client.get("/api/cart/").json()["item_count"], 2)

    def test_duplicate_utr(self):
        self.submit()
        r = self.submit()

        self.assertEqual(r.status_code, 400)
        self.assertIn("already been submitted", r.json()["error"])
        self.assertEqual(Payment.objects.count(), 1)


class StaffPaymentApiTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.staff = make_user()
        authenticate(self.client, self.staff)

        chai = make_menu_item()
        self.order = make_order([(chai, 2)], customer_name="Ravi", customer_phone="9123456789")
        self.payment = submit_upi_payment(self.order, "111122223333", timezone.now())

        other = make_order([(chai, 1)], customer_name="Meera")
        self.other_payment = submit_upi_payment(other, "444455556666", timezone.now())

    def test_pending_requires_staff(self):
        self.assertEqual(APIClient().get("/api/payments/pending/").status_code, 401)

    def test_pending_list(self):
        r = self.client.get("/api/payments/pending/")

        self.assertEqual(r.status_code, 200)
        self.assertEqual({p["utr"] for p in r.json()}, {"111122223333", "444455556666"})

    def test_verify(self):
        r = self.client.post(
            f"/api/payments/{self.payment.id}/verify/",
            {"decision": "success", "notes": "seen in bank app"},
            format="json",
        )

        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["status"], "success")
        self.assertEqual(r.json()["verified_by_name"], "staff")
        self.assertEqual(r.json()["order_status"], "accepted")

        r = self.client.post(
            f"/api/payments/{self.payment.id}/verify/", {"decision": "failed"}, format="json"
        )
        self.assertEqual(r.status_code, 400)

    def test_verify_unknown_payment(self):
        r = self.client.post(
            "/api/payments/00000000-0000-0000-0000-000000000000/verify/",
            {"decision": "success"},
            format="json",
        )
        self.assertEqual(r.status_code, 404)

    def test_notes(self):
        r = self.client.patch(
            f"/api/payments/{self.payment.id}/notes/", {"notes": "call back"}, format="json"
        )
        self.assertEqual(r.json()["admin_notes"], "call back")

    def test_history_filters_and_summary(self):
        self.client.post(
            f"/api/payments/{self.payment.id}/verify/", {"decision": "success"}, format="json"
        )

        r = self.client.get("/api/payments/history/")
        self.assertEqual(r.json()["summary"]["total"], 2)
        self.assertEqual(r.json()["summary"]["successful"], 1)
        self.assertEqual(r.json()["summary"]["collected"], "52.50")

        r = self.client.get("/api/payments/history/", {"status": "pending"})
        self.assertEqual([p["utr"] for p in r.json()["results"]], ["444455556666"])

        r = self.client.get("/api/payments/history/", {"search": "ravi"})
        self.assertEqual([p["utr"] for p in r.json()["results"]], ["111122223333"])

        r = self.client.get("/api/payments/history/", {"search": self.order.token_number})
        self.assertIn("111122223333", [p["utr"] for p in r.json()["results"]])

    def test_history_csv(self):
        r = self.client.get("/api/payments/history/", {"format": "csv"})

        self.assertEqual(r.status_code, 200)
        self.assertTrue(r["Content-Type"].startswith("text/csv"))
        self.assertIn("attachment;", r["Content-Disposition"])

        lines = r.content.decode().strip().splitlines()
        self.assertTrue(lines[0].startswith("Date,Token,Customer"))
        self.assertEqual(len(lines), 3)
