from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from orders.services import update_order_status
from orders.tests.helpers import make_menu_item, make_order
from payments.models import Payment
from payments.services import resolve_payment, submit_upi_payment

UTR = "123456789012"


class SubmitUpiPaymentTests(TestCase):

    def setUp(self):
        self.chai = make_menu_item()
        self.order = make_order([(self.chai, 2)])
        self.now = timezone.now()

    def submit(self, utr=UTR, ago=timedelta(minutes=5), order=None):
        return submit_upi_payment(order or self.order, utr, self.now - ago, now=self.now)

    def assertRejected(self, message, **kwargs):
        with self.assertRaises(ValidationError) as ctx:
            self.submit(**kwargs)
        self.assertIn(message, str(ctx.exception.detail["error"]))

    def test_creates_pending_payment_for_order_total(self):
        payment = self.submit()

        self.assertEqual(payment.status, "pending")
        self.assertEqual(payment.method, "upi")
        self.assertEqual(payment.amount, self.order.total)
        self.assertEqual(payment.utr, UTR)

    def test_utr_is_trimmed(self):
        self.assertEqual(self.submit(utr=f"  {UTR} ").utr, UTR)

    def test_utr_must_be_twelve_digits(self):
        self.assertRejected("12 digits", utr="12345678901")
        self.assertRejected("12 digits", utr="1234567890123")
        self.assertRejected("12 digits", utr="12345678901A")
        self.assertFalse(Payment.objects.exists())

    def test_duplicate_utr_for_same_order(self):
        self.submit()
        self.assertRejected("already been submitted", ago=timedelta(minutes=1))
        self.assertEqual(Payment.objects.count(), 1)

    def test_duplicate_reported_before_time_checks(self):
        self.submit()
        self.assertRejected("already been submitted", ago=timedelta(hours=30))
        self.assertRejected("already been submitted", ago=timedelta(hours=-1))

    def test_duplicate_reported_after_cancellation(self):
        payment = self.submit()
        resolve_payment(payment, "failed")

        self.assertRejected("already been submitted")
        self.assertEqual(Payment.objects.count(), 1)

    def test_same_utr_on_another_order(self):
        self.submit()
        other = make_order([(self.chai, 1)])
        self.assertEqual(self.submit(order=other).order, other)

    def test_future_time_rejected(self):
        self.assertRejected("future", ago=timedelta(seconds=-1))

    def test_one_second_ago_accepted(self):
        self.assertEqual(self.submit(ago=timedelta(seconds=1)).status, "pending")

    def test_exactly_one_day_accepted(self):
        self.assertEqual(self.submit(ago=timedelta(hours=24)).status, "pending")

    def test_older_than_one_day_rejected(self):
        self.assertRejected("24 hours", ago=timedelta(hours=24, seconds=1))

    def test_cash_order_rejected(self):
        cash = make_order([(self.chai, 1)], payment_method="cash")
        self.assertRejected("not an online payment", order=cash)

    def test_cancelled_order_rejected(self):
        update_order_status(self.order, "cancelled")
        self.assertRejected("cancelled")

    def test_verified_order_rejected(self):
        self.order.payment_verified = True
        self.order.save()
        self.assertRejected("already verified")
