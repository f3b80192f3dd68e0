import json
from unittest import mock

from django.test import TestCase
from django.utils import timezone

from notifications.events import ADMIN_TOPIC, order_topic
from notifications.hub import hub
from notifications.tests.helpers import use_fake_redis
from orders.services import update_order_status
from orders.tests.helpers import make_menu_item, make_order, make_user
from payments.services import resolve_payment, submit_upi_payment


def drain(subscription):
    events = []
    while True:
        event = subscription.get(timeout=0)
        if event is None:
            return events
        events.append(event)


class OrderEventTests(TestCase):

    def setUp(self):
        use_fake_redis(self)
        self.admin = hub.subscribe(ADMIN_TOPIC)
        self.addCleanup(self.admin.close)
        self.chai = make_menu_item()

    def place(self, **kwargs):
        with self.captureOnCommitCallbacks(execute=True):
            order = make_order([(self.chai, 2)], **kwargs)
        return order

    def watch(self, order):
        subscription = hub.subscribe(order_topic(order.id))
        self.addCleanup(subscription.close)
        return subscription

    def test_order_created(self):
        order = self.place()

        [event] = drain(self.admin)
        self.assertEqual(event.type, "order.created")
        self.assertEqual(event.data["order_id"], str(order.id))
        self.assertEqual(event.data["items_count"], 1)
        self.assertEqual(event.notification["sound"], "new-order")
        self.assertIn(order.token_number, event.notification["body"])

    def test_nothing_published_before_commit(self):
        make_order([(self.chai, 1)])
        self.assertEqual(drain(self.admin), [])

    @mock.patch("notifications.signals.send_ready_notice")
    def test_status_change_reaches_customer(self, send_ready_notice):
        order = self.place()
        customer = self.watch(order)
        drain(self.admin)

        with self.captureOnCommitCallbacks(execute=True):
            update_order_status(order, "ready")

        [event] = drain(customer)
        self.assertEqual(event.type, "order.status_changed")
        self.assertEqual(event.data["status"], "ready")
        self.assertEqual(event.data["previous_status"], "pending")
        self.assertEqual(event.notification["sound"], "status")
        self.assertEqual([e.type for e in drain(self.admin)], ["order.status_changed"])

        send_ready_notice.assert_called_once_with(order)

    @mock.patch("notifications.signals.send_ready_notice")
    def test_ready_notice_only_for_ready(self, send_ready_notice):
        order = self.place()
        with self.captureOnCommitCallbacks(execute=True):
            update_order_status(order, "accepted")

        send_ready_notice.assert_not_called()

    def test_payment_events_are_staff_only(self):
        order = self.place(payment_method="online")
        customer = self.watch(order)
        drain(self.admin)

        with self.captureOnCommitCallbacks(execute=True):
            payment = submit_upi_payment(order, "123456789012", timezone.now())

        [event] = drain(self.admin)
        self.assertEqual(event.type, "payment.submitted")
        self.assertEqual(event.notification["sound"], "new-payment")
        self.assertEqual(event.data["utr"], "123456789012")
        self.assertEqual(drain(customer), [])

        with self.captureOnCommitCallbacks(execute=True):
            resolve_payment(payment, "success", verifier=make_user())

        self.assertEqual(
            sorted(e.type for e in drain(self.admin)),
            ["order.payment_verified", "order.status_changed", "payment.resolved"],
        )
        self.assertEqual(
            sorted(e.type for e in drain(customer)),
            ["order.payment_verified", "order.status_changed"],
        )

    def test_event_wire_format(self):
        self.place()
        [event] = drain(self.admin)

        frame = event.to_sse()
        self.assertTrue(frame.startswith(f"id: {event.id}\nevent: order.created\ndata: "))
        self.assertTrue(frame.endswith("\n\n"))

        payload = json.loads(frame.split("data: ", 1)[1])
        self.assertEqual(payload["type"], "order.created")
        self.assertEqual(payload["notification"]["title"], "New order")
