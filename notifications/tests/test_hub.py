import fakeredis
from django.test import SimpleTestCase

from notifications.events import Event
from notifications.hub import EventHub


def event(name, *topics):
    return Event(type=name, topics=topics, data={"name": name})


class EventHubTests(SimpleTestCase):

    def setUp(self):
        self.redis = fakeredis.FakeRedis()
        self.hub = EventHub(client=self.redis, maxsize=3)

    def subscribe(self, *topics):
        subscription = self.hub.subscribe(*topics)
        self.addCleanup(subscription.close)
        return subscription

    def test_topic_filtering(self):
        customer = self.subscribe("order:1")
        admin = self.subscribe("admin")

        self.assertEqual(self.hub.publish(event("order.created", "order:1", "admin")), 2)
        self.assertEqual(self.hub.publish(event("order.created", "order:2", "admin")), 1)
        self.assertEqual(self.hub.publish(event("payment.submitted", "admin")), 1)

        self.assertEqual(customer.pending(), 1)
        self.assertEqual(admin.pending(), 3)

    def test_event_survives_the_round_trip(self):
        sub = self.subscribe("admin")
        sent = event("order.created", "order:1", "admin")
        self.hub.publish(sent)

        received = sub.get(timeout=0)
        self.assertEqual(received, sent)

    def test_other_worker_sees_events(self):
        # Two hubs over one Redis stand in for two worker processes
        other_worker = EventHub(client=self.redis, maxsize=3)
        customer = other_worker.subscribe("order:1")
        self.addCleanup(customer.close)

        self.hub.publish(event("order.status_changed", "order:1", "admin"))

        self.assertEqual(customer.get(timeout=0).type, "order.status_changed")

    def test_event_on_two_subscribed_topics_arrives_once(self):
        sub = self.subscribe("order:1", "admin")
        self.hub.publish(event("order.created", "order:1", "admin"))

        self.assertEqual(sub.pending(), 1)

    def test_full_buffer_drops_oldest(self):
        sub = self.subscribe("admin")
        for n in range(5):
            self.hub.publish(event(f"e{n}", "admin"))

        self.assertEqual([sub.get(timeout=0).type for _ in range(3)], ["e2", "e3", "e4"])
        self.assertEqual(sub.dropped, 2)
        self.assertIsNone(sub.get(timeout=0))

    def test_malformed_message_skipped(self):
        sub = self.subscribe("admin")
        self.redis.publish("admin", "not json")
        self.hub.publish(event("payment.submitted", "admin"))

        self.assertEqual(sub.get(timeout=0).type, "payment.submitted")
        self.assertIsNone(sub.get(timeout=0))

    def test_close_unsubscribes(self):
        with self.hub.subscribe("admin") as sub:
            self.assertEqual(self.hub.subscriber_count(), 1)

        self.assertEqual(self.hub.subscriber_count(), 0)
        self.assertEqual(self.hub.publish(event("x", "admin")), 0)
        self.assertIsNone(sub.get(timeout=0))

    def test_needs_topic(self):
        with self.assertRaises(ValueError):
            self.hub.subscribe()
