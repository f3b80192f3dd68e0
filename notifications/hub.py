"""
Publish/subscribe for order events over Redis.

Every topic is a Redis channel (``order:<id>`` for one customer's order,
``admin`` for the staff dashboard), so a stream held by any worker process
sees events raised by any other. Each subscription pulls its messages into
a bounded buffer that drops the oldest event when full.
"""

import logging
import threading
from collections import deque

import redis
from django.conf import settings

from .events import Event

logger = logging.getLogger(__name__)


class Subscription:

    def __init__(self, hub, pubsub, topics, maxsize):
        self.topics = frozenset(topics)
        self.dropped = 0
        self._hub = hub
        self._pubsub = pubsub
        self._maxsize = maxsize
        self._buffer = deque()
        # An event on two subscribed channels arrives twice
        self._seen = deque(maxlen=maxsize)
        self.closed = False

    def put(self, event):
        if event.id in self._seen:
            return
        self._seen.append(event.id)

        if len(self._buffer) >= self._maxsize:
            self._buffer.popleft()
            self.dropped += 1
        self._buffer.append(event)

    def _receive(self, timeout):
        """Read one message from Redis; False when none was waiting."""
        message = self._pubsub.get_message(timeout=timeout)
        if message is None:
            return False
        if message.get("type") != "message":
            # subscribe/unsubscribe confirmations
            return True

        try:
            self.put(Event.from_json(message["data"]))
        except (ValueError, KeyError, TypeError):
            logger.warning("Skipping malformed event on %s", message.get("channel"))
        return True

    def _drain(self):
        while self._receive(timeout=0):
            pass

    def get(self, timeout=None):
        """Next event, or None if nothing arrives within ``timeout``."""
        if self.closed:
            return None

        self._drain()
        if not self._buffer and timeout != 0:
            self._receive(timeout)
            self._drain()

        return self._buffer.popleft() if self._buffer else None

    def pending(self):
        if not self.closed:
            self._drain()
        return len(self._buffer)

    def close(self):
        if self.closed:
            return
        self.closed = True
        try:
            self._pubsub.unsubscribe()
            self._pubsub.close()
        except redis.RedisError:
            logger.warning("Error closing subscription to %s", ", ".join(sorted(self.topics)))
        finally:
            self._hub.unsubscribe(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class EventHub:

    def __init__(self, client=None, maxsize=None):
        self._client = client
        self._maxsize = maxsize
        self._subscriptions = set()
        self._lock = threading.Lock()

    @property
    def client(self):
        if self._client is None:
            self._client = redis.from_url(settings.REDIS_URL)
        return self._client

    @property
    def maxsize(self):
        return self._maxsize or settings.EVENT_QUEUE_SIZE

    def subscribe(self, *topics):
        if not topics:
            raise ValueError("subscribe() needs at least one topic")

        pubsub = self.client.pubsub()
        pubsub.subscribe(*topics)

        subscription = Subscription(self, pubsub, topics, self.maxsize)
        with self._lock:
            self._subscriptions.add(subscription)

        logger.debug("Subscribed to %s", ", ".join(sorted(subscription.topics)))
        return subscription

    def unsubscribe(self, subscription):
        with self._lock:
            self._subscriptions.discard(subscription)

    def publish(self, event):
        """Send ``event`` on each of its topics; returns how many receivers Redis reported."""
        payload = event.to_json()

        delivered = 0
        for topic in event.topics:
            delivered += self.client.publish(topic, payload)

        logger.debug("Published %s to %d subscriber(s)", event.type, delivered)
        return delivered

    def subscriber_count(self):
        """Open subscriptions in this process."""
        with self._lock:
            return len(self._subscriptions)


hub = EventHub()
