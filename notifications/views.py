import logging

import redis
from django.conf import settings
from django.http import StreamingHttpResponse
from rest_framework.permissions import AllowAny
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrStaff
from orders.models import Order
from teamates.renderers import EventStreamRenderer

from .authentication import QueryParamJWTAuthentication
from .events import ADMIN_TOPIC, order_snapshot, order_topic
from .hub import hub

logger = logging.getLogger(__name__)

RETRY_MILLISECONDS = 3000


def stream_events(subscription, initial=(), heartbeat=None):
    """
    SSE body for ``subscription``. A comment line goes out whenever no
    event arrives within ``heartbeat`` seconds.
    """
    heartbeat = heartbeat or settings.EVENT_HEARTBEAT_SECONDS
    try:
        yield f"retry: {RETRY_MILLISECONDS}\n\n"
        for event in initial:
            yield event.to_sse()

        while True:
            event = subscription.get(timeout=heartbeat)
            if event is None:
                yield ": keep-alive\n\n"
                continue
            yield event.to_sse()
    finally:
        subscription.close()


def event_stream_response(subscription, initial=()):
    response = StreamingHttpResponse(
        stream_events(subscription, initial),
        content_type="text/event-stream",
    )
    response["Cache-Control"] = "no-cache"
    response["X-Accel-Buffering"] = "no"
    return response


class OrderEventStreamView(APIView):
    """Live updates for one order, for the customer's order page."""

    authentication_classes = []
    permission_classes = [AllowAny]
    renderer_classes = [JSONRenderer, EventStreamRenderer]

    def get(self, request, pk):
        order = Order.objects.filter(pk=pk).first()
        if order is None:
            return Response({"error": "Order not found"}, status=404)

        try:
            subscription = hub.subscribe(order_topic(order.id))
        except redis.RedisError:
            logger.exception("Could not open order stream for %s", order.id)
            return Response({"error": "Live updates are unavailable"}, status=503)

        logger.info("Order stream opened for %s", order.id)
        return event_stream_response(subscription, initial=[order_snapshot(order)])


class AdminEventStreamView(APIView):

    authentication_classes = [QueryParamJWTAuthentication]
    permission_classes = [IsAdminOrStaff]
    renderer_classes = [JSONRenderer, EventStreamRenderer]

    def get(self, request):
        try:
            subscription = hub.subscribe(ADMIN_TOPIC)
        except redis.RedisError:
            logger.exception("Could not open admin stream")
            return Response({"error": "Live updates are unavailable"}, status=503)

        logger.info("Admin stream opened by %s", request.user.username)
        return event_stream_response(subscription)
