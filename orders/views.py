import logging
from datetime import datetime, timedelta

from django.db.models import Count
from django.utils import timezone

from rest_framework import generics
from rest_framework.permissions import AllowAny
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrStaff
from teamates.renderers import PlainTextRenderer

from . import cart as session_cart
from .models import Order
from .serializers import (
    CartAddSerializer,
    CartLineSerializer,
    CartQuantitySerializer,
    CartRemoveSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    OrderTrackSerializer,
    PlaceOrderSerializer,
)
from .services import build_cart, place_order, settle_checkout, update_order_status
from .status import OrderStatus, TERMINAL_STATUSES, next_status
from .utils import order_slip, pickup_slots, slip_text, upi_payment_link

logger = logging.getLogger(__name__)


def apply_order_filters(request, queryset):
    """
    Supported query params:
    - filter=active|pending|cancelled|delivered|unverified
    - status=pending,accepted,...
    - order_type=dine-in|takeaway
    - payment_method=cash|online
    - payment_verified=true|false
    """
    filter_key = (request.GET.get("filter") or "").strip().lower()
    status_param = (request.GET.get("status") or "").strip()
    order_type = (request.GET.get("order_type") or "").strip().lower()
    payment_method = (request.GET.get("payment_method") or "").strip().lower()
    verified = (request.GET.get("payment_verified") or "").strip().lower()

    if filter_key == "active":
        queryset = queryset.exclude(status__in=TERMINAL_STATUSES)
    elif filter_key == "pending":
        queryset = queryset.filter(status=OrderStatus.PENDING)
    elif filter_key == "cancelled":
        queryset = queryset.filter(status=OrderStatus.CANCELLED)
    elif filter_key == "delivered":
        queryset = queryset.filter(status=OrderStatus.DELIVERED)
    elif filter_key == "unverified":
        queryset = queryset.filter(payment_verified=False).exclude(status=OrderStatus.CANCELLED)

    if status_param:
        statuses = [s.strip().lower() for s in status_param.split(",") if s.strip()]
        if statuses:
            queryset = queryset.filter(status__in=statuses)

    if order_type:
        queryset = queryset.filter(order_type=order_type)

    if payment_method:
        queryset = queryset.filter(payment_method=payment_method)

    if verified in ("true", "false"):
        queryset = queryset.filter(payment_verified=(verified == "true"))

    return queryset


def error_response(message, status_code, extra=None):
    payload = {"error": message, "detail": message}
    if extra:
        payload.update(extra)
    return Response(payload, status=status_code)


def cart_payload(cart):
    totals = session_cart.cart_totals(cart)
    lines = [
        dict(line.to_dict(), line_total=line.line_total)
        for line in cart
    ]
    return {
        "items": CartLineSerializer(lines, many=True).data,
        "item_count": session_cart.item_count(cart),
        **{key: str(value) for key, value in totals.as_dict().items()},
    }


# =====================================
# CART
# =====================================

class SessionCartView(APIView):
    """Public view over the session cart; a paid checkout empties it first."""

    permission_classes = [AllowAny]

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        settle_checkout(request.session)


class CartView(SessionCartView):

    def get(self, request):
        return Response(cart_payload(session_cart.load_cart(request.session)))


class CartAddView(SessionCartView):

    def post(self, request):
        serializer = CartAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        line = session_cart.cart_item_from_menu(
            serializer.validated_data["menu_item"],
            serializer.validated_data["quantity"],
            serializer.validated_data.get("customizations"),
        )
        cart = session_cart.dispatch(request.session, session_cart.AddItem(line))
        return Response(cart_payload(cart), status=200)


class CartRemoveView(SessionCartView):

    def post(self, request):
        serializer = CartRemoveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = session_cart.dispatch(
            request.session,
            session_cart.RemoveItem(serializer.validated_data["line_id"])
        )
        return Response(cart_payload(cart), status=200)


class CartQuantityView(SessionCartView):

    def post(self, request):
        serializer = CartQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = session_cart.dispatch(
            request.session,
            session_cart.SetQuantity(
                serializer.validated_data["line_id"],
                serializer.validated_data["quantity"],
            )
        )
        return Response(cart_payload(cart), status=200)


class CartClearView(SessionCartView):

    def post(self, request):
        cart = session_cart.dispatch(request.session, session_cart.ClearCart())
        return Response(cart_payload(cart), status=200)


# =====================================
# CHECKOUT
# =====================================

class PlaceOrderView(SessionCartView):

    def post(self, request):
        serializer = PlaceOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        # Explicit items win over the session cart
        if "items" in data:
            lines = build_cart(
                (item["menu_item"], item["quantity"], item.get("customizations"))
                for item in data["items"]
            )
            from_session = False
        else:
            lines = session_cart.load_cart(request.session)
            from_session = True

        order = place_order(
            lines=lines,
            order_type=data["order_type"],
            payment_method=data["payment_method"],
            customer_name=data.get("customer_name"),
            customer_phone=data.get("customer_phone"),
            table_number=data.get("table_number"),
            pickup_time=data.get("pickup_time"),
        )

        if order.payment_method == "cash":
            if from_session:
                session_cart.dispatch(request.session, session_cart.ClearCart())
                session_cart.forget_checkout(request.session)
            next_step = {"type": "none"}
        else:
            if from_session:
                session_cart.remember_checkout(request.session, order.id)

            # Cart stays until payment proof is submitted or the gateway confirms
            next_step = {
                "type": "online_payment",
                "amount": str(order.total),
                "upi_link": upi_payment_link(order),
                "submit_url": "/api/payments/upi/submit/",
                "gateway_url": "/api/payments/gateway/initiate/",
            }

        return Response(
            {
                "order": OrderSerializer(order).data,
                "next_step": next_step,
            },
            status=201
        )


class PickupSlotsView(APIView):

    permission_classes = [AllowAny]

    def get(self, request):
        return Response({"slots": pickup_slots()})


class OrderTrackView(generics.RetrieveAPIView):

    queryset = Order.objects.prefetch_related("items")
    serializer_class = OrderTrackSerializer
    permission_classes = [AllowAny]


class OrderSlipView(APIView):
    """Customer order slip; ``?format=txt`` downloads it as plain text."""

    permission_classes = [AllowAny]
    renderer_classes = [JSONRenderer, PlainTextRenderer]

    def get(self, request, pk):
        order = Order.objects.prefetch_related("items").filter(pk=pk).first()
        if order is None:
            return error_response("Order not found", 404)

        slip = order_slip(order)

        if request.accepted_renderer.format == "txt":
            filename = f"order-slip-{order.token_number}.txt"
            return Response(
                slip_text(slip),
                headers={"Content-Disposition": f'attachment; filename="{filename}"'},
            )

        return Response(slip)


# =====================================
# STAFF
# =====================================

class OrderListView(generics.ListAPIView):

    permission_classes = [IsAdminOrStaff]
    serializer_class = OrderListSerializer

    def get_queryset(self):
        qs = (
            Order.objects
            .annotate(items_count=Count("items"))
            .order_by("-created_at")
        )
        return apply_order_filters(self.request, qs)


class TodayOrderListView(generics.ListAPIView):

    serializer_class = OrderSerializer
    permission_classes = [IsAdminOrStaff]

    def get_queryset(self):

        today = timezone.localdate()
        start = timezone.make_aware(datetime.combine(today, datetime.min.time()))
        end = start + timedelta(days=1)

        qs = (
            Order.objects
            .filter(created_at__gte=start, created_at__lt=end)
            .prefetch_related("items")
            .order_by("created_at")
        )

        has_explicit_filter = any([
            request_key in self.request.GET
            for request_key in ["filter", "status", "payment_verified"]
        ])
        if not has_explicit_filter:
            qs = qs.exclude(status=OrderStatus.CANCELLED)

        return apply_order_filters(self.request, qs)


class OrderDetailView(generics.RetrieveAPIView):

    queryset = Order.objects.prefetch_related("items")
    serializer_class = OrderSerializer
    permission_classes = [IsAdminOrStaff]


class OrderStatusUpdateView(APIView):
    permission_classes = [IsAdminOrStaff]

    def patch(self, request, pk):
        try:
            order = Order.objects.get(pk=pk)
        except Order.DoesNotExist:
            return error_response("Order not found", 404)

        serializer = OrderStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response("status is required", 400)

        update_order_status(order, serializer.validated_data["status"])
        return Response({"id": str(order.id), "status": order.status}, status=200)


class OrderAdvanceView(APIView):
    """One-click move to the next pipeline state."""

    permission_classes = [IsAdminOrStaff]

    def post(self, request, pk):
        try:
            order = Order.objects.get(pk=pk)
        except Order.DoesNotExist:
            return error_response("Order not found", 404)

        target = next_status(order.status)
        if target is None:
            return error_response(f"Order is already {order.status}", 400)

        update_order_status(order, target)
        return Response({"id": str(order.id), "status": order.status}, status=200)
