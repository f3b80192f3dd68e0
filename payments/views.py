import logging
from decimal import Decimal
from urllib.parse import urlencode

from django.conf import settings
from django.db.models import Count, DecimalField, Q, Sum
from django.db.models.functions import Coalesce
from django.http import HttpResponseRedirect
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from rest_framework import generics
from rest_framework.permissions import AllowAny
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrStaff
from orders import cart as session_cart
from teamates.renderers import CSVRenderer

from .gateway import GatewayError, GatewayNotConfigured, PhonePeClient, decode_payload
from .models import Payment
from .serializers import (
    GatewayInitiateSerializer,
    PaymentDecisionSerializer,
    PaymentNotesSerializer,
    PaymentSerializer,
    UPIPaymentSubmitSerializer,
)
from .services import (
    handle_gateway_notification,
    initiate_gateway_payment,
    resolve_payment,
    submit_upi_payment,
    update_payment_notes,
)

logger = logging.getLogger(__name__)


def error_response(message, status_code, extra=None):
    payload = {"error": message, "detail": message}
    if extra:
        payload.update(extra)
    return Response(payload, status=status_code)


# =====================================
# MANUAL UPI
# =====================================

class UPIPaymentSubmitView(APIView):

    permission_classes = [AllowAny]

    def post(self, request):
        serializer = UPIPaymentSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = submit_upi_payment(
            serializer.validated_data["order"],
            serializer.validated_data["utr"],
            serializer.validated_data["time_submitted"],
        )

        session_cart.dispatch(request.session, session_cart.ClearCart())
        session_cart.forget_checkout(request.session)

        return Response(PaymentSerializer(payment).data, status=201)


class PendingPaymentListView(generics.ListAPIView):

    permission_classes = [IsAdminOrStaff]
    serializer_class = PaymentSerializer

    def get_queryset(self):
        return (
            Payment.objects
            .filter(status="pending")
            .select_related("order", "verified_by")
            .order_by("created_at")
        )


class PaymentVerifyView(APIView):

    permission_classes = [IsAdminOrStaff]

    def post(self, request, pk):
        try:
            payment = Payment.objects.select_related("order").get(pk=pk)
        except Payment.DoesNotExist:
            return error_response("Payment not found", 404)

        serializer = PaymentDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        resolve_payment(
            payment,
            serializer.validated_data["decision"],
            verifier=request.user,
            notes=serializer.validated_data.get("notes"),
        )
        return Response(PaymentSerializer(payment).data, status=200)


class PaymentNotesView(APIView):

    permission_classes = [IsAdminOrStaff]

    def patch(self, request, pk):
        try:
            payment = Payment.objects.select_related("order").get(pk=pk)
        except Payment.DoesNotExist:
            return error_response("Payment not found", 404)

        serializer = PaymentNotesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        update_payment_notes(payment, serializer.validated_data["notes"])
        return Response(PaymentSerializer(payment).data, status=200)


# =====================================
# HISTORY
# =====================================

def apply_payment_filters(request, queryset):
    """
    Supported query params:
    - status=pending|success|failed
    - method=upi|gateway
    - search=<utr, token, customer name or phone>
    - start=YYYY-MM-DD, end=YYYY-MM-DD
    """
    status_param = (request.GET.get("status") or "").strip().lower()
    method = (request.GET.get("method") or "").strip().lower()
    search = (request.GET.get("search") or "").strip()
    start = parse_date(request.GET.get("start") or "")
    end = parse_date(request.GET.get("end") or "")

    if status_param and status_param != "all":
        queryset = queryset.filter(status=status_param)

    if method and method != "all":
        queryset = queryset.filter(method=method)

    if search:
        queryset = queryset.filter(
            Q(utr__icontains=search)
            | Q(order__token_number__icontains=search)
            | Q(order__customer_name__icontains=search)
            | Q(order__customer_phone__icontains=search)
        )

    if start:
        queryset = queryset.filter(created_at__date__gte=start)
    if end:
        queryset = queryset.filter(created_at__date__lte=end)

    return queryset


def payment_summary(queryset):
    money = DecimalField(max_digits=12, decimal_places=2)
    totals = queryset.aggregate(
        total=Count("id"),
        successful=Count("id", filter=Q(status="success")),
        pending=Count("id", filter=Q(status="pending")),
        failed=Count("id", filter=Q(status="failed")),
        collected=Coalesce(
            Sum("amount", filter=Q(status="success")),
            Decimal("0.00"),
            output_field=money,
        ),
    )
    totals["collected"] = str(totals["collected"])
    return totals


def payment_csv_row(payment):
    return {
        "Date": timezone.localtime(payment.created_at).strftime("%Y-%m-%d %H:%M"),
        "Token": payment.order.token_number,
        "Customer": payment.order.customer_name or "",
        "Phone": payment.order.customer_phone or "",
        "Method": payment.method,
        "UTR": payment.utr or "",
        "Amount": str(payment.amount),
        "Status": payment.status,
        "Verified By": payment.verified_by.username if payment.verified_by else "",
        "Notes": payment.admin_notes,
    }


class PaymentHistoryView(APIView):

    permission_classes = [IsAdminOrStaff]
    renderer_classes = [JSONRenderer, CSVRenderer]

    def get(self, request):
        qs = apply_payment_filters(
            request,
            Payment.objects.select_related("order", "verified_by").order_by("-created_at")
        )

        if request.accepted_renderer.format == "csv":
            filename = f"payments-{timezone.localdate()}.csv"
            return Response(
                [payment_csv_row(p) for p in qs],
                headers={"Content-Disposition": f'attachment; filename="{filename}"'},
            )

        return Response({
            "summary": payment_summary(qs),
            "results": PaymentSerializer(qs, many=True).data,
        })


# =====================================
# GATEWAY
# =====================================

class GatewayInitiateView(APIView):

    permission_classes = [AllowAny]

    def post(self, request):
        serializer = GatewayInitiateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment, result = initiate_gateway_payment(serializer.validated_data["order"])
        except GatewayNotConfigured as e:
            logger.error("Gateway payment requested but credentials are missing")
            return error_response(e.message, 500)
        except GatewayError as e:
            return error_response(e.message, 502, {"details": e.details})

        return Response(
            {
                "success": True,
                "payment_url": result["payment_url"],
                "merchant_transaction_id": payment.merchant_transaction_id,
                "transaction_id": result.get("transaction_id"),
                "payment_id": str(payment.id),
            },
            status=201
        )


class GatewayWebhookView(APIView):

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        client = PhonePeClient()
        encoded = request.data.get("response") if hasattr(request.data, "get") else None
        if not encoded:
            return error_response("Missing response payload", 400)

        try:
            if not client.verify_notification(encoded, request.headers.get("X-VERIFY")):
                logger.warning("Rejected gateway webhook with bad signature")
                return error_response("Invalid signature", 401)
        except GatewayNotConfigured as e:
            logger.error("Gateway webhook received but salt key is not configured")
            return error_response(e.message, 500)

        try:
            notification = decode_payload(encoded)
        except GatewayError as e:
            return error_response(e.message, 400)

        try:
            result = handle_gateway_notification(notification)
        except Payment.DoesNotExist:
            return error_response("No pending payment found", 404)

        return Response(result, status=200)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def gateway_callback(request):
    """Send the customer back to the orders page with the gateway's result."""
    params = request.POST if request.method == "POST" else request.GET

    transaction_id = (params.get("transactionId") or "").strip()
    code = (params.get("code") or "").strip()

    if not transaction_id or not code:
        logger.warning("Gateway callback without transactionId/code")
        return HttpResponseRedirect(f"{settings.FRONTEND_URL}/orders?payment=error")

    if code == "PAYMENT_SUCCESS":
        session_cart.dispatch(request.session, session_cart.ClearCart())
        session_cart.forget_checkout(request.session)

    query = urlencode({"payment": code, "txn": transaction_id})
    return HttpResponseRedirect(f"{settings.FRONTEND_URL}/orders?{query}")
