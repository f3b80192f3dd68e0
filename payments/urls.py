from django.urls import path
from .views import (
    UPIPaymentSubmitView,
    PendingPaymentListView,
    PaymentVerifyView,
    PaymentNotesView,
    PaymentHistoryView,
    GatewayInitiateView,
    GatewayWebhookView,
    gateway_callback,
)

urlpatterns = [

    path("upi/submit/", UPIPaymentSubmitView.as_view(), name="payment-upi-submit"),
    path("pending/", PendingPaymentListView.as_view(), name="payment-pending"),
    path("history/", PaymentHistoryView.as_view(), name="payment-history"),
    path("<uuid:pk>/verify/", PaymentVerifyView.as_view(), name="payment-verify"),
    path("<uuid:pk>/notes/", PaymentNotesView.as_view(), name="payment-notes"),

    path("gateway/initiate/", GatewayInitiateView.as_view(), name="gateway-initiate"),
    path("gateway/webhook/", GatewayWebhookView.as_view(), name="gateway-webhook"),
    path("gateway/callback/", gateway_callback, name="gateway-callback"),

]
