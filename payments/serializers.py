from rest_framework import serializers

from orders.models import Order

from .models import Payment


class UPIPaymentSubmitSerializer(serializers.Serializer):

    order = serializers.PrimaryKeyRelatedField(queryset=Order.objects.all())
    utr = serializers.CharField(max_length=40)
    time_submitted = serializers.DateTimeField()


class PaymentDecisionSerializer(serializers.Serializer):

    decision = serializers.ChoiceField(choices=["success", "failed"])
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class PaymentNotesSerializer(serializers.Serializer):

    notes = serializers.CharField(allow_blank=True)


class GatewayInitiateSerializer(serializers.Serializer):

    order = serializers.PrimaryKeyRelatedField(queryset=Order.objects.all())


class PaymentSerializer(serializers.ModelSerializer):

    token_number = serializers.CharField(source="order.token_number", read_only=True)
    customer_name = serializers.CharField(source="order.customer_name", read_only=True)
    customer_phone = serializers.CharField(source="order.customer_phone", read_only=True)
    order_total = serializers.DecimalField(
        source="order.total",
        max_digits=12,
        decimal_places=2,
        read_only=True
    )
    order_status = serializers.CharField(source="order.status", read_only=True)
    verified_by_name = serializers.CharField(source="verified_by.username", read_only=True, default=None)

    class Meta:
        model = Payment
        fields = [
            "id",
            "order",
            "token_number",
            "customer_name",
            "customer_phone",
            "order_total",
            "order_status",
            "method",
            "utr",
            "gateway_transaction_id",
            "merchant_transaction_id",
            "amount",
            "time_submitted",
            "status",
            "verified_by",
            "verified_by_name",
            "verified_at",
            "admin_notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
