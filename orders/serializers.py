from rest_framework import serializers

from menu.models import MenuItem

from .models import Order, OrderItem
from .status import next_status


# -------------------------------
# CART
# -------------------------------

class CartLineSerializer(serializers.Serializer):

    id = serializers.CharField()
    menu_item_id = serializers.CharField()
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    quantity = serializers.IntegerField()
    category = serializers.CharField(allow_blank=True)
    customizations = serializers.ListField(
        child=serializers.CharField(),
        allow_null=True
    )
    image = serializers.CharField(allow_blank=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class CartAddSerializer(serializers.Serializer):

    menu_item = serializers.PrimaryKeyRelatedField(
        queryset=MenuItem.objects.all()
    )
    quantity = serializers.IntegerField(min_value=1, default=1)
    customizations = serializers.ListField(
        child=serializers.CharField(max_length=100),
        allow_null=True,
        default=None
    )

    def validate_menu_item(self, value):
        if not value.available:
            raise serializers.ValidationError(f"{value.name} is currently unavailable")
        return value


class CartRemoveSerializer(serializers.Serializer):

    line_id = serializers.CharField()


class CartQuantitySerializer(serializers.Serializer):

    line_id = serializers.CharField()
    # 0 (or less) removes the line
    quantity = serializers.IntegerField()


# -------------------------------
# CHECKOUT
# -------------------------------

class PlaceOrderSerializer(serializers.Serializer):

    items = CartAddSerializer(many=True, required=False)

    order_type = serializers.CharField()
    payment_method = serializers.CharField()

    table_number = serializers.CharField(
        max_length=10,
        required=False,
        allow_blank=True,
        allow_null=True
    )
    pickup_time = serializers.TimeField(
        required=False,
        allow_null=True,
        input_formats=["%H:%M", "%H:%M:%S"]
    )

    customer_name = serializers.CharField(
        max_length=150,
        required=False,
        allow_blank=True,
        allow_null=True
    )
    customer_phone = serializers.CharField(
        max_length=20,
        required=False,
        allow_blank=True,
        allow_null=True
    )


# -------------------------------
# ORDER
# -------------------------------

class OrderItemSerializer(serializers.ModelSerializer):

    line_total = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        read_only=True
    )

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menu_item",
            "name",
            "category",
            "image",
            "price",
            "quantity",
            "customizations",
            "line_total",
        ]


class OrderSerializer(serializers.ModelSerializer):

    items = OrderItemSerializer(many=True, read_only=True)
    next_status = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "token_number",
            "order_type",
            "table_number",
            "pickup_time",
            "payment_method",
            "payment_verified",
            "payment_verification_notes",
            "status",
            "next_status",

            "customer_name",
            "customer_phone",

            "subtotal",
            "sgst",
            "cgst",
            "total_tax",
            "total",

            "items",
            "created_at",
            "updated_at",
        ]

    def get_next_status(self, obj):
        return next_status(obj.status)


class OrderListSerializer(serializers.ModelSerializer):

    items_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "token_number",
            "order_type",
            "table_number",
            "pickup_time",
            "customer_name",
            "items_count",
            "total",
            "payment_method",
            "payment_verified",
            "status",
            "created_at",
        ]


class OrderTrackSerializer(serializers.ModelSerializer):
    """What a customer sees about their own order."""

    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "token_number",
            "order_type",
            "table_number",
            "pickup_time",
            "payment_method",
            "payment_verified",
            "status",
            "subtotal",
            "sgst",
            "cgst",
            "total_tax",
            "total",
            "items",
            "created_at",
        ]


class OrderStatusSerializer(serializers.Serializer):

    status = serializers.CharField()
