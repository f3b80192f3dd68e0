from rest_framework import serializers

from .models import MenuItem


class MenuItemSerializer(serializers.ModelSerializer):

    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)

    class Meta:
        model = MenuItem
        fields = "__all__"
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Item name is required")
        return value.strip()

    def validate_category(self, value):
        if not value.strip():
            raise serializers.ValidationError("Please select a category")
        return value.strip()


class PublicMenuItemSerializer(serializers.ModelSerializer):

    class Meta:
        model = MenuItem
        fields = [
            "id",
            "name",
            "description",
            "price",
            "category",
            "image",
            "is_popular",
        ]


class AvailabilitySerializer(serializers.Serializer):

    available = serializers.BooleanField(required=False)
