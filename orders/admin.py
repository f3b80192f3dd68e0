from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("name", "price", "quantity", "customizations")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):

    list_display = (
        "token_number",
        "order_type",
        "status",
        "payment_method",
        "payment_verified",
        "total",
        "created_at",
    )
    list_filter = ("status", "order_type", "payment_method", "payment_verified")
    search_fields = ("token_number", "customer_name", "customer_phone")
    readonly_fields = ("created_at", "updated_at")

    inlines = [OrderItemInline]
