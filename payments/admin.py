from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):

    list_display = ("order", "method", "utr", "amount", "status", "verified_by", "created_at")
    list_filter = ("status", "method")
    search_fields = ("utr", "merchant_transaction_id", "order__token_number")
    readonly_fields = ("created_at", "updated_at")
