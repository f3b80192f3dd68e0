import uuid

from django.conf import settings
from django.db import models


class Payment(models.Model):
    METHOD_CHOICES = (
        ("upi", "UPI (manual proof)"),
        ("gateway", "Payment gateway"),
    )

    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("success", "Success"),
        ("failed", "Failed"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="payments")
    method = models.CharField(max_length=10, choices=METHOD_CHOICES, default="upi")

    # 12-digit bank reference; gateway payments get it on success
    utr = models.CharField(max_length=40, null=True, blank=True, db_index=True)
    gateway_transaction_id = models.CharField(max_length=100, null=True, blank=True)
    merchant_transaction_id = models.CharField(
        max_length=100, null=True, blank=True, unique=True
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    time_submitted = models.DateTimeField()
    status = models.CharField(max_length=15, choices=STATUS_CHOICES, default="pending", db_index=True)

    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="verified_payments",
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    admin_notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_values = dict(zip(field_names, values))
        return instance

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        self._loaded_values = {"status": self.status}

    def previous_value(self, field_name):
        return getattr(self, "_loaded_values", {}).get(field_name)

    @property
    def is_resolved(self):
        return self.status != "pending"

    def __str__(self):
        return f"{self.method} {self.amount} ({self.status})"
