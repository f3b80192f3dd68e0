import uuid
from decimal import Decimal

from django.db import models

from .status import OrderStatus


class Order(models.Model):

    ORDER_TYPE = (
        ("dine-in", "Dine In"),
        ("takeaway", "Takeaway"),
    )

    PAYMENT_METHOD = (
        ("cash", "Cash"),
        ("online", "Online"),
    )

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    order_type = models.CharField(
        max_length=15,
        choices=ORDER_TYPE
    )

    table_number = models.CharField(max_length=10, null=True, blank=True)

    # Takeaway pickup slot
    pickup_time = models.TimeField(null=True, blank=True)

    payment_method = models.CharField(
        max_length=10,
        choices=PAYMENT_METHOD
    )

    payment_verified = models.BooleanField(default=False)
    payment_verification_notes = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True
    )

    # Letter + 3 digits. Not unique; two orders can share a token.
    token_number = models.CharField(max_length=4, db_index=True)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    sgst = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    cgst = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_tax = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    customer_name = models.CharField(max_length=150, null=True, blank=True)
    customer_phone = models.CharField(max_length=20, null=True, blank=True)

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
        # Baseline for change detection in the next save's signals
        self._loaded_values = {
            "status": self.status,
            "payment_verified": self.payment_verified,
        }

    def previous_value(self, field_name):
        return getattr(self, "_loaded_values", {}).get(field_name)

    def apply_totals(self, totals):
        self.subtotal = totals.subtotal
        self.sgst = totals.sgst
        self.cgst = totals.cgst
        self.total_tax = totals.total_tax
        self.total = totals.total

    def __str__(self):
        return f"#{self.token_number} ({self.status})"


class OrderItem(models.Model):

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items"
    )

    menu_item = models.ForeignKey(
        "menu.MenuItem",
        on_delete=models.SET_NULL,
        null=True,
        blank=True
    )

    # Cart line id at checkout
    line_id = models.CharField(max_length=80, blank=True, default="")

    name = models.CharField(max_length=150)
    category = models.CharField(max_length=100, blank=True, default="")
    image = models.CharField(max_length=16, blank=True, default="")

    # Unit price at time of order
    price = models.DecimalField(max_digits=10, decimal_places=2)

    quantity = models.PositiveIntegerField()

    customizations = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ["id"]

    @property
    def line_total(self):
        return (self.price or Decimal("0.00")) * self.quantity

    def __str__(self):
        return f"{self.name} x {self.quantity}"
