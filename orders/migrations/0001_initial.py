import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("menu", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "order_type",
                    models.CharField(
                        choices=[("dine-in", "Dine In"), ("takeaway", "Takeaway")],
                        max_length=15,
                    ),
                ),
                ("table_number", models.CharField(blank=True, max_length=10, null=True)),
                ("pickup_time", models.TimeField(blank=True, null=True)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("cash", "Cash"), ("online", "Online")],
                        max_length=10,
                    ),
                ),
                ("payment_verified", models.BooleanField(default=False)),
                ("payment_verification_notes", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("accepted", "Accepted"),
                            ("preparing", "Preparing"),
                            ("ready", "Ready"),
                            ("delivered", "Delivered"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("token_number", models.CharField(db_index=True, max_length=4)),
                ("subtotal", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("sgst", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("cgst", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("total_tax", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("total", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("customer_name", models.CharField(blank=True, max_length=150, null=True)),
                ("customer_phone", models.CharField(blank=True, max_length=20, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_id", models.CharField(blank=True, default="", max_length=80)),
                ("name", models.CharField(max_length=150)),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                ("image", models.CharField(blank=True, default="", max_length=16)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("quantity", models.PositiveIntegerField()),
                ("customizations", models.JSONField(blank=True, null=True)),
                (
                    "menu_item",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to="menu.menuitem",
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
    ]
