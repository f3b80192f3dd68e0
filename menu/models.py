import uuid
from django.core.validators import MinValueValidator
from django.db import models


class MenuItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=150)
    description = models.TextField(blank=True, default="")

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)]
    )

    # Free text, e.g. "Signature Teas", "Snacks"
    category = models.CharField(max_length=100, db_index=True)

    available = models.BooleanField(default=True, db_index=True)
    is_popular = models.BooleanField(default=False)

    # Emoji glyph shown on the menu card
    image = models.CharField(max_length=16, default="🍵", blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category", "name"]

    def save(self, *args, **kwargs):
        self.name = self.name.strip()
        self.category = self.category.strip()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} - ₹{self.price}"
