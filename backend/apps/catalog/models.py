import uuid

from django.db import models
from django.utils import timezone


class Timestamped(models.Model):
    created_at = models.DateTimeField(default=timezone.now)
    # Filled from created_at on first save so both come from one clock reading.
    updated_at = models.DateTimeField()

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if self.updated_at is None:
            self.updated_at = self.created_at
        super().save(*args, **kwargs)


class Category(Timestamped):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Uniqueness of name is checked by CategoryService, not by the schema.
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True, default="")

    class Meta:
        db_table = "categories"
        ordering = ("created_at", "id")
        indexes = [
            models.Index(fields=["name"], name="category_name_idx"),
        ]

    def __str__(self):
        return self.name


class Product(Timestamped):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=18, decimal_places=2)
    description = models.CharField(max_length=1000, blank=True, default="")
    # PROTECT keeps the schema in line with CategoryService.delete_category,
    # which refuses to delete a category that still has products.
    category = models.ForeignKey(
        Category, on_delete=models.PROTECT, related_name="products"
    )

    class Meta:
        db_table = "products"
        ordering = ("created_at", "id")
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
            models.Index(fields=["price"], name="product_price_idx"),
        ]

    def __str__(self):
        return self.name
