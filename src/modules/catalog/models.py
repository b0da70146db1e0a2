"""Catalog models: categories, products and their customization options.

- Slugs are unique per table and used for public lookups.
- ``Product.base_price`` must be greater than zero.
- Products are soft-deleted so historical order items can still point at
  them; default listings use ``Product.objects.alive()``.
- ``ProductCustomization.price_modifier`` is signed (a smaller size can be
  cheaper than the base drink).
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel


class Category(BaseModel):
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=120, unique=True)
    description = models.TextField(blank=True, default="")
    image_url = models.URLField(max_length=500, blank=True, default="")
    display_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "categories"
        ordering = ["display_order", "name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name


class Product(SoftDeleteModel):
    category = models.ForeignKey(
        "catalog.Category",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True, default="")
    base_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    image_url = models.URLField(max_length=500, blank=True, default="")
    preparation_time = models.PositiveIntegerField(default=5)
    display_order = models.IntegerField(default=0)
    is_available = models.BooleanField(default=True)
    is_customizable = models.BooleanField(default=False)

    class Meta:
        db_table = "products"
        ordering = ["display_order", "name"]
        indexes = [
            models.Index(fields=["is_available"], name="products_available_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(base_price__gt=0),
                name="products_base_price_positive",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class ProductCustomization(BaseModel):
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.CASCADE,
        related_name="customizations",
    )
    customization_type = models.CharField(max_length=50)
    option_name = models.CharField(max_length=100)
    price_modifier = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    display_order = models.IntegerField(default=0)

    class Meta:
        db_table = "product_customizations"
        ordering = ["customization_type", "display_order", "option_name"]

    def __str__(self) -> str:
        return f"{self.customization_type}: {self.option_name} ({self.price_modifier:+})"
