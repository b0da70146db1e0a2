"""Catalog DRF serializers (input validation and read representation)."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.catalog.models import Category, Product, ProductCustomization

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CategoryInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    slug = serializers.SlugField(max_length=120, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    image_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    display_order = serializers.IntegerField(required=False)
    is_active = serializers.BooleanField(required=False)


class ProductInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    slug = serializers.SlugField(max_length=255, required=False)
    category_id = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True)
    base_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.01")
    )
    image_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    preparation_time = serializers.IntegerField(min_value=0, required=False)
    display_order = serializers.IntegerField(required=False)
    is_available = serializers.BooleanField(required=False)
    is_customizable = serializers.BooleanField(required=False)


class CustomizationInputSerializer(serializers.Serializer):
    customization_type = serializers.CharField(max_length=50)
    option_name = serializers.CharField(max_length=100)
    price_modifier = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False
    )
    display_order = serializers.IntegerField(required=False)


# ---------------------------------------------------------------------------
# Output Serializers
# ---------------------------------------------------------------------------


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "image_url",
            "display_order",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductCustomizationSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductCustomization
        fields = [
            "id",
            "product_id",
            "customization_type",
            "option_name",
            "price_modifier",
            "display_order",
        ]
        read_only_fields = fields


class CategorySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug"]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    category = CategorySummarySerializer(read_only=True)
    customizations = ProductCustomizationSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "base_price",
            "image_url",
            "preparation_time",
            "display_order",
            "is_available",
            "is_customizable",
            "category",
            "customizations",
            "deleted_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
