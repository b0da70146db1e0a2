"""Django ORM implementations of the catalog repositories.

Missing or malformed ids resolve to ``None``; the service layer decides
which domain exception that becomes.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.catalog.models import Category, Product, ProductCustomization
from modules.catalog.repositories.interfaces import (
    ICategoryRepository,
    IProductRepository,
)

logger = structlog.get_logger(__name__)


class CategoryDjangoRepository(ICategoryRepository):
    def get_by_id(self, id: str) -> Optional[Category]:
        try:
            return Category.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_slug(self, slug: str) -> Optional[Category]:
        return Category.objects.filter(slug=slug).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = Category.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Category) -> Category:
        entity.save()
        logger.info("category.saved", category_id=str(entity.id), slug=entity.slug)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        category = self.get_by_id(id)
        if not category:
            return False
        category.delete()
        logger.info("category.deleted", category_id=str(id))
        return True


class ProductDjangoRepository(IProductRepository):
    def get_by_id(self, id: str) -> Optional[Product]:
        return self.get_product(id)

    def get_product(self, id: str, include_deleted: bool = False) -> Optional[Product]:
        manager = Product.objects if include_deleted else Product.objects.alive()
        try:
            return (
                manager.select_related("category")
                .prefetch_related("customizations")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_customization(self, id: str) -> Optional[ProductCustomization]:
        try:
            return ProductCustomization.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_slug(self, slug: str) -> Optional[Product]:
        return (
            Product.objects.alive()
            .select_related("category")
            .prefetch_related("customizations")
            .filter(slug=slug)
            .first()
        )

    def slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        queryset = Product.objects.filter(slug=slug)
        if exclude_id:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def list(
        self, filters: Optional[Dict[str, Any]] = None, include_deleted: bool = False
    ) -> models.QuerySet:
        manager = Product.objects if include_deleted else Product.objects.alive()
        queryset = manager.select_related("category").prefetch_related("customizations")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        entity.save()
        logger.info("product.saved", product_id=str(entity.id), slug=entity.slug)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        product = self.get_product(id)
        if not product:
            return False
        product.delete()
        logger.info("product.soft_deleted", product_id=str(id))
        return True

    @transaction.atomic
    def save_customization(self, customization: ProductCustomization) -> ProductCustomization:
        customization.save()
        logger.info(
            "product.customization_saved",
            product_id=str(customization.product_id),
            customization_id=str(customization.id),
        )
        return customization

    @transaction.atomic
    def delete_customization(self, id: str) -> bool:
        customization = self.get_customization(id)
        if not customization:
            return False
        customization.delete()
        logger.info("product.customization_deleted", customization_id=str(id))
        return True
