"""Catalog service layer.

Plain create/read/update/soft-delete over categories, products and their
customization options. Slugs are derived from the name when not supplied
and must stay unique (deleted products keep theirs reserved).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import models, transaction
from django.utils.text import slugify

from modules.catalog.exceptions import (
    CategoryNotFound,
    CustomizationNotFound,
    ProductNotFound,
    SlugAlreadyExists,
)
from modules.catalog.models import Category, Product, ProductCustomization

if TYPE_CHECKING:
    from modules.catalog.dtos import (
        CreateCategoryDTO,
        CreateProductDTO,
        CustomizationDTO,
        UpdateCategoryDTO,
        UpdateCustomizationDTO,
        UpdateProductDTO,
    )
    from modules.catalog.repositories.interfaces import (
        ICategoryRepository,
        IProductRepository,
    )

logger = structlog.get_logger(__name__)


def _apply(entity: Any, dto: Any) -> None:
    for field, value in dto.model_dump(exclude_none=True).items():
        setattr(entity, field, value)


class CategoryService:
    def __init__(self, repository: ICategoryRepository) -> None:
        self._repo = repository

    def list_categories(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        return self._repo.list(filters)

    def get_category(self, id: str) -> Category:
        category = self._repo.get_by_id(id)
        if not category:
            raise CategoryNotFound(f"Category {id} not found.")
        return category

    def get_by_slug(self, slug: str) -> Category:
        category = self._repo.get_by_slug(slug)
        if not category:
            raise CategoryNotFound(f"Category '{slug}' not found.")
        return category

    @transaction.atomic
    def create_category(self, dto: CreateCategoryDTO) -> Category:
        slug = dto.slug or slugify(dto.name)
        self._ensure_slug_free(slug)
        category = Category(**dto.model_dump(exclude={"slug"}), slug=slug)
        category = self._repo.save(category)
        logger.info("category.created", category_id=str(category.id), slug=slug)
        return category

    @transaction.atomic
    def update_category(self, id: str, dto: UpdateCategoryDTO) -> Category:
        category = self.get_category(id)
        if dto.slug and dto.slug != category.slug:
            self._ensure_slug_free(dto.slug)
        _apply(category, dto)
        category = self._repo.save(category)
        logger.info("category.updated", category_id=str(id))
        return category

    @transaction.atomic
    def delete_category(self, id: str) -> None:
        if not self._repo.delete(id):
            raise CategoryNotFound(f"Category {id} not found.")

    def _ensure_slug_free(self, slug: str) -> None:
        if self._repo.get_by_slug(slug):
            raise SlugAlreadyExists(f"Category slug '{slug}' is already in use.")


class ProductService:
    def __init__(
        self,
        repository: IProductRepository,
        category_repository: ICategoryRepository,
    ) -> None:
        self._repo = repository
        self._category_repo = category_repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(
        self, filters: Optional[Dict[str, Any]] = None, include_deleted: bool = False
    ) -> models.QuerySet:
        return self._repo.list(filters, include_deleted=include_deleted)

    def get_product(self, id: str, include_deleted: bool = False) -> Product:
        product = self._repo.get_product(id, include_deleted=include_deleted)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def get_by_slug(self, slug: str) -> Product:
        product = self._repo.get_by_slug(slug)
        if not product:
            raise ProductNotFound(f"Product '{slug}' not found.")
        return product

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        slug = dto.slug or slugify(dto.name)
        if self._repo.slug_taken(slug):
            raise SlugAlreadyExists(f"Product slug '{slug}' is already in use.")
        if dto.category_id:
            self._require_category(str(dto.category_id))

        product = Product(**dto.model_dump(exclude={"slug"}), slug=slug)
        product = self._repo.save(product)
        logger.info("product.created", product_id=str(product.id), slug=slug)
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        product = self.get_product(id)
        if dto.slug and self._repo.slug_taken(dto.slug, exclude_id=id):
            raise SlugAlreadyExists(f"Product slug '{dto.slug}' is already in use.")
        if dto.category_id:
            self._require_category(str(dto.category_id))

        _apply(product, dto)
        product = self._repo.save(product)
        logger.info("product.updated", product_id=str(id))
        return product

    @transaction.atomic
    def delete_product(self, id: str) -> None:
        if not self._repo.delete(id):
            raise ProductNotFound(f"Product {id} not found.")

    @transaction.atomic
    def restore_product(self, id: str) -> Product:
        product = self.get_product(id, include_deleted=True)
        product.restore()
        logger.info("product.restored", product_id=str(id))
        return product

    # ------------------------------------------------------------------
    # Customizations
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_customization(self, product_id: str, dto: CustomizationDTO) -> ProductCustomization:
        product = self.get_product(product_id)
        customization = ProductCustomization(product=product, **dto.model_dump())
        return self._repo.save_customization(customization)

    @transaction.atomic
    def update_customization(
        self, id: str, dto: UpdateCustomizationDTO
    ) -> ProductCustomization:
        customization = self._repo.get_customization(id)
        if not customization:
            raise CustomizationNotFound(f"Customization {id} not found.")
        _apply(customization, dto)
        return self._repo.save_customization(customization)

    @transaction.atomic
    def delete_customization(self, id: str) -> None:
        if not self._repo.delete_customization(id):
            raise CustomizationNotFound(f"Customization {id} not found.")

    def _require_category(self, category_id: str) -> Category:
        category = self._category_repo.get_by_id(category_id)
        if not category:
            raise CategoryNotFound(f"Category {category_id} not found.")
        return category
