"""Catalog repository interfaces.

``ICatalogReader`` is the read-only lookup contract the order pricing code
depends on. ``IProductRepository`` adds the write side used by catalog
management.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.models import Category, Product, ProductCustomization


class ICatalogReader(ABC):
    @abstractmethod
    def get_product(self, id: str, include_deleted: bool = False) -> Optional[Product]:
        """Retrieve a product; soft-deleted rows only when ``include_deleted``."""

    @abstractmethod
    def get_customization(self, id: str) -> Optional[ProductCustomization]:
        """Retrieve a customization option by id."""


class ICategoryRepository(IRepository["Category"]):
    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[Category]:
        """Retrieve a category by slug."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Remove a category; its products keep existing without one."""


class IProductRepository(ICatalogReader, IRepository["Product"]):
    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[Product]:
        """Retrieve a live product by slug."""

    @abstractmethod
    def slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        """Whether any product, deleted or not, already uses ``slug``."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None, include_deleted: bool = False
    ) -> models.QuerySet:
        """List products; soft-deleted rows only when ``include_deleted``."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Soft-delete a product."""

    @abstractmethod
    def save_customization(self, customization: ProductCustomization) -> ProductCustomization:
        """Persist a customization option."""

    @abstractmethod
    def delete_customization(self, id: str) -> bool:
        """Remove a customization option."""
