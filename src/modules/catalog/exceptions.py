"""Catalog domain exceptions."""

from __future__ import annotations


class CategoryNotFound(Exception):
    """The requested category does not exist."""


class ProductNotFound(Exception):
    """The requested product does not exist or has been soft-deleted."""


class CustomizationNotFound(Exception):
    """The requested customization option does not exist."""


class SlugAlreadyExists(Exception):
    """Another category or product already uses this slug."""
