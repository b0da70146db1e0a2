from __future__ import annotations

import uuid
from decimal import Decimal

import pytest
from pydantic import ValidationError

from modules.catalog.dtos import (
    CreateCategoryDTO,
    CreateProductDTO,
    CustomizationDTO,
    UpdateProductDTO,
)
from modules.catalog.exceptions import (
    CategoryNotFound,
    CustomizationNotFound,
    ProductNotFound,
    SlugAlreadyExists,
)
from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    ProductDjangoRepository,
)
from modules.catalog.services import CategoryService, ProductService

pytestmark = pytest.mark.unit


@pytest.fixture()
def category_service():
    return CategoryService(CategoryDjangoRepository())


@pytest.fixture()
def product_service():
    return ProductService(ProductDjangoRepository(), CategoryDjangoRepository())


class TestCategoryService:
    def test_slug_derived_from_name(self, category_service):
        category = category_service.create_category(CreateCategoryDTO(name="Cold Brew"))
        assert category.slug == "cold-brew"

    def test_duplicate_slug(self, category_service, category):
        with pytest.raises(SlugAlreadyExists):
            category_service.create_category(CreateCategoryDTO(name="Matcha"))

    def test_delete_missing(self, category_service):
        with pytest.raises(CategoryNotFound):
            category_service.delete_category(str(uuid.uuid4()))

    def test_delete_keeps_products(self, category_service, matcha_latte):
        category_service.delete_category(str(matcha_latte.category_id))

        matcha_latte.refresh_from_db()
        assert matcha_latte.category_id is None


class TestProductService:
    def test_create_product(self, product_service, category):
        product = product_service.create_product(
            CreateProductDTO(
                name="Hojicha Latte",
                base_price=Decimal("43000"),
                category_id=category.id,
                is_customizable=True,
            )
        )
        assert product.slug == "hojicha-latte"
        assert product.category_id == category.id

    def test_unknown_category(self, product_service):
        with pytest.raises(CategoryNotFound):
            product_service.create_product(
                CreateProductDTO(
                    name="Hojicha Latte",
                    base_price=Decimal("43000"),
                    category_id=uuid.uuid4(),
                )
            )

    def test_price_must_be_positive(self):
        with pytest.raises(ValidationError):
            CreateProductDTO(name="Free Water", base_price=Decimal("0"))

    def test_deleted_product_keeps_slug_reserved(self, product_service, matcha_latte):
        product_service.delete_product(str(matcha_latte.id))

        with pytest.raises(SlugAlreadyExists):
            product_service.create_product(
                CreateProductDTO(name="Matcha Latte", base_price=Decimal("45000"))
            )

    def test_deleted_product_is_hidden_until_restored(self, product_service, matcha_latte):
        product_service.delete_product(str(matcha_latte.id))

        with pytest.raises(ProductNotFound):
            product_service.get_product(str(matcha_latte.id))
        assert product_service.get_product(str(matcha_latte.id), include_deleted=True)

        restored = product_service.restore_product(str(matcha_latte.id))
        assert not restored.is_deleted

    def test_partial_update(self, product_service, matcha_latte):
        product = product_service.update_product(
            str(matcha_latte.id), UpdateProductDTO(is_available=False)
        )
        assert product.is_available is False
        assert product.base_price == Decimal("45000")

    def test_malformed_id_is_not_found(self, product_service):
        with pytest.raises(ProductNotFound):
            product_service.get_product("not-a-uuid")


class TestCustomizations:
    def test_add_and_remove(self, product_service, matcha_latte):
        customization = product_service.add_customization(
            str(matcha_latte.id),
            CustomizationDTO(
                customization_type="milk",
                option_name="Oat Milk",
                price_modifier=Decimal("7000"),
            ),
        )
        assert customization.product_id == matcha_latte.id

        product_service.delete_customization(str(customization.id))
        with pytest.raises(CustomizationNotFound):
            product_service.delete_customization(str(customization.id))
