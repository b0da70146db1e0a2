"""Catalog API views.

Reads are public; writes need the ``MANAGE_CATALOG`` capability (admins).
All ORM access goes through the catalog services.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.accounts.capabilities import Capability
from modules.accounts.permissions import requires
from modules.catalog.dtos import (
    CreateCategoryDTO,
    CreateProductDTO,
    CustomizationDTO,
    UpdateCategoryDTO,
    UpdateCustomizationDTO,
    UpdateProductDTO,
)
from modules.catalog.exceptions import (
    CategoryNotFound,
    CustomizationNotFound,
    ProductNotFound,
    SlugAlreadyExists,
)
from modules.catalog.filters import ProductFilter
from modules.catalog.models import Category, Product
from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    ProductDjangoRepository,
)
from modules.catalog.serializers import (
    CategoryInputSerializer,
    CategorySerializer,
    CustomizationInputSerializer,
    ProductCustomizationSerializer,
    ProductInputSerializer,
    ProductSerializer,
)
from modules.catalog.services import CategoryService, ProductService
from modules.core.responses import error_response, success_response

CatalogManager = requires(Capability.MANAGE_CATALOG)


class CatalogPermissionsMixin:
    read_actions = {"list", "retrieve", "by_slug"}

    def get_permissions(self):
        if self.action in self.read_actions:
            return [AllowAny()]
        return [IsAuthenticated(), CatalogManager()]


def _product_service() -> ProductService:
    return ProductService(
        repository=ProductDjangoRepository(),
        category_repository=CategoryDjangoRepository(),
    )


class CategoryViewSet(CatalogPermissionsMixin, ListModelMixin, GenericViewSet):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    filter_backends = [OrderingFilter]
    ordering_fields = ["display_order", "name"]
    ordering = ["display_order", "name"]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CategoryService(repository=CategoryDjangoRepository())

    def get_queryset(self):
        user = self.request.user
        if user.is_authenticated and CatalogManager().has_permission(self.request, self):
            return self._service.list_categories()
        return self._service.list_categories({"is_active": True})

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            category = self._service.get_category(str(pk))
        except CategoryNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return success_response(CategorySerializer(category).data)

    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[-\w]+)")
    def by_slug(self, request: Request, slug: str | None = None) -> Response:
        try:
            category = self._service.get_by_slug(str(slug))
        except CategoryNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return success_response(CategorySerializer(category).data)

    def create(self, request: Request) -> Response:
        serializer = CategoryInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            category = self._service.create_category(
                CreateCategoryDTO(**serializer.validated_data)
            )
        except SlugAlreadyExists as exc:
            return error_response(str(exc), status=status.HTTP_409_CONFLICT)
        return success_response(
            CategorySerializer(category).data, status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        serializer = CategoryInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            category = self._service.update_category(
                str(pk), UpdateCategoryDTO(**serializer.validated_data)
            )
        except CategoryNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        except SlugAlreadyExists as exc:
            return error_response(str(exc), status=status.HTTP_409_CONFLICT)
        return success_response(CategorySerializer(category).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_category(str(pk))
        except CategoryNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProductViewSet(CatalogPermissionsMixin, ListModelMixin, GenericViewSet):
    queryset = Product.objects.alive()
    serializer_class = ProductSerializer
    filterset_class = ProductFilter
    search_fields = ["name", "description"]
    ordering_fields = ["display_order", "name", "base_price", "created_at"]
    ordering = ["display_order", "name"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _product_service()

    def get_queryset(self):
        return self._service.list_products()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            product = self._service.get_product(str(pk))
        except ProductNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return success_response(ProductSerializer(product).data)

    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[-\w]+)")
    def by_slug(self, request: Request, slug: str | None = None) -> Response:
        try:
            product = self._service.get_by_slug(str(slug))
        except ProductNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return success_response(ProductSerializer(product).data)

    def create(self, request: Request) -> Response:
        serializer = ProductInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            product = self._service.create_product(
                CreateProductDTO(**serializer.validated_data)
            )
        except SlugAlreadyExists as exc:
            return error_response(str(exc), status=status.HTTP_409_CONFLICT)
        except CategoryNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return success_response(
            ProductSerializer(product).data, status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        serializer = ProductInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            product = self._service.update_product(
                str(pk), UpdateProductDTO(**serializer.validated_data)
            )
        except (ProductNotFound, CategoryNotFound) as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        except SlugAlreadyExists as exc:
            return error_response(str(exc), status=status.HTTP_409_CONFLICT)
        return success_response(ProductSerializer(product).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_product(str(pk))
        except ProductNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def restore(self, request: Request, pk: str | None = None) -> Response:
        try:
            product = self._service.restore_product(str(pk))
        except ProductNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return success_response(ProductSerializer(product).data)

    @action(detail=True, methods=["post"])
    def customizations(self, request: Request, pk: str | None = None) -> Response:
        serializer = CustomizationInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            customization = self._service.add_customization(
                str(pk), CustomizationDTO(**serializer.validated_data)
            )
        except ProductNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return success_response(
            ProductCustomizationSerializer(customization).data,
            status=status.HTTP_201_CREATED,
        )


class CustomizationViewSet(CatalogPermissionsMixin, GenericViewSet):
    read_actions: set[str] = set()
    serializer_class = ProductCustomizationSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _product_service()

    def update(self, request: Request, pk: str | None = None) -> Response:
        serializer = CustomizationInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            customization = self._service.update_customization(
                str(pk), UpdateCustomizationDTO(**serializer.validated_data)
            )
        except CustomizationNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return success_response(ProductCustomizationSerializer(customization).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_customization(str(pk))
        except CustomizationNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)
