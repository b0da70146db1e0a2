import django_filters

from modules.catalog.models import Product


class ProductFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    category = django_filters.UUIDFilter(field_name="category_id")
    category_slug = django_filters.CharFilter(field_name="category__slug")
    is_available = django_filters.BooleanFilter(field_name="is_available")
    is_customizable = django_filters.BooleanFilter(field_name="is_customizable")
    min_price = django_filters.NumberFilter(field_name="base_price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="base_price", lookup_expr="lte")

    class Meta:
        model = Product
        fields = [
            "name",
            "category",
            "category_slug",
            "is_available",
            "is_customizable",
            "min_price",
            "max_price",
        ]
