from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.accounts.constants import UserRole
from modules.accounts.models import User
from modules.accounts.tokens import issue_tokens
from modules.catalog.models import Category, Product, ProductCustomization


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


def _make_user(email: str, role: str, full_name: str) -> User:
    return User.objects.create_user(
        email=email, password="s3cret-pass", full_name=full_name, role=role
    )


@pytest.fixture()
def member_user():
    return _make_user("member@example.com", UserRole.MEMBER, "Mia Member")


@pytest.fixture()
def other_member():
    return _make_user("other@example.com", UserRole.MEMBER, "Omar Other")


@pytest.fixture()
def kiosk_user():
    return _make_user("kiosk@example.com", UserRole.KIOSK, "Front Kiosk")


@pytest.fixture()
def barista_user():
    return _make_user("barista@example.com", UserRole.BARISTA, "Bea Barista")


@pytest.fixture()
def admin_user():
    return _make_user("admin@example.com", UserRole.ADMIN, "Ada Admin")


@pytest.fixture()
def client_for():
    """Build an APIClient carrying a real access token for ``user``."""

    def _client(user: User) -> APIClient:
        client = APIClient()
        tokens = issue_tokens(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens.access_token}")
        return client

    return _client


@pytest.fixture()
def member_client(client_for, member_user):
    return client_for(member_user)


@pytest.fixture()
def kiosk_client(client_for, kiosk_user):
    return client_for(kiosk_user)


@pytest.fixture()
def barista_client(client_for, barista_user):
    return client_for(barista_user)


@pytest.fixture()
def admin_client(client_for, admin_user):
    return client_for(admin_user)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def category():
    return Category.objects.create(name="Matcha", slug="matcha")


@pytest.fixture()
def matcha_latte(category):
    return Product.objects.create(
        category=category,
        name="Matcha Latte",
        slug="matcha-latte",
        base_price=Decimal("45000"),
        is_customizable=True,
    )


@pytest.fixture()
def large_size(matcha_latte):
    return ProductCustomization.objects.create(
        product=matcha_latte,
        customization_type="size",
        option_name="Large",
        price_modifier=Decimal("5000"),
    )


@pytest.fixture()
def croissant(category):
    return Product.objects.create(
        category=category,
        name="Butter Croissant",
        slug="butter-croissant",
        base_price=Decimal("28000"),
        is_customizable=False,
    )


@pytest.fixture()
def sold_out_product(category):
    return Product.objects.create(
        category=category,
        name="Seasonal Hojicha",
        slug="seasonal-hojicha",
        base_price=Decimal("40000"),
        is_available=False,
    )
