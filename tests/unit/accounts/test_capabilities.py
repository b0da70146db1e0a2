from __future__ import annotations

from types import SimpleNamespace

import pytest

from modules.accounts.capabilities import (
    Capability,
    capabilities_for,
    parse_role,
    role_has,
)
from modules.accounts.constants import UserRole
from modules.accounts.permissions import request_role, requires

pytestmark = pytest.mark.unit


class TestRoleCapabilities:
    @pytest.mark.parametrize(
        ("role", "capability", "expected"),
        [
            (UserRole.MEMBER, Capability.PLACE_ORDER, True),
            (UserRole.MEMBER, Capability.VIEW_OWN_ORDERS, True),
            (UserRole.MEMBER, Capability.LIST_ORDERS, False),
            (UserRole.KIOSK, Capability.PLACE_ORDER, True),
            (UserRole.KIOSK, Capability.VIEW_OWN_ORDERS, False),
            (UserRole.BARISTA, Capability.UPDATE_ORDER_STATUS, True),
            (UserRole.BARISTA, Capability.PLACE_ORDER, False),
            (UserRole.BARISTA, Capability.LOOKUP_ORDER_NUMBER, False),
            (UserRole.ADMIN, Capability.LOOKUP_ORDER_NUMBER, True),
            (UserRole.ADMIN, Capability.MANAGE_CATALOG, True),
        ],
    )
    def test_role_has(self, role, capability, expected):
        assert role_has(role, capability) is expected

    @pytest.mark.parametrize("role", [None, "", "owner"])
    def test_unknown_roles_have_nothing(self, role):
        assert parse_role(role) is None
        assert capabilities_for(role) == frozenset()


class TestRequires:
    def _request(self, role=None, authenticated=True, claim=None):
        user = SimpleNamespace(is_authenticated=authenticated, role=role)
        auth = {"role": claim} if claim else None
        return SimpleNamespace(user=user, auth=auth)

    def test_permission_class_name(self):
        permission = requires(Capability.VIEW_OWN_ORDERS, Capability.VIEW_ANY_ORDER)
        assert permission.__name__ == "RequiresViewOwnOrdersOrViewAnyOrder"

    def test_any_listed_capability_grants_access(self):
        permission = requires(Capability.VIEW_OWN_ORDERS, Capability.VIEW_ANY_ORDER)()

        assert permission.has_permission(self._request(UserRole.MEMBER), None)
        assert permission.has_permission(self._request(UserRole.BARISTA), None)
        assert not permission.has_permission(self._request(UserRole.KIOSK), None)

    def test_token_claim_wins_over_stored_role(self):
        request = self._request(role=UserRole.ADMIN, claim=UserRole.MEMBER)
        assert request_role(request) == UserRole.MEMBER

    def test_anonymous_has_no_role(self):
        assert request_role(self._request(UserRole.ADMIN, authenticated=False)) is None
