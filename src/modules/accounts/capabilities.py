"""Role to capability mapping.

Roles are a closed set; views ask for a capability, never for a role name.
"""

from __future__ import annotations

import enum
from typing import FrozenSet, Mapping, Optional

from modules.accounts.constants import UserRole


class Capability(str, enum.Enum):
    PLACE_ORDER = "place_order"
    VIEW_OWN_ORDERS = "view_own_orders"
    VIEW_ANY_ORDER = "view_any_order"
    LIST_ORDERS = "list_orders"
    LOOKUP_ORDER_NUMBER = "lookup_order_number"
    UPDATE_ORDER_STATUS = "update_order_status"
    MANAGE_CATALOG = "manage_catalog"


ROLE_CAPABILITIES: Mapping[str, FrozenSet[Capability]] = {
    UserRole.MEMBER: frozenset({Capability.PLACE_ORDER, Capability.VIEW_OWN_ORDERS}),
    UserRole.KIOSK: frozenset({Capability.PLACE_ORDER}),
    UserRole.BARISTA: frozenset(
        {
            Capability.VIEW_ANY_ORDER,
            Capability.LIST_ORDERS,
            Capability.UPDATE_ORDER_STATUS,
        }
    ),
    UserRole.ADMIN: frozenset(
        {
            Capability.PLACE_ORDER,
            Capability.VIEW_ANY_ORDER,
            Capability.LIST_ORDERS,
            Capability.LOOKUP_ORDER_NUMBER,
            Capability.UPDATE_ORDER_STATUS,
            Capability.MANAGE_CATALOG,
        }
    ),
}


def parse_role(value: Optional[str]) -> Optional[UserRole]:
    if value is None:
        return None
    try:
        return UserRole(value)
    except ValueError:
        return None


def capabilities_for(role: Optional[str]) -> FrozenSet[Capability]:
    parsed = parse_role(role)
    if parsed is None:
        return frozenset()
    return ROLE_CAPABILITIES.get(parsed, frozenset())


def role_has(role: Optional[str], capability: Capability) -> bool:
    return capability in capabilities_for(role)
