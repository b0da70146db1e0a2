"""DRF permissions driven by role capabilities."""

from __future__ import annotations

from typing import Optional, Tuple, Type

from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from modules.accounts.capabilities import Capability, role_has
from modules.accounts.constants import ROLE_CLAIM


def request_role(request: Request) -> Optional[str]:
    """Role of the caller, taken from the verified access token when present."""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    token = getattr(request, "auth", None)
    if token is not None and hasattr(token, "get"):
        claim = token.get(ROLE_CLAIM)
        if claim:
            return claim
    return getattr(user, "role", None)


class HasCapability(BasePermission):
    capabilities: Tuple[Capability, ...] = ()
    message = "You do not have permission to perform this action."

    def has_permission(self, request: Request, view) -> bool:
        role = request_role(request)
        return any(role_has(role, capability) for capability in self.capabilities)


def requires(*capabilities: Capability) -> Type[HasCapability]:
    """Build a permission class granting access to roles holding any of ``capabilities``."""
    name = "Or".join(c.name.title().replace("_", "") for c in capabilities)
    return type(f"Requires{name}", (HasCapability,), {"capabilities": capabilities})
