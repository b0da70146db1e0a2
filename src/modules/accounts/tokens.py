"""Access/refresh token issuance on top of SimpleJWT.

Tokens carry the subject id (``user_id``), ``exp`` and the ``role`` and
``email`` claims. Verification is SimpleJWT's ``JWTAuthentication``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken

from modules.accounts.constants import EMAIL_CLAIM, ROLE_CLAIM
from modules.accounts.dtos import TokenPairDTO
from modules.accounts.models import User


def issue_tokens(user: User) -> TokenPairDTO:
    refresh = RefreshToken.for_user(user)
    refresh[ROLE_CLAIM] = user.role
    refresh[EMAIL_CLAIM] = user.email
    access = refresh.access_token
    return TokenPairDTO(
        access_token=str(access),
        refresh_token=str(refresh),
        expires_at=datetime.fromtimestamp(access["exp"], tz=timezone.utc),
    )


def subject_of(token: RefreshToken) -> str:
    return str(token[api_settings.USER_ID_CLAIM])
