"""Authentication use cases: register, login, refresh, logout."""

from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

import structlog
from django.contrib.auth.models import update_last_login
from django.db import transaction
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from modules.accounts.constants import UserRole
from modules.accounts.exceptions import (
    EmailAlreadyExists,
    InvalidCredentials,
    InvalidRefreshToken,
    UserInactive,
    UserNotFound,
)
from modules.accounts.tokens import issue_tokens, subject_of

if TYPE_CHECKING:
    from modules.accounts.dtos import RegisterUserDTO, TokenPairDTO
    from modules.accounts.models import User
    from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class AuthService:
    def __init__(self, user_repository: IUserRepository) -> None:
        self._user_repo = user_repository

    @transaction.atomic
    def register(self, dto: RegisterUserDTO) -> Tuple[User, TokenPairDTO]:
        """Create a member account and sign it in.

        Raises:
            EmailAlreadyExists: the email is taken.
        """
        if self._user_repo.get_by_email(dto.email):
            logger.warning("auth.register_conflict")
            raise EmailAlreadyExists(f"Email {dto.email} is already registered.")

        user = self._user_repo.create_user(
            email=dto.email,
            password=dto.password,
            full_name=dto.full_name,
            phone=dto.phone or "",
            role=UserRole.MEMBER,
        )
        logger.info("auth.registered", user_id=str(user.id))
        return user, issue_tokens(user)

    def login(self, email: str, password: str) -> Tuple[User, TokenPairDTO]:
        """Raises:
        InvalidCredentials: unknown email or wrong password.
        UserInactive: the account is deactivated.
        """
        user = self._user_repo.get_by_email(email)
        if user is None or not user.check_password(password):
            logger.warning("auth.login_failed")
            raise InvalidCredentials("Invalid email or password.")
        if not user.is_active:
            raise UserInactive("Account is inactive.")

        update_last_login(None, user)
        logger.info("auth.logged_in", user_id=str(user.id), role=user.role)
        return user, issue_tokens(user)

    @transaction.atomic
    def refresh(self, refresh_token: str) -> TokenPairDTO:
        """Rotate a refresh token: the old one is blacklisted.

        Role and email claims are re-read from the account, so a role change
        takes effect on the next refresh.
        """
        token = self._parse(refresh_token)
        user = self._user_repo.get_by_id(subject_of(token))
        if user is None:
            raise UserNotFound("Token subject no longer exists.")
        if not user.is_active:
            raise UserInactive("Account is inactive.")

        token.blacklist()
        logger.info("auth.token_refreshed", user_id=str(user.id))
        return issue_tokens(user)

    def logout(self, refresh_token: str) -> None:
        token = self._parse(refresh_token)
        token.blacklist()
        logger.info("auth.logged_out", user_id=subject_of(token))

    def get_user(self, user_id: str) -> User:
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFound(f"User {user_id} not found.")
        return user

    @staticmethod
    def _parse(refresh_token: str) -> RefreshToken:
        try:
            return RefreshToken(refresh_token)
        except TokenError as exc:
            raise InvalidRefreshToken(str(exc)) from exc
