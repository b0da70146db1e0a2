"""Authentication endpoints under ``/api/v1/auth/``."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.dtos import RegisterUserDTO, TokenPairDTO
from modules.accounts.exceptions import (
    EmailAlreadyExists,
    InvalidCredentials,
    InvalidRefreshToken,
    UserInactive,
    UserNotFound,
)
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.accounts.serializers import (
    LoginSerializer,
    RefreshTokenSerializer,
    RegisterSerializer,
    UserSerializer,
)
from modules.accounts.services import AuthService
from modules.core.responses import error_response, success_response


def _tokens_payload(tokens: TokenPairDTO) -> dict:
    return tokens.model_dump(mode="json")


class AuthViewSet(GenericViewSet):
    serializer_class = UserSerializer
    authenticated_actions = {"me"}

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AuthService(user_repository=UserDjangoRepository())

    def get_permissions(self):
        if self.action in self.authenticated_actions:
            return [IsAuthenticated()]
        return [AllowAny()]

    def get_throttles(self) -> list[BaseThrottle]:
        self.throttle_scope = "auth" if self.action in {"register", "login"} else None
        return super().get_throttles()

    @action(detail=False, methods=["post"])
    def register(self, request: Request) -> Response:
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = RegisterUserDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            errors = exc.errors(
                include_url=False, include_context=False, include_input=False
            )
            return error_response("Validation failed", details={"errors": errors})

        try:
            user, tokens = self._service.register(dto)
        except EmailAlreadyExists as exc:
            return error_response(str(exc), status=status.HTTP_409_CONFLICT)

        return success_response(
            {"user": UserSerializer(user).data, "tokens": _tokens_payload(tokens)},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["post"])
    def login(self, request: Request) -> Response:
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            user, tokens = self._service.login(
                serializer.validated_data["email"],
                serializer.validated_data["password"],
            )
        except InvalidCredentials as exc:
            return error_response(str(exc), status=status.HTTP_401_UNAUTHORIZED)
        except UserInactive as exc:
            return error_response(str(exc), status=status.HTTP_403_FORBIDDEN)

        return success_response(
            {"user": UserSerializer(user).data, "tokens": _tokens_payload(tokens)}
        )

    @action(detail=False, methods=["post"])
    def refresh(self, request: Request) -> Response:
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            tokens = self._service.refresh(serializer.validated_data["refresh_token"])
        except (InvalidRefreshToken, UserNotFound) as exc:
            return error_response(str(exc), status=status.HTTP_401_UNAUTHORIZED)
        except UserInactive as exc:
            return error_response(str(exc), status=status.HTTP_403_FORBIDDEN)
        return success_response({"tokens": _tokens_payload(tokens)})

    @action(detail=False, methods=["post"])
    def logout(self, request: Request) -> Response:
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            self._service.logout(serializer.validated_data["refresh_token"])
        except InvalidRefreshToken as exc:
            return error_response(str(exc), status=status.HTTP_401_UNAUTHORIZED)
        return success_response(message="Logged out.")

    @action(detail=False, methods=["get"])
    def me(self, request: Request) -> Response:
        try:
            user = self._service.get_user(str(request.user.pk))
        except UserNotFound as exc:
            return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
        return success_response(UserSerializer(user).data)
