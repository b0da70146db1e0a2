"""Accounts domain exceptions.

Raised by ``AuthService``; the views translate them into HTTP responses.
"""

from __future__ import annotations


class EmailAlreadyExists(Exception):
    """Another account is already registered with this email."""


class InvalidCredentials(Exception):
    """Email and password do not match an account."""


class UserInactive(Exception):
    """The account exists but has been deactivated."""


class UserNotFound(Exception):
    """The user referenced by a token or an order no longer exists."""


class InvalidRefreshToken(Exception):
    """The refresh token is malformed, expired or already revoked."""
