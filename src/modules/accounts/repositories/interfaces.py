from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import User


class IUserRepository(IRepository["User"]):
    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by (lowercased) email."""

    @abstractmethod
    def create_user(self, email: str, password: str, **fields: Any) -> User:
        """Create a user with a hashed password."""
