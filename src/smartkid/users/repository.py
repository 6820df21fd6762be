from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import Role, Theme
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete database.
    Emails are stored lower-cased; ``get_by_email`` expects a lower-cased key.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        role: Role,
        profile_image: Optional[str] = None,
        theme: Theme = Theme.SYSTEM,
    ) -> User:
        raise NotImplementedError

    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> Optional[User]:
        """Apply a partial update; keys are User field names."""

        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def count_by_role(self) -> dict[Role, int]:
        raise NotImplementedError
