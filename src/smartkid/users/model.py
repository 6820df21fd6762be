from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role, Theme


@dataclass(frozen=True)
class User:
    """Domain entity: account of a parent, teacher, director or admin.

    Note: plain data object, no DB access. ``password_hash`` never leaves the
    service layer; serializers exclude it.
    """

    id: int
    first_name: str
    last_name: str
    email: str
    password_hash: str
    role: Role
    profile_image: Optional[str] = None
    theme: Theme = Theme.SYSTEM
    last_active: Optional[datetime] = None


@dataclass(frozen=True)
class Identity:
    """Caller identity resolved from a bearer token."""

    id: int
    role: Role
    first_name: str
    last_name: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(
            id=user.id,
            role=user.role,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )
