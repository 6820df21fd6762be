from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..core.enums import Role, Theme
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, unique_guard
from .model import User
from .repository import UserRepository

_SELECT = """
    SELECT user_id, first_name, last_name, email, password_hash, role, profile_image, theme, last_active
    FROM users
"""

_UPDATABLE = {
    "first_name": "first_name",
    "last_name": "last_name",
    "email": "email",
    "password_hash": "password_hash",
    "role": "role",
    "profile_image": "profile_image",
    "theme": "theme",
    "last_active": "last_active",
}


def _to_user(r: dict) -> User:
    return User(
        id=int(r["user_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r["email"],
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        profile_image=r.get("profile_image"),
        theme=Theme(r.get("theme") or Theme.SYSTEM.value),
        last_active=r.get("last_active"),
    )


def _db_value(value: Any) -> Any:
    return value.value if isinstance(value, (Role, Theme)) else value


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE email=%s", (email.lower(),))
            row = fetchone(cur)
            return _to_user(row) if row else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            with unique_guard("Email already registered"):
                cur.execute(
                    """
                    INSERT INTO users(first_name, last_name, email, password_hash, role, profile_image, theme)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (first_name, last_name, email.lower(), password_hash, role.value, profile_image, theme.value),
                )
            user_id = int(cur.lastrowid)
            cur.execute(_SELECT + " WHERE user_id=%s", (user_id,))
            return _to_user(fetchone(cur))

    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> Optional[User]:
        sets = [(_UPDATABLE[k], _db_value(v)) for k, v in changes.items() if k in _UPDATABLE]
        with db_cursor(self._conn_factory) as (_, cur):
            if sets:
                with unique_guard("Email already registered"):
                    cur.execute(
                        f"UPDATE users SET {', '.join(f'{col}=%s' for col, _ in sets)} WHERE user_id=%s",
                        tuple(v for _, v in sets) + (int(user_id),),
                    )
            cur.execute(_SELECT + " WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY user_id DESC")
            return [_to_user(r) for r in fetchall(cur)]

    def count_by_role(self) -> dict[Role, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT role, COUNT(*) AS n FROM users GROUP BY role")
            counts = {role: 0 for role in Role}
            for r in fetchall(cur):
                counts[Role(r["role"])] = int(r["n"])
            return counts
