from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import BadgeCategory
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, iso, unique_guard
from .model import Badge, StudentBadge
from .repository import BadgeRepository

_AWARD_SELECT = """
    SELECT sb.student_badge_id, sb.student_id, sb.badge_id, sb.date_awarded, sb.awarded_by,
           b.name, b.description, b.icon, b.category
    FROM student_badges sb
    JOIN badges b ON b.badge_id = sb.badge_id
"""


def _to_badge(r: dict) -> Badge:
    return Badge(
        id=int(r["badge_id"]),
        name=r["name"],
        description=r["description"],
        icon=r["icon"],
        category=BadgeCategory(r["category"]),
    )


def _to_award(r: dict) -> StudentBadge:
    return StudentBadge(
        id=int(r["student_badge_id"]),
        student_id=int(r["student_id"]),
        badge_id=int(r["badge_id"]),
        date_awarded=iso(r["date_awarded"]),
        awarded_by=int(r["awarded_by"]),
        badge=_to_badge(r),
    )


class MySQLBadgeRepository(BadgeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_badge(self, badge_id: int) -> Optional[Badge]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT badge_id, name, description, icon, category FROM badges WHERE badge_id=%s",
                (int(badge_id),),
            )
            row = fetchone(cur)
            return _to_badge(row) if row else None

    def list_badges(self, *, category: Optional[BadgeCategory] = None) -> Sequence[Badge]:
        with db_cursor(self._conn_factory) as (_, cur):
            if category is None:
                cur.execute("SELECT badge_id, name, description, icon, category FROM badges ORDER BY name")
            else:
                cur.execute(
                    "SELECT badge_id, name, description, icon, category FROM badges WHERE category=%s ORDER BY name",
                    (category.value,),
                )
            return [_to_badge(r) for r in fetchall(cur)]

    def create_badge(self, *, name: str, description: str, icon: str, category: BadgeCategory) -> Badge:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO badges(name, description, icon, category) VALUES(%s,%s,%s,%s)",
                (name, description, icon, category.value),
            )
            return Badge(id=int(cur.lastrowid), name=name, description=description, icon=icon, category=category)

    def get_award(self, student_id: int, badge_id: int) -> Optional[StudentBadge]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _AWARD_SELECT + " WHERE sb.student_id=%s AND sb.badge_id=%s",
                (int(student_id), int(badge_id)),
            )
            row = fetchone(cur)
            return _to_award(row) if row else None

    def list_awards(self, student_id: int) -> Sequence[StudentBadge]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _AWARD_SELECT + " WHERE sb.student_id=%s ORDER BY sb.date_awarded DESC, sb.student_badge_id DESC",
                (int(student_id),),
            )
            return [_to_award(r) for r in fetchall(cur)]

    def create_award(self, *, student_id: int, badge_id: int, date_awarded: str, awarded_by: int) -> StudentBadge:
        with unique_guard("Badge already awarded to this student"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO student_badges(student_id, badge_id, date_awarded, awarded_by) VALUES(%s,%s,%s,%s)",
                (int(student_id), int(badge_id), date_awarded, int(awarded_by)),
            )
            award_id = int(cur.lastrowid)
            cur.execute(_AWARD_SELECT + " WHERE sb.student_badge_id=%s", (award_id,))
            return _to_award(fetchone(cur))
