from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, unique_guard
from .model import Activity
from .repository import DUPLICATE_ACTIVITY, ActivityRepository

_SELECT = "SELECT activity_id, name, class_id FROM activities"


def _to_activity(r: dict) -> Activity:
    return Activity(id=int(r["activity_id"]), name=r["name"], class_id=int(r["class_id"]))


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_name(self, class_id: int, name: str) -> Optional[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE class_id=%s AND name=%s", (int(class_id), name))
            row = fetchone(cur)
            return _to_activity(row) if row else None

    def list_by_classes(self, class_ids: Iterable[int]) -> Sequence[Activity]:
        ids = [int(c) for c in class_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE class_id IN ({in_clause(ids)}) ORDER BY class_id, name",
                tuple(ids),
            )
            return [_to_activity(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} ORDER BY class_id, name")
            return [_to_activity(r) for r in fetchall(cur)]

    def create_activity(self, *, name: str, class_id: int) -> Activity:
        with unique_guard(DUPLICATE_ACTIVITY), db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO activities(name, class_id) VALUES(%s,%s)", (name, int(class_id)))
            return Activity(id=int(cur.lastrowid), name=name, class_id=int(class_id))
