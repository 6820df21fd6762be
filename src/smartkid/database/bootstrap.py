from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..core.constants import AVATAR_URL
from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(_strip_comments(Path(schema_path).read_text(encoding="utf-8")))

    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def ensure_demo_data(db_config: dict) -> None:
    """Create the demo school (director, teacher, parent, one class, two children) once."""
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT COUNT(*) AS n FROM users")
        if int(cur.fetchone()["n"]) > 0:
            logger.info("Demo seed skipped: users already present")
            return

        def add_user(first: str, last: str, email: str, role: str) -> int:
            cur.execute(
                """
                INSERT INTO users(first_name, last_name, email, password_hash, role, profile_image)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (first, last, email, generate_password_hash(DEMO_PASSWORD), role, AVATAR_URL.format(first=first, last=last)),
            )
            return int(cur.lastrowid)

        add_user("Admin", "User", "director@smartkid.com", "director")
        teacher_id = add_user("Sarah", "Johnson", "teacher@smartkid.com", "teacher")
        parent_id = add_user("John", "Doe", "parent@smartkid.com", "parent")

        cur.execute("INSERT INTO classes(name, teacher_id) VALUES(%s,%s)", ("Class 2B", teacher_id))
        class_id = int(cur.lastrowid)

        student_ids = []
        for first, last, dob in (("Olivia", "Davis", "2017-05-15"), ("Noah", "Miller", "2016-08-22")):
            cur.execute(
                """
                INSERT INTO students(first_name, last_name, date_of_birth, profile_image, parent_id, class_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (first, last, dob, AVATAR_URL.format(first=first, last=last), parent_id, class_id),
            )
            student_ids.append(int(cur.lastrowid))

        cur.executemany(
            "INSERT INTO activities(name, class_id) VALUES(%s,%s)",
            [(name, class_id) for name in ("Circle time", "Painting", "Outdoor play", "Story time")],
        )

        cur.executemany(
            "INSERT INTO badges(name, description, icon, category) VALUES(%s,%s,%s,%s)",
            [
                ("Reading Star", "Read 10 books independently", "book-open", "academic"),
                ("Kind Friend", "Helped a classmate without being asked", "heart", "behavioral"),
                ("Perfect Week", "Present every day for a week", "calendar-check", "attendance"),
            ],
        )

        cur.execute(
            """
            INSERT INTO milestones(student_id, title, description, date, category, completed, teacher_id)
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (student_ids[0], "Shares toys with friends", "Consistently shares during free play", "2024-04-10", "social", 0, teacher_id),
        )

        conn.commit()
        logger.info("Demo seed ready (%d students)", len(student_ids))
    finally:
        conn.close()
