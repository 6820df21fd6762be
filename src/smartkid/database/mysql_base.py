from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cur)`` inside one transaction: commit on success, rollback on error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(err: Exception) -> bool:
    return isinstance(err, mysql.connector.IntegrityError) and getattr(err, "errno", None) == errorcode.ER_DUP_ENTRY


@contextmanager
def unique_guard(message: str) -> Iterator[None]:
    """Translate a unique-index violation raised inside the block into ConflictError."""
    try:
        yield
    except mysql.connector.IntegrityError as err:
        if is_duplicate_key(err):
            raise ConflictError(message) from err
        raise


def iso(value: Any) -> Optional[str]:
    """Normalize DATE columns to ``YYYY-MM-DD`` strings."""
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)[:10]


def load_json(value: Any, default: Any = None) -> Any:
    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value else default
    return value


def dump_json(value: Any) -> Optional[str]:
    return None if value is None else json.dumps(value)


def in_clause(values) -> str:
    """Placeholders for ``IN (...)``; caller guarantees ``values`` is non-empty."""
    return ", ".join(["%s"] * len(values))
