from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def today_iso(today: Optional[date] = None) -> str:
    return (today or date.today()).isoformat()


def days_ago_iso(days: int, today: Optional[date] = None) -> str:
    return ((today or date.today()) - timedelta(days=days)).isoformat()


def utc_now() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)
