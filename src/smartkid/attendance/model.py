from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One student's attendance on one day; at most one per (student_id, date)."""

    id: int
    student_id: int
    date: str  # YYYY-MM-DD
    status: AttendanceStatus
    notes: Optional[str] = None
