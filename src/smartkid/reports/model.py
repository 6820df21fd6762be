from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Mood


@dataclass(frozen=True)
class Report:
    """Daily report a teacher writes about one student; at most one per (student_id, date)."""

    id: int
    student_id: int
    teacher_id: int
    date: str  # YYYY-MM-DD
    mood: Mood
    activities: tuple[str, ...] = ()
    notes: Optional[str] = None
    achievements: tuple[str, ...] = ()
