from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import BadgeCategory


@dataclass(frozen=True)
class Badge:
    id: int
    name: str
    description: str
    icon: str
    category: BadgeCategory


@dataclass(frozen=True)
class StudentBadge:
    """A badge awarded to a student; each badge at most once per student."""

    id: int
    student_id: int
    badge_id: int
    date_awarded: str  # YYYY-MM-DD
    awarded_by: int
    badge: Optional[Badge] = None
