from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import MilestoneCategory


@dataclass(frozen=True)
class Milestone:
    id: int
    student_id: int
    title: str
    date: str  # YYYY-MM-DD
    category: MilestoneCategory
    teacher_id: int
    description: Optional[str] = None
    completed: bool = False
