from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import BadgeCategory
from .model import Badge, StudentBadge


class BadgeRepository(Protocol):
    def get_badge(self, badge_id: int) -> Optional[Badge]:
        raise NotImplementedError

    def list_badges(self, *, category: Optional[BadgeCategory] = None) -> Sequence[Badge]:
        raise NotImplementedError

    def create_badge(self, *, name: str, description: str, icon: str, category: BadgeCategory) -> Badge:
        raise NotImplementedError

    def get_award(self, student_id: int, badge_id: int) -> Optional[StudentBadge]:
        raise NotImplementedError

    def list_awards(self, student_id: int) -> Sequence[StudentBadge]:
        """Awards of one student, each carrying its ``badge``."""

        raise NotImplementedError

    def create_award(self, *, student_id: int, badge_id: int, date_awarded: str, awarded_by: int) -> StudentBadge:
        """Raises ConflictError when the student already holds the badge."""

        raise NotImplementedError
