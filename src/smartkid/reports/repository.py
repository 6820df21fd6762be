from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import Mood
from .model import Report


class ReportRepository(Protocol):
    def get_by_id(self, report_id: int) -> Optional[Report]:
        raise NotImplementedError

    def get_for_student_on(self, student_id: int, date: str) -> Optional[Report]:
        raise NotImplementedError

    def list_reports(self, *, student_ids: Optional[Iterable[int]]) -> Sequence[Report]:
        """Newest first; ``student_ids=None`` means every student."""

        raise NotImplementedError

    def create_report(
        self,
        *,
        student_id: int,
        teacher_id: int,
        date: str,
        mood: Mood,
        activities: Sequence[str],
        notes: Optional[str],
        achievements: Sequence[str],
    ) -> Report:
        raise NotImplementedError

    def update_report(self, report_id: int, changes: Mapping[str, Any]) -> Optional[Report]:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def mood_counts_between(self, start: str, end: str) -> dict[Mood, int]:
        """Reports per mood with ``start <= date <= end`` (inclusive ISO dates)."""

        raise NotImplementedError
