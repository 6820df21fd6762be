from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_student_on(self, student_id: int, date: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_records(
        self, *, student_ids: Optional[Iterable[int]], date: Optional[str] = None
    ) -> Sequence[AttendanceRecord]:
        """``student_ids=None`` means every student."""

        raise NotImplementedError

    def create_record(
        self, *, student_id: int, date: str, status: AttendanceStatus, notes: Optional[str]
    ) -> AttendanceRecord:
        """Raises ConflictError when the student already has a record for ``date``."""

        raise NotImplementedError

    def update_record(self, attendance_id: int, changes: Mapping[str, Any]) -> Optional[AttendanceRecord]:
        raise NotImplementedError
