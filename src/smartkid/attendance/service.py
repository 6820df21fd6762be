from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..access.policy import (
    Capability,
    ensure_class_visible,
    ensure_student_visible,
    narrow_student_filter,
    require_capability,
)
from ..access.scope import ScopeResolver
from ..common.validators import optional_str, require_enum, require_int, require_iso_date
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from ..users.model import Identity
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: daily attendance marking.

    Business rules:
    - one record per student per day (pre-checked here, enforced by a unique index)
    - listing needs a ``date`` unless a single ``studentId`` is requested
    """

    def __init__(self, attendance: AttendanceRepository, students: StudentRepository, scopes: ScopeResolver):
        self._attendance = attendance
        self._students = students
        self._scopes = scopes

    def list(
        self,
        identity: Identity,
        *,
        date: Optional[str] = None,
        class_id: Optional[int] = None,
        student_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        if date is None and student_id is None:
            raise ValidationError("date is required unless studentId is given", field="date")
        if date is not None:
            date = require_iso_date(date, "date")

        scope = narrow_student_filter(self._scopes.resolve(identity), student_id)
        if class_id is not None:
            ensure_class_visible(self._scopes.visible_class_ids(identity), class_id)
            scope = scope.intersect(s.id for s in self._students.list_by_classes([class_id]))

        if scope.is_empty:
            return []
        return self._attendance.list_records(student_ids=scope.student_ids, date=date)

    def get(self, identity: Identity, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        ensure_student_visible(self._scopes.resolve(identity), record.student_id, what="Attendance record")
        return record

    def mark(self, identity: Identity, data: Mapping[str, Any]) -> AttendanceRecord:
        require_capability(identity, Capability.ATTENDANCE_WRITE)
        student_id = require_int(data.get("studentId"), "studentId")
        date = require_iso_date(data.get("date"), "date")
        status = require_enum(data.get("status"), AttendanceStatus, "status")
        notes = optional_str(data.get("notes"), "notes")

        ensure_student_visible(self._scopes.resolve(identity), student_id)
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")

        if self._attendance.get_for_student_on(student_id, date):
            raise ConflictError("Attendance already recorded for this student on this date")

        record = self._attendance.create_record(student_id=student_id, date=date, status=status, notes=notes)
        logger.info("User %s marked student %s %s on %s", identity.id, student_id, status.value, date)
        return record

    def update(self, identity: Identity, attendance_id: int, data: Mapping[str, Any]) -> AttendanceRecord:
        require_capability(identity, Capability.ATTENDANCE_WRITE)
        self.get(identity, attendance_id)

        changes: dict[str, Any] = {}
        if "status" in data:
            changes["status"] = require_enum(data["status"], AttendanceStatus, "status")
        if "notes" in data:
            changes["notes"] = optional_str(data["notes"], "notes")

        updated = self._attendance.update_record(attendance_id, changes)
        if not updated:
            raise NotFoundError("Attendance record not found")
        return updated
