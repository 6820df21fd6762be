from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..access.policy import (
    Capability,
    ensure_author,
    ensure_student_visible,
    narrow_student_filter,
    require_capability,
)
from ..access.scope import ScopeResolver
from ..common.validators import optional_str, require_enum, require_int, require_iso_date, require_str_list
from ..core.enums import Mood
from ..core.exceptions import ConflictError, NotFoundError
from ..students.repository import StudentRepository
from ..users.model import Identity
from .model import Report
from .repository import ReportRepository

logger = logging.getLogger(__name__)

DUPLICATE_REPORT = "A report already exists for this student on this date"


class ReportService:
    """Use case: daily student reports.

    Business rules:
    - only teachers write reports, and only the author may edit one
    - one report per student per day, also when an edit moves a report to another day
    """

    def __init__(self, reports: ReportRepository, students: StudentRepository, scopes: ScopeResolver):
        self._reports = reports
        self._students = students
        self._scopes = scopes

    def list(self, identity: Identity, *, student_id: Optional[int] = None) -> Sequence[Report]:
        scope = narrow_student_filter(self._scopes.resolve(identity), student_id)
        if scope.is_empty:
            return []
        return self._reports.list_reports(student_ids=scope.student_ids)

    def get(self, identity: Identity, report_id: int) -> Report:
        report = self._reports.get_by_id(report_id)
        if not report:
            raise NotFoundError("Report not found")
        ensure_student_visible(self._scopes.resolve(identity), report.student_id, what="Report")
        return report

    def latest_per_student(self, identity: Identity) -> Sequence[Report]:
        """Most recent visible report of every student that has one."""
        latest: dict[int, Report] = {}
        for report in self.list(identity):
            current = latest.get(report.student_id)
            # ISO dates compare correctly as strings
            if current is None or report.date > current.date:
                latest[report.student_id] = report
        return sorted(latest.values(), key=lambda r: r.student_id)

    def create(self, identity: Identity, data: Mapping[str, Any]) -> Report:
        require_capability(identity, Capability.REPORTS_WRITE)
        student_id = require_int(data.get("studentId"), "studentId")
        date = require_iso_date(data.get("date"), "date")
        mood = require_enum(data.get("mood"), Mood, "mood")
        activities = require_str_list(data.get("activities"), "activities")
        notes = optional_str(data.get("notes"), "notes")
        achievements = require_str_list(data.get("achievements"), "achievements")

        ensure_student_visible(self._scopes.resolve(identity), student_id)
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")
        if self._reports.get_for_student_on(student_id, date):
            raise ConflictError(DUPLICATE_REPORT)

        report = self._reports.create_report(
            student_id=student_id,
            teacher_id=identity.id,
            date=date,
            mood=mood,
            activities=activities,
            notes=notes,
            achievements=achievements,
        )
        logger.info("Teacher %s wrote report %s for student %s", identity.id, report.id, student_id)
        return report

    def update(self, identity: Identity, report_id: int, data: Mapping[str, Any]) -> Report:
        require_capability(identity, Capability.REPORTS_WRITE)
        report = self.get(identity, report_id)
        ensure_author(identity, report.teacher_id, what="report")

        changes: dict[str, Any] = {}
        if "date" in data:
            date = require_iso_date(data["date"], "date")
            if date != report.date:
                other = self._reports.get_for_student_on(report.student_id, date)
                if other and other.id != report.id:
                    raise ConflictError(DUPLICATE_REPORT)
            changes["date"] = date
        if "mood" in data:
            changes["mood"] = require_enum(data["mood"], Mood, "mood")
        if "activities" in data:
            changes["activities"] = require_str_list(data["activities"], "activities")
        if "notes" in data:
            changes["notes"] = optional_str(data["notes"], "notes")
        if "achievements" in data:
            changes["achievements"] = require_str_list(data["achievements"], "achievements")

        updated = self._reports.update_report(report_id, changes)
        if not updated:
            raise NotFoundError("Report not found")
        return updated
