from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..access.policy import Capability, require_capability
from ..classes.repository import ClassRepository
from ..common.datetime_utils import days_ago_iso, today_iso
from ..core.constants import RECENT_REPORT_DAYS
from ..core.enums import Mood, Role
from ..reports.repository import ReportRepository
from ..students.repository import StudentRepository
from ..users.model import Identity
from ..users.repository import UserRepository


@dataclass(frozen=True)
class SchoolStats:
    total_students: int
    total_teachers: int
    total_parents: int
    total_classes: int
    total_reports: int
    recent_reports_count: int
    mood_counts: dict[Mood, int]


class AdminService:
    """Dashboard aggregates for directors and admins."""

    def __init__(
        self,
        users: UserRepository,
        students: StudentRepository,
        classes: ClassRepository,
        reports: ReportRepository,
    ):
        self._users = users
        self._students = students
        self._classes = classes
        self._reports = reports

    def stats(self, identity: Identity, *, today: Optional[date] = None) -> SchoolStats:
        require_capability(identity, Capability.ADMIN_READ)
        by_role = self._users.count_by_role()

        # The last RECENT_REPORT_DAYS calendar days, today included. recentReportsCount and
        # moodCounts come from the same window so they always agree.
        mood_counts = self._reports.mood_counts_between(
            days_ago_iso(RECENT_REPORT_DAYS - 1, today), today_iso(today)
        )
        return SchoolStats(
            total_students=self._students.count_all(),
            total_teachers=by_role.get(Role.TEACHER, 0),
            total_parents=by_role.get(Role.PARENT, 0),
            total_classes=self._classes.count_all(),
            total_reports=self._reports.count_all(),
            recent_reports_count=sum(mood_counts.values()),
            mood_counts=mood_counts,
        )
