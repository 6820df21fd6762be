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
from ..common.datetime_utils import today_iso
from ..common.validators import (
    optional_str,
    require_bool,
    require_enum,
    require_int,
    require_iso_date,
    require_non_empty,
)
from ..core.enums import MilestoneCategory, Role
from ..core.exceptions import NotFoundError
from ..students.repository import StudentRepository
from ..users.model import Identity
from .model import Milestone
from .repository import MilestoneRepository

logger = logging.getLogger(__name__)


class MilestoneService:
    def __init__(self, milestones: MilestoneRepository, students: StudentRepository, scopes: ScopeResolver):
        self._milestones = milestones
        self._students = students
        self._scopes = scopes

    def list(self, identity: Identity, *, student_id: Optional[int] = None) -> Sequence[Milestone]:
        scope = narrow_student_filter(self._scopes.resolve(identity), student_id)
        if scope.is_empty:
            return []
        return self._milestones.list_milestones(student_ids=scope.student_ids)

    def get(self, identity: Identity, milestone_id: int) -> Milestone:
        milestone = self._milestones.get_by_id(milestone_id)
        if not milestone:
            raise NotFoundError("Milestone not found")
        ensure_student_visible(self._scopes.resolve(identity), milestone.student_id, what="Milestone")
        return milestone

    def create(self, identity: Identity, data: Mapping[str, Any]) -> Milestone:
        require_capability(identity, Capability.MILESTONES_WRITE)
        student_id = require_int(data.get("studentId"), "studentId")
        title = require_non_empty(data.get("title"), "title")
        category = require_enum(data.get("category"), MilestoneCategory, "category")
        date = require_iso_date(data["date"], "date") if data.get("date") else today_iso()
        completed = require_bool(data["completed"], "completed") if "completed" in data else False

        ensure_student_visible(self._scopes.resolve(identity), student_id)
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")

        milestone = self._milestones.create_milestone(
            student_id=student_id,
            title=title,
            description=optional_str(data.get("description"), "description"),
            date=date,
            category=category,
            completed=completed,
            teacher_id=identity.id,
        )
        logger.info("User %s recorded milestone %s for student %s", identity.id, milestone.id, student_id)
        return milestone

    def update(self, identity: Identity, milestone_id: int, data: Mapping[str, Any]) -> Milestone:
        require_capability(identity, Capability.MILESTONES_WRITE)
        milestone = self.get(identity, milestone_id)
        # Directors and admins may correct any milestone; teachers only their own.
        if identity.role == Role.TEACHER:
            ensure_author(identity, milestone.teacher_id, what="milestone")

        changes: dict[str, Any] = {}
        if "title" in data:
            changes["title"] = require_non_empty(data["title"], "title")
        if "description" in data:
            changes["description"] = optional_str(data["description"], "description")
        if "date" in data:
            changes["date"] = require_iso_date(data["date"], "date")
        if "category" in data:
            changes["category"] = require_enum(data["category"], MilestoneCategory, "category")
        if "completed" in data:
            changes["completed"] = require_bool(data["completed"], "completed")

        updated = self._milestones.update_milestone(milestone_id, changes)
        if not updated:
            raise NotFoundError("Milestone not found")
        return updated
