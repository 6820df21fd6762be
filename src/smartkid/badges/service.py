from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..access.policy import Capability, ensure_student_visible, require_capability
from ..access.scope import ScopeResolver
from ..common.datetime_utils import today_iso
from ..common.validators import require_enum, require_int, require_iso_date, require_non_empty
from ..core.enums import BadgeCategory
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from ..users.model import Identity
from .model import Badge, StudentBadge
from .repository import BadgeRepository

logger = logging.getLogger(__name__)

DUPLICATE_AWARD = "Badge already awarded to this student"


class BadgeService:
    """Use case: badge catalogue and awarding badges to students.

    The catalogue is visible to every signed-in user; awards follow the
    caller's student entitlement.
    """

    def __init__(self, badges: BadgeRepository, students: StudentRepository, scopes: ScopeResolver):
        self._badges = badges
        self._students = students
        self._scopes = scopes

    def list(self, *, category: Optional[str] = None) -> Sequence[Badge]:
        parsed = require_enum(category, BadgeCategory, "category") if category else None
        return self._badges.list_badges(category=parsed)

    def get(self, badge_id: int) -> Badge:
        badge = self._badges.get_badge(badge_id)
        if not badge:
            raise NotFoundError("Badge not found")
        return badge

    def create(self, identity: Identity, data: Mapping[str, Any]) -> Badge:
        require_capability(identity, Capability.BADGES_WRITE)
        badge = self._badges.create_badge(
            name=require_non_empty(data.get("name"), "name"),
            description=require_non_empty(data.get("description"), "description"),
            icon=require_non_empty(data.get("icon"), "icon"),
            category=require_enum(data.get("category"), BadgeCategory, "category"),
        )
        logger.info("User %s created badge %s", identity.id, badge.id)
        return badge

    def list_awards(self, identity: Identity, student_id: Optional[int]) -> Sequence[StudentBadge]:
        if student_id is None:
            raise ValidationError("studentId is required", field="studentId")
        ensure_student_visible(self._scopes.resolve(identity), student_id)
        return self._badges.list_awards(student_id)

    def award(self, identity: Identity, data: Mapping[str, Any]) -> StudentBadge:
        require_capability(identity, Capability.BADGES_AWARD)
        student_id = require_int(data.get("studentId"), "studentId")
        badge_id = require_int(data.get("badgeId"), "badgeId")
        date_awarded = (
            require_iso_date(data["dateAwarded"], "dateAwarded") if data.get("dateAwarded") else today_iso()
        )

        ensure_student_visible(self._scopes.resolve(identity), student_id)
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")
        self.get(badge_id)
        if self._badges.get_award(student_id, badge_id):
            raise ConflictError(DUPLICATE_AWARD)

        award = self._badges.create_award(
            student_id=student_id, badge_id=badge_id, date_awarded=date_awarded, awarded_by=identity.id
        )
        logger.info("User %s awarded badge %s to student %s", identity.id, badge_id, student_id)
        return award
