"""Authorization decisions.

Every function here is pure: it receives the caller identity plus whatever
facts it needs (scope, author id, taught classes) and either returns or
raises. Storage lookups happen in :mod:`.scope` and in the services.

Masking rule: anything tied to a student outside the caller's scope is
reported as *not found*. ``AuthorizationError`` (403) is only used when the
caller's role lacks a capability, or when the caller can see a record but
does not own it.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..users.model import Identity
from .scope import StudentScope

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    STUDENTS_WRITE = "students.write"
    CLASSES_WRITE = "classes.write"
    ATTENDANCE_WRITE = "attendance.write"
    REPORTS_WRITE = "reports.write"
    MILESTONES_WRITE = "milestones.write"
    BADGES_WRITE = "badges.write"
    BADGES_AWARD = "badges.award"
    ROADMAPS_WRITE = "roadmaps.write"
    ACTIVITIES_WRITE = "activities.write"
    ADMIN_READ = "admin.read"
    ADMIN_WRITE = "admin.write"


CAPABILITIES: dict[Capability, frozenset[Role]] = {
    Capability.STUDENTS_WRITE: frozenset({Role.TEACHER, Role.DIRECTOR, Role.ADMIN}),
    Capability.CLASSES_WRITE: frozenset({Role.DIRECTOR, Role.ADMIN}),
    Capability.ATTENDANCE_WRITE: frozenset({Role.TEACHER, Role.DIRECTOR}),
    Capability.REPORTS_WRITE: frozenset({Role.TEACHER}),
    Capability.MILESTONES_WRITE: frozenset({Role.TEACHER, Role.DIRECTOR, Role.ADMIN}),
    Capability.BADGES_WRITE: frozenset({Role.TEACHER, Role.DIRECTOR, Role.ADMIN}),
    Capability.BADGES_AWARD: frozenset({Role.TEACHER, Role.DIRECTOR, Role.ADMIN}),
    Capability.ROADMAPS_WRITE: frozenset({Role.TEACHER, Role.DIRECTOR, Role.ADMIN}),
    Capability.ACTIVITIES_WRITE: frozenset({Role.TEACHER, Role.DIRECTOR, Role.ADMIN}),
    Capability.ADMIN_READ: frozenset({Role.DIRECTOR, Role.ADMIN}),
    Capability.ADMIN_WRITE: frozenset({Role.ADMIN}),
}

# Roles whose writes are confined to the classes they teach.
CLASS_BOUND_ROLES = frozenset({Role.TEACHER})


def can(identity: Identity, capability: Capability) -> bool:
    return identity.role in CAPABILITIES[capability]


def require_capability(identity: Identity, capability: Capability) -> None:
    if not can(identity, capability):
        logger.warning("Denied %s for user %s (role=%s)", capability.value, identity.id, identity.role.value)
        raise AuthorizationError("Access denied: insufficient permissions")


def ensure_student_visible(scope: StudentScope, student_id: int, *, what: str = "Student") -> None:
    if not scope.allows(student_id):
        raise NotFoundError(f"{what} not found")


def narrow_student_filter(scope: StudentScope, student_id: Optional[int]) -> StudentScope:
    """Intersect the caller's scope with an optional ``studentId`` filter."""
    if student_id is None:
        return scope
    ensure_student_visible(scope, student_id)
    return StudentScope.of([student_id])


def ensure_author(identity: Identity, author_id: int, *, what: str) -> None:
    if identity.id != int(author_id):
        logger.warning("User %s tried to change %s owned by %s", identity.id, what, author_id)
        raise AuthorizationError(f"Only the author can change this {what}")


def ensure_class_managed(identity: Identity, class_id: Optional[int], taught_class_ids: frozenset[int]) -> None:
    if identity.role not in CLASS_BOUND_ROLES:
        return
    if class_id is None or int(class_id) not in taught_class_ids:
        raise AuthorizationError("You can only manage students in classes you teach")


def ensure_class_visible(visible_class_ids: Optional[frozenset[int]], class_id: int) -> None:
    if visible_class_ids is not None and int(class_id) not in visible_class_ids:
        raise NotFoundError("Class not found")
