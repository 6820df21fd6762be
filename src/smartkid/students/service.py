from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..access.policy import (
    Capability,
    ensure_class_managed,
    ensure_class_visible,
    ensure_student_visible,
    require_capability,
)
from ..access.scope import ScopeResolver
from ..classes.repository import ClassRepository
from ..common.validators import optional_int, optional_str, require_iso_date, require_non_empty
from ..core.constants import AVATAR_URL
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import Identity
from ..users.repository import UserRepository
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentService:
    """Use case: student roster, filtered by the caller's entitlement.

    Business rules:
    - parents see their own children, teachers the students of classes they teach
    - a teacher may only place a student in a class they teach
    - ``parentId`` must reference a parent account
    """

    def __init__(
        self,
        students: StudentRepository,
        classes: ClassRepository,
        users: UserRepository,
        scopes: ScopeResolver,
    ):
        self._students = students
        self._classes = classes
        self._users = users
        self._scopes = scopes

    def list_for(self, identity: Identity, *, class_id: Optional[int] = None) -> Sequence[Student]:
        if class_id is not None:
            ensure_class_visible(self._scopes.visible_class_ids(identity), class_id)

        scope = self._scopes.resolve(identity)
        if scope.is_empty:
            return []
        students = self._students.list_by_ids(scope.student_ids)
        if class_id is not None:
            students = [s for s in students if s.class_id == class_id]
        return students

    def get(self, identity: Identity, student_id: int) -> Student:
        ensure_student_visible(self._scopes.resolve(identity), student_id)
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        return student

    def create(self, identity: Identity, data: Mapping[str, Any]) -> Student:
        require_capability(identity, Capability.STUDENTS_WRITE)
        first_name = require_non_empty(data.get("firstName"), "firstName")
        last_name = require_non_empty(data.get("lastName"), "lastName")
        date_of_birth = require_iso_date(data.get("dateOfBirth"), "dateOfBirth")
        class_id = optional_int(data.get("classId"), "classId")
        parent_id = optional_int(data.get("parentId"), "parentId")

        ensure_class_managed(identity, class_id, self._scopes.taught_class_ids(identity))
        self._check_class(class_id)
        self._check_parent(parent_id)

        student = self._students.create_student(
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date_of_birth,
            profile_image=optional_str(data.get("profileImage"), "profileImage")
            or AVATAR_URL.format(first=first_name, last=last_name),
            parent_id=parent_id,
            class_id=class_id,
        )
        logger.info("User %s created student %s", identity.id, student.id)
        return student

    def update(self, identity: Identity, student_id: int, data: Mapping[str, Any]) -> Student:
        require_capability(identity, Capability.STUDENTS_WRITE)
        self.get(identity, student_id)

        changes: dict[str, Any] = {}
        if "firstName" in data:
            changes["first_name"] = require_non_empty(data["firstName"], "firstName")
        if "lastName" in data:
            changes["last_name"] = require_non_empty(data["lastName"], "lastName")
        if "dateOfBirth" in data:
            changes["date_of_birth"] = require_iso_date(data["dateOfBirth"], "dateOfBirth")
        if "profileImage" in data:
            changes["profile_image"] = optional_str(data["profileImage"], "profileImage")
        if "classId" in data:
            class_id = optional_int(data["classId"], "classId")
            ensure_class_managed(identity, class_id, self._scopes.taught_class_ids(identity))
            self._check_class(class_id)
            changes["class_id"] = class_id
        if "parentId" in data:
            parent_id = optional_int(data["parentId"], "parentId")
            self._check_parent(parent_id)
            changes["parent_id"] = parent_id

        updated = self._students.update_student(student_id, changes)
        if not updated:
            raise NotFoundError("Student not found")
        return updated

    def delete(self, identity: Identity, student_id: int) -> None:
        require_capability(identity, Capability.STUDENTS_WRITE)
        self.get(identity, student_id)
        if not self._students.delete_student(student_id):
            raise NotFoundError("Student not found")
        logger.info("User %s deleted student %s", identity.id, student_id)

    def _check_class(self, class_id: Optional[int]) -> None:
        if class_id is not None and not self._classes.get_by_id(class_id):
            raise ValidationError("classId does not reference a class", field="classId")

    def _check_parent(self, parent_id: Optional[int]) -> None:
        if parent_id is None:
            return
        parent = self._users.get_by_id(parent_id)
        if not parent or parent.role != Role.PARENT:
            raise ValidationError("parentId must reference a parent", field="parentId")
