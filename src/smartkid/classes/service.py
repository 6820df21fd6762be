from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from ..access.policy import Capability, ensure_class_visible, require_capability
from ..access.scope import ScopeResolver
from ..common.validators import optional_int, require_non_empty
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import Identity
from ..users.repository import UserRepository
from .model import SchoolClass
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    def __init__(self, classes: ClassRepository, users: UserRepository, scopes: ScopeResolver):
        self._classes = classes
        self._users = users
        self._scopes = scopes

    def list_for(self, identity: Identity) -> Sequence[SchoolClass]:
        visible = self._scopes.visible_class_ids(identity)
        if visible is None:
            return self._classes.list_all()
        return self._classes.list_by_ids(sorted(visible))

    def get(self, identity: Identity, class_id: int) -> SchoolClass:
        ensure_class_visible(self._scopes.visible_class_ids(identity), class_id)
        school_class = self._classes.get_by_id(class_id)
        if not school_class:
            raise NotFoundError("Class not found")
        return school_class

    def create(self, identity: Identity, data: Mapping[str, Any]) -> SchoolClass:
        require_capability(identity, Capability.CLASSES_WRITE)
        name = require_non_empty(data.get("name"), "name")
        teacher_id = optional_int(data.get("teacherId"), "teacherId")
        if teacher_id is not None:
            teacher = self._users.get_by_id(teacher_id)
            if not teacher or teacher.role != Role.TEACHER:
                raise ValidationError("teacherId must reference a teacher", field="teacherId")

        school_class = self._classes.create_class(name=name, teacher_id=teacher_id)
        logger.info("User %s created class %s", identity.id, school_class.id)
        return school_class
