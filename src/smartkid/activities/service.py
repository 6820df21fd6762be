from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..access.policy import Capability, ensure_class_visible, require_capability
from ..access.scope import ScopeResolver
from ..classes.repository import ClassRepository
from ..common.validators import require_int, require_non_empty
from ..core.exceptions import ConflictError, NotFoundError
from ..users.model import Identity
from .model import Activity
from .repository import DUPLICATE_ACTIVITY, ActivityRepository

logger = logging.getLogger(__name__)


class ActivityService:
    """Use case: per-class activity catalogue used by the daily report form.

    Business rules:
    - callers only see activities of the classes visible to them
    - a teacher adds activities to the classes they teach, directors and admins to any class
    """

    def __init__(self, activities: ActivityRepository, classes: ClassRepository, scopes: ScopeResolver):
        self._activities = activities
        self._classes = classes
        self._scopes = scopes

    def list_for(self, identity: Identity, *, class_id: Optional[int] = None) -> Sequence[Activity]:
        visible = self._scopes.visible_class_ids(identity)
        if class_id is not None:
            ensure_class_visible(visible, class_id)
            return self._activities.list_by_classes([class_id])
        if visible is None:
            return self._activities.list_all()
        return self._activities.list_by_classes(sorted(visible))

    def create(self, identity: Identity, data: Mapping[str, Any]) -> Activity:
        require_capability(identity, Capability.ACTIVITIES_WRITE)
        name = require_non_empty(data.get("name"), "name")
        class_id = require_int(data.get("classId"), "classId")

        # Teachers only see the classes they teach, so this also confines their writes.
        ensure_class_visible(self._scopes.visible_class_ids(identity), class_id)
        if not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")
        if self._activities.get_by_name(class_id, name):
            raise ConflictError(DUPLICATE_ACTIVITY)

        activity = self._activities.create_activity(name=name, class_id=class_id)
        logger.info("User %s added activity %s to class %s", identity.id, activity.id, class_id)
        return activity
