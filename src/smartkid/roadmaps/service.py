from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from ..access.policy import Capability, ensure_student_visible, require_capability
from ..access.scope import ScopeResolver
from ..common.datetime_utils import utc_now
from ..common.validators import (
    optional_int,
    optional_str,
    require_enum,
    require_int,
    require_non_empty,
    require_str_list,
)
from ..core.enums import SkillCategory, StageStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from ..users.model import Identity
from .model import RoadmapOverview, RoadmapStage, RoadmapTemplate, StageProgress, StudentRoadmap
from .repository import RoadmapRepository

logger = logging.getLogger(__name__)

# Allowed status moves for one stage. Re-sending the current status is always
# accepted so feedback and evidence can be edited in place.
TRANSITIONS: dict[StageStatus, frozenset[StageStatus]] = {
    StageStatus.NOT_STARTED: frozenset({StageStatus.IN_PROGRESS}),
    StageStatus.IN_PROGRESS: frozenset({StageStatus.COMPLETED, StageStatus.NEEDS_REVIEW}),
    StageStatus.NEEDS_REVIEW: frozenset({StageStatus.IN_PROGRESS, StageStatus.COMPLETED}),
    StageStatus.COMPLETED: frozenset({StageStatus.NEEDS_REVIEW}),
}


def check_transition(current: StageStatus, target: StageStatus) -> None:
    if target != current and target not in TRANSITIONS[current]:
        raise ValidationError(
            f"Cannot move a stage from {current.value} to {target.value}", field="status"
        )


class RoadmapService:
    """Use case: development roadmaps.

    Business rules:
    - a template is assigned to a student at most once, starting at its lowest-order stage
    - completing a stage moves the roadmap to the next stage of its template
    """

    def __init__(self, roadmaps: RoadmapRepository, students: StudentRepository, scopes: ScopeResolver):
        self._roadmaps = roadmaps
        self._students = students
        self._scopes = scopes

    # ---- templates ----

    def list_templates(self) -> Sequence[RoadmapTemplate]:
        return self._roadmaps.list_templates(active_only=True)

    def _template(self, template_id: int) -> RoadmapTemplate:
        template = self._roadmaps.get_template(template_id)
        if not template:
            raise NotFoundError("Roadmap template not found")
        return template

    def create_template(self, identity: Identity, data: Mapping[str, Any]) -> RoadmapTemplate:
        require_capability(identity, Capability.ROADMAPS_WRITE)
        template = self._roadmaps.create_template(
            name=require_non_empty(data.get("name"), "name"),
            description=optional_str(data.get("description"), "description"),
            age_group=require_non_empty(data.get("ageGroup"), "ageGroup"),
            created_by_id=identity.id,
        )
        logger.info("User %s created roadmap template %s", identity.id, template.id)
        return template

    def list_stages(self, template_id: int) -> Sequence[RoadmapStage]:
        self._template(template_id)
        return self._roadmaps.list_stages(template_id)

    def add_stage(self, identity: Identity, template_id: int, data: Mapping[str, Any]) -> RoadmapStage:
        require_capability(identity, Capability.ROADMAPS_WRITE)
        self._template(template_id)
        order = require_int(data.get("order"), "order")
        if order < 1:
            raise ValidationError("order must be a positive integer", field="order")
        if any(s.order == order for s in self._roadmaps.list_stages(template_id)):
            raise ConflictError("This template already has a stage at that order")

        return self._roadmaps.create_stage(
            template_id=template_id,
            title=require_non_empty(data.get("title"), "title"),
            description=optional_str(data.get("description"), "description"),
            order=order,
            expected_duration=optional_int(data.get("expectedDuration"), "expectedDuration"),
            skill_category=require_enum(data.get("skillCategory"), SkillCategory, "skillCategory"),
        )

    # ---- student roadmaps ----

    def assign(self, identity: Identity, data: Mapping[str, Any]) -> StudentRoadmap:
        require_capability(identity, Capability.ROADMAPS_WRITE)
        student_id = require_int(data.get("studentId"), "studentId")
        template_id = require_int(data.get("templateId"), "templateId")

        ensure_student_visible(self._scopes.resolve(identity), student_id)
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")
        self._template(template_id)
        if self._roadmaps.get_roadmap_for(student_id, template_id):
            raise ConflictError("This roadmap is already assigned to the student")

        stages = self._roadmaps.list_stages(template_id)
        roadmap = self._roadmaps.create_roadmap(
            student_id=student_id,
            template_id=template_id,
            current_stage_id=stages[0].id if stages else None,
            teacher_notes=optional_str(data.get("teacherNotes"), "teacherNotes"),
        )
        logger.info("User %s assigned template %s to student %s", identity.id, template_id, student_id)
        return roadmap

    def get_for_student(self, identity: Identity, student_id: int) -> Sequence[RoadmapOverview]:
        ensure_student_visible(self._scopes.resolve(identity), student_id)
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")

        overviews = []
        for roadmap in self._roadmaps.list_roadmaps_for_student(student_id):
            overviews.append(
                RoadmapOverview(
                    roadmap=roadmap,
                    template=self._template(roadmap.template_id),
                    stages=tuple(self._roadmaps.list_stages(roadmap.template_id)),
                    progress=tuple(self._roadmaps.list_progress(roadmap.id)),
                )
            )
        return overviews

    def _visible_roadmap(self, identity: Identity, roadmap_id: int) -> StudentRoadmap:
        roadmap = self._roadmaps.get_roadmap(roadmap_id)
        if not roadmap:
            raise NotFoundError("Roadmap not found")
        ensure_student_visible(self._scopes.resolve(identity), roadmap.student_id, what="Roadmap")
        return roadmap

    def list_progress(self, identity: Identity, roadmap_id: int) -> Sequence[StageProgress]:
        self._visible_roadmap(identity, roadmap_id)
        return self._roadmaps.list_progress(roadmap_id)

    def update_progress(self, identity: Identity, roadmap_id: int, data: Mapping[str, Any]) -> StageProgress:
        require_capability(identity, Capability.ROADMAPS_WRITE)
        roadmap = self._visible_roadmap(identity, roadmap_id)
        stage_id = require_int(data.get("stageId"), "stageId")
        status = require_enum(data.get("status"), StageStatus, "status")

        stage = self._roadmaps.get_stage(stage_id)
        if not stage or stage.template_id != roadmap.template_id:
            raise NotFoundError("Stage not found")

        existing = self._roadmaps.get_progress(roadmap_id, stage_id)
        current = existing.status if existing else StageStatus.NOT_STARTED
        check_transition(current, status)

        now = utc_now()
        started_at = existing.started_at if existing else None
        if started_at is None and status != StageStatus.NOT_STARTED:
            started_at = now
        completed_at = None
        if status == StageStatus.COMPLETED:
            completed_at = existing.completed_at if current == StageStatus.COMPLETED and existing else now

        if "teacherFeedback" in data:
            feedback = optional_str(data["teacherFeedback"], "teacherFeedback")
        else:
            feedback = existing.teacher_feedback if existing else None
        if "evidence" in data:
            evidence = require_str_list(data["evidence"], "evidence")
        else:
            evidence = list(existing.evidence) if existing else []

        progress = self._roadmaps.record_progress(
            roadmap_id=roadmap_id,
            stage=stage,
            status=status,
            expected_status=current,
            started_at=started_at,
            completed_at=completed_at,
            teacher_feedback=feedback,
            evidence=evidence,
        )
        logger.info(
            "User %s moved stage %s of roadmap %s from %s to %s",
            identity.id, stage_id, roadmap_id, current.value, status.value,
        )
        return progress
