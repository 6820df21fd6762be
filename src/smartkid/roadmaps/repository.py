from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import SkillCategory, StageStatus
from .model import RoadmapStage, RoadmapTemplate, StageProgress, StudentRoadmap

STALE_PROGRESS = "Stage progress changed, reload and retry"


class RoadmapRepository(Protocol):
    def list_templates(self, *, active_only: bool = True) -> Sequence[RoadmapTemplate]:
        raise NotImplementedError

    def get_template(self, template_id: int) -> Optional[RoadmapTemplate]:
        raise NotImplementedError

    def create_template(
        self, *, name: str, description: Optional[str], age_group: str, created_by_id: int
    ) -> RoadmapTemplate:
        raise NotImplementedError

    def list_stages(self, template_id: int) -> Sequence[RoadmapStage]:
        """Stages of one template in ascending ``order``."""

        raise NotImplementedError

    def get_stage(self, stage_id: int) -> Optional[RoadmapStage]:
        raise NotImplementedError

    def create_stage(
        self,
        *,
        template_id: int,
        title: str,
        description: Optional[str],
        order: int,
        expected_duration: Optional[int],
        skill_category: SkillCategory,
    ) -> RoadmapStage:
        """Raises ConflictError when the template already has a stage at ``order``."""

        raise NotImplementedError

    def get_roadmap(self, roadmap_id: int) -> Optional[StudentRoadmap]:
        raise NotImplementedError

    def get_roadmap_for(self, student_id: int, template_id: int) -> Optional[StudentRoadmap]:
        raise NotImplementedError

    def list_roadmaps_for_student(self, student_id: int) -> Sequence[StudentRoadmap]:
        raise NotImplementedError

    def create_roadmap(
        self,
        *,
        student_id: int,
        template_id: int,
        current_stage_id: Optional[int],
        teacher_notes: Optional[str],
    ) -> StudentRoadmap:
        """Raises ConflictError when the template is already assigned to the student."""

        raise NotImplementedError

    def list_progress(self, roadmap_id: int) -> Sequence[StageProgress]:
        raise NotImplementedError

    def get_progress(self, roadmap_id: int, stage_id: int) -> Optional[StageProgress]:
        raise NotImplementedError

    def record_progress(
        self,
        *,
        roadmap_id: int,
        stage: RoadmapStage,
        status: StageStatus,
        expected_status: StageStatus,
        started_at: Optional[datetime],
        completed_at: Optional[datetime],
        teacher_feedback: Optional[str],
        evidence: Sequence[str],
    ) -> StageProgress:
        """Upsert the progress row for ``stage``, atomically.

        The stored status is re-read under the roadmap lock and must still equal
        ``expected_status``, otherwise ``ConflictError`` is raised and nothing changes.

        When ``status`` is completed, the roadmap's ``current_stage_id`` moves to
        the next stage of the template, but only if it still points at ``stage``
        (or at nothing). Completing the last stage leaves the pointer alone.
        """

        raise NotImplementedError
