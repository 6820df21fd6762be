from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import SkillCategory, StageStatus


@dataclass(frozen=True)
class RoadmapTemplate:
    """A reusable development plan, e.g. "Early literacy, 3-4 years"."""

    id: int
    name: str
    age_group: str
    created_by_id: int
    description: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class RoadmapStage:
    id: int
    template_id: int
    title: str
    order: int
    skill_category: SkillCategory
    description: Optional[str] = None
    expected_duration: Optional[int] = None  # days


@dataclass(frozen=True)
class StudentRoadmap:
    """A template assigned to a student, with a pointer to the stage being worked on."""

    id: int
    student_id: int
    template_id: int
    start_date: datetime
    last_updated: datetime
    current_stage_id: Optional[int] = None
    teacher_notes: Optional[str] = None


@dataclass(frozen=True)
class StageProgress:
    id: int
    student_roadmap_id: int
    stage_id: int
    status: StageStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    teacher_feedback: Optional[str] = None
    evidence: tuple[str, ...] = ()


@dataclass(frozen=True)
class RoadmapOverview:
    """Read model: one assigned roadmap with its template, stages and progress."""

    roadmap: StudentRoadmap
    template: RoadmapTemplate
    stages: tuple[RoadmapStage, ...]
    progress: tuple[StageProgress, ...]
