from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import SkillCategory, StageStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, unique_guard
from .model import RoadmapStage, RoadmapTemplate, StageProgress, StudentRoadmap
from .repository import STALE_PROGRESS, RoadmapRepository

logger = logging.getLogger(__name__)

_TEMPLATE_SELECT = """
    SELECT template_id, name, description, age_group, created_by_id, is_active
    FROM roadmap_templates
"""
_STAGE_SELECT = """
    SELECT stage_id, template_id, title, description, stage_order, expected_duration, skill_category
    FROM roadmap_stages
"""
_ROADMAP_SELECT = """
    SELECT student_roadmap_id, student_id, template_id, start_date, current_stage_id, teacher_notes, last_updated
    FROM student_roadmaps
"""
_PROGRESS_SELECT = """
    SELECT progress_id, student_roadmap_id, stage_id, status, started_at, completed_at, teacher_feedback, evidence
    FROM stage_progress
"""


def _to_template(r: dict) -> RoadmapTemplate:
    return RoadmapTemplate(
        id=int(r["template_id"]),
        name=r["name"],
        description=r.get("description"),
        age_group=r["age_group"],
        created_by_id=int(r["created_by_id"]),
        is_active=bool(r["is_active"]),
    )


def _to_stage(r: dict) -> RoadmapStage:
    return RoadmapStage(
        id=int(r["stage_id"]),
        template_id=int(r["template_id"]),
        title=r["title"],
        description=r.get("description"),
        order=int(r["stage_order"]),
        expected_duration=int(r["expected_duration"]) if r.get("expected_duration") is not None else None,
        skill_category=SkillCategory(r["skill_category"]),
    )


def _to_roadmap(r: dict) -> StudentRoadmap:
    return StudentRoadmap(
        id=int(r["student_roadmap_id"]),
        student_id=int(r["student_id"]),
        template_id=int(r["template_id"]),
        start_date=r["start_date"],
        current_stage_id=int(r["current_stage_id"]) if r.get("current_stage_id") is not None else None,
        teacher_notes=r.get("teacher_notes"),
        last_updated=r["last_updated"],
    )


def _to_progress(r: dict) -> StageProgress:
    return StageProgress(
        id=int(r["progress_id"]),
        student_roadmap_id=int(r["student_roadmap_id"]),
        stage_id=int(r["stage_id"]),
        status=StageStatus(r["status"]),
        started_at=r.get("started_at"),
        completed_at=r.get("completed_at"),
        teacher_feedback=r.get("teacher_feedback"),
        evidence=tuple(load_json(r.get("evidence"), [])),
    )


class MySQLRoadmapRepository(RoadmapRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # ---- templates and stages ----

    def list_templates(self, *, active_only: bool = True) -> Sequence[RoadmapTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            where = " WHERE is_active=1" if active_only else ""
            cur.execute(_TEMPLATE_SELECT + where + " ORDER BY name")
            return [_to_template(r) for r in fetchall(cur)]

    def get_template(self, template_id: int) -> Optional[RoadmapTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_TEMPLATE_SELECT + " WHERE template_id=%s", (int(template_id),))
            row = fetchone(cur)
            return _to_template(row) if row else None

    def create_template(
        self, *, name: str, description: Optional[str], age_group: str, created_by_id: int
    ) -> RoadmapTemplate:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO roadmap_templates(name, description, age_group, created_by_id) VALUES(%s,%s,%s,%s)",
                (name, description, age_group, int(created_by_id)),
            )
            return RoadmapTemplate(
                id=int(cur.lastrowid),
                name=name,
                description=description,
                age_group=age_group,
                created_by_id=int(created_by_id),
            )

    def list_stages(self, template_id: int) -> Sequence[RoadmapStage]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_STAGE_SELECT + " WHERE template_id=%s ORDER BY stage_order", (int(template_id),))
            return [_to_stage(r) for r in fetchall(cur)]

    def get_stage(self, stage_id: int) -> Optional[RoadmapStage]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_STAGE_SELECT + " WHERE stage_id=%s", (int(stage_id),))
            row = fetchone(cur)
            return _to_stage(row) if row else None

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
        with unique_guard("This template already has a stage at that order"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO roadmap_stages(template_id, title, description, stage_order, expected_duration, skill_category)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(template_id), title, description, int(order), expected_duration, skill_category.value),
            )
            return RoadmapStage(
                id=int(cur.lastrowid),
                template_id=int(template_id),
                title=title,
                description=description,
                order=int(order),
                expected_duration=expected_duration,
                skill_category=skill_category,
            )

    # ---- student roadmaps ----

    def get_roadmap(self, roadmap_id: int) -> Optional[StudentRoadmap]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_ROADMAP_SELECT + " WHERE student_roadmap_id=%s", (int(roadmap_id),))
            row = fetchone(cur)
            return _to_roadmap(row) if row else None

    def get_roadmap_for(self, student_id: int, template_id: int) -> Optional[StudentRoadmap]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _ROADMAP_SELECT + " WHERE student_id=%s AND template_id=%s",
                (int(student_id), int(template_id)),
            )
            row = fetchone(cur)
            return _to_roadmap(row) if row else None

    def list_roadmaps_for_student(self, student_id: int) -> Sequence[StudentRoadmap]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_ROADMAP_SELECT + " WHERE student_id=%s ORDER BY start_date", (int(student_id),))
            return [_to_roadmap(r) for r in fetchall(cur)]

    def create_roadmap(
        self,
        *,
        student_id: int,
        template_id: int,
        current_stage_id: Optional[int],
        teacher_notes: Optional[str],
    ) -> StudentRoadmap:
        with unique_guard("This roadmap is already assigned to the student"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO student_roadmaps(student_id, template_id, current_stage_id, teacher_notes)
                VALUES(%s,%s,%s,%s)
                """,
                (int(student_id), int(template_id), current_stage_id, teacher_notes),
            )
            cur.execute(_ROADMAP_SELECT + " WHERE student_roadmap_id=%s", (int(cur.lastrowid),))
            return _to_roadmap(fetchone(cur))

    # ---- progress ----

    def list_progress(self, roadmap_id: int) -> Sequence[StageProgress]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_PROGRESS_SELECT + " WHERE student_roadmap_id=%s ORDER BY stage_id", (int(roadmap_id),))
            return [_to_progress(r) for r in fetchall(cur)]

    def get_progress(self, roadmap_id: int, stage_id: int) -> Optional[StageProgress]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _PROGRESS_SELECT + " WHERE student_roadmap_id=%s AND stage_id=%s",
                (int(roadmap_id), int(stage_id)),
            )
            row = fetchone(cur)
            return _to_progress(row) if row else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock serializes progress writes on the same roadmap.
            cur.execute(
                "SELECT current_stage_id FROM student_roadmaps WHERE student_roadmap_id=%s FOR UPDATE",
                (int(roadmap_id),),
            )
            fetchone(cur)

            cur.execute(
                "SELECT status FROM stage_progress WHERE student_roadmap_id=%s AND stage_id=%s",
                (int(roadmap_id), stage.id),
            )
            row = fetchone(cur)
            current = StageStatus(row["status"]) if row else StageStatus.NOT_STARTED
            if current != expected_status:
                raise ConflictError(STALE_PROGRESS)

            cur.execute(
                """
                INSERT INTO stage_progress(student_roadmap_id, stage_id, status, started_at, completed_at,
                                           teacher_feedback, evidence)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    started_at=VALUES(started_at),
                    completed_at=VALUES(completed_at),
                    teacher_feedback=VALUES(teacher_feedback),
                    evidence=VALUES(evidence)
                """,
                (
                    int(roadmap_id),
                    stage.id,
                    status.value,
                    started_at,
                    completed_at,
                    teacher_feedback,
                    dump_json(list(evidence)),
                ),
            )

            if status == StageStatus.COMPLETED:
                cur.execute(
                    """
                    SELECT stage_id FROM roadmap_stages
                    WHERE template_id=%s AND stage_order>%s
                    ORDER BY stage_order LIMIT 1
                    """,
                    (stage.template_id, stage.order),
                )
                nxt = fetchone(cur)
                if nxt:
                    cur.execute(
                        """
                        UPDATE student_roadmaps SET current_stage_id=%s
                        WHERE student_roadmap_id=%s AND (current_stage_id=%s OR current_stage_id IS NULL)
                        """,
                        (int(nxt["stage_id"]), int(roadmap_id), stage.id),
                    )
                    if cur.rowcount:
                        logger.info("Roadmap %s advanced to stage %s", roadmap_id, nxt["stage_id"])

            cur.execute(
                _PROGRESS_SELECT + " WHERE student_roadmap_id=%s AND stage_id=%s",
                (int(roadmap_id), stage.id),
            )
            return _to_progress(fetchone(cur))
