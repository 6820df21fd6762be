"""In-memory repositories mirroring the MySQL ones, unique indexes included."""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from smartkid.core.enums import Mood, Role, StageStatus, Theme
from smartkid.core.exceptions import ConflictError
from smartkid.activities.model import Activity
from smartkid.activities.repository import DUPLICATE_ACTIVITY
from smartkid.attendance.model import AttendanceRecord
from smartkid.badges.model import Badge, StudentBadge
from smartkid.classes.model import SchoolClass
from smartkid.milestones.model import Milestone
from smartkid.reports.model import Report
from smartkid.roadmaps.model import RoadmapStage, RoadmapTemplate, StageProgress, StudentRoadmap
from smartkid.roadmaps.repository import STALE_PROGRESS
from smartkid.students.model import Student
from smartkid.users.model import User


class _Table:
    def __init__(self):
        self.rows: dict[int, Any] = {}
        self._next_id = 1

    def next_id(self) -> int:
        rid = self._next_id
        self._next_id += 1
        return rid


def _in(student_ids: Optional[Iterable[int]]):
    if student_ids is None:
        return lambda sid: True
    ids = set(student_ids)
    return lambda sid: sid in ids


class InMemoryUsers(_Table):
    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.rows.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.rows.values() if u.email == email.lower()), None)

    def create_user(self, *, first_name, last_name, email, password_hash, role, profile_image=None, theme=Theme.SYSTEM):
        if self.get_by_email(email):
            raise ConflictError("Email already registered")
        user = User(
            id=self.next_id(),
            first_name=first_name,
            last_name=last_name,
            email=email.lower(),
            password_hash=password_hash,
            role=role,
            profile_image=profile_image,
            theme=theme,
        )
        self.rows[user.id] = user
        return user

    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> Optional[User]:
        user = self.rows.get(int(user_id))
        if not user:
            return None
        email = changes.get("email")
        if email and any(u.email == email and u.id != user.id for u in self.rows.values()):
            raise ConflictError("Email already registered")
        self.rows[user.id] = replace(user, **changes)
        return self.rows[user.id]

    def list_all(self):
        return list(self.rows.values())

    def count_by_role(self) -> dict[Role, int]:
        counts = {role: 0 for role in Role}
        for u in self.rows.values():
            counts[u.role] += 1
        return counts


class InMemoryClasses(_Table):
    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        return self.rows.get(int(class_id))

    def list_by_teacher(self, teacher_id: int):
        return [c for c in self.rows.values() if c.teacher_id == teacher_id]

    def list_by_ids(self, class_ids):
        ids = set(class_ids)
        return [c for c in self.rows.values() if c.id in ids]

    def list_all(self):
        return list(self.rows.values())

    def create_class(self, *, name, teacher_id):
        school_class = SchoolClass(id=self.next_id(), name=name, teacher_id=teacher_id)
        self.rows[school_class.id] = school_class
        return school_class

    def count_all(self) -> int:
        return len(self.rows)


class InMemoryStudents(_Table):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.rows.get(int(student_id))

    def list_by_parent(self, parent_id: int):
        return [s for s in self.rows.values() if s.parent_id == parent_id]

    def list_by_classes(self, class_ids):
        ids = set(class_ids)
        return [s for s in self.rows.values() if s.class_id in ids]

    def list_by_ids(self, student_ids):
        keep = _in(student_ids)
        return [s for s in self.rows.values() if keep(s.id)]

    def create_student(self, *, first_name, last_name, date_of_birth, profile_image, parent_id, class_id):
        student = Student(
            id=self.next_id(),
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date_of_birth,
            profile_image=profile_image,
            parent_id=parent_id,
            class_id=class_id,
        )
        self.rows[student.id] = student
        return student

    def update_student(self, student_id, changes):
        student = self.rows.get(int(student_id))
        if not student:
            return None
        self.rows[student.id] = replace(student, **changes)
        return self.rows[student.id]

    def delete_student(self, student_id) -> bool:
        return self.rows.pop(int(student_id), None) is not None

    def count_all(self) -> int:
        return len(self.rows)


class InMemoryAttendance(_Table):
    def get_by_id(self, attendance_id):
        return self.rows.get(int(attendance_id))

    def get_for_student_on(self, student_id, date):
        return next((r for r in self.rows.values() if r.student_id == student_id and r.date == date), None)

    def list_records(self, *, student_ids, date=None):
        keep = _in(student_ids)
        return [r for r in self.rows.values() if keep(r.student_id) and (date is None or r.date == date)]

    def create_record(self, *, student_id, date, status, notes):
        if self.get_for_student_on(student_id, date):
            raise ConflictError("Attendance already recorded for this student on this date")
        record = AttendanceRecord(id=self.next_id(), student_id=student_id, date=date, status=status, notes=notes)
        self.rows[record.id] = record
        return record

    def update_record(self, attendance_id, changes):
        record = self.rows.get(int(attendance_id))
        if not record:
            return None
        self.rows[record.id] = replace(record, **changes)
        return self.rows[record.id]


class InMemoryReports(_Table):
    def get_by_id(self, report_id):
        return self.rows.get(int(report_id))

    def get_for_student_on(self, student_id, date):
        return next((r for r in self.rows.values() if r.student_id == student_id and r.date == date), None)

    def list_reports(self, *, student_ids):
        keep = _in(student_ids)
        items = [r for r in self.rows.values() if keep(r.student_id)]
        return sorted(items, key=lambda r: (r.date, r.id), reverse=True)

    def create_report(self, *, student_id, teacher_id, date, mood, activities, notes, achievements):
        if self.get_for_student_on(student_id, date):
            raise ConflictError("A report already exists for this student on this date")
        report = Report(
            id=self.next_id(),
            student_id=student_id,
            teacher_id=teacher_id,
            date=date,
            mood=mood,
            activities=tuple(activities),
            notes=notes,
            achievements=tuple(achievements),
        )
        self.rows[report.id] = report
        return report

    def update_report(self, report_id, changes):
        report = self.rows.get(int(report_id))
        if not report:
            return None
        changes = dict(changes)
        other = self.get_for_student_on(report.student_id, changes.get("date", report.date))
        if other and other.id != report.id:
            raise ConflictError("A report already exists for this student on this date")
        for key in ("activities", "achievements"):
            if key in changes:
                changes[key] = tuple(changes[key])
        self.rows[report.id] = replace(report, **changes)
        return self.rows[report.id]

    def count_all(self) -> int:
        return len(self.rows)

    def mood_counts_between(self, start, end):
        counts = {mood: 0 for mood in Mood}
        for r in self.rows.values():
            if start <= r.date <= end:
                counts[r.mood] += 1
        return counts


class InMemoryMilestones(_Table):
    def get_by_id(self, milestone_id):
        return self.rows.get(int(milestone_id))

    def list_milestones(self, *, student_ids):
        keep = _in(student_ids)
        return [m for m in self.rows.values() if keep(m.student_id)]

    def create_milestone(self, *, student_id, title, description, date, category, completed, teacher_id):
        milestone = Milestone(
            id=self.next_id(),
            student_id=student_id,
            title=title,
            description=description,
            date=date,
            category=category,
            completed=completed,
            teacher_id=teacher_id,
        )
        self.rows[milestone.id] = milestone
        return milestone

    def update_milestone(self, milestone_id, changes):
        milestone = self.rows.get(int(milestone_id))
        if not milestone:
            return None
        self.rows[milestone.id] = replace(milestone, **changes)
        return self.rows[milestone.id]


class InMemoryBadges(_Table):
    def __init__(self):
        super().__init__()
        self.awards = _Table()

    def get_badge(self, badge_id):
        return self.rows.get(int(badge_id))

    def list_badges(self, *, category=None):
        return [b for b in self.rows.values() if category is None or b.category == category]

    def create_badge(self, *, name, description, icon, category):
        badge = Badge(id=self.next_id(), name=name, description=description, icon=icon, category=category)
        self.rows[badge.id] = badge
        return badge

    def get_award(self, student_id, badge_id):
        return next(
            (a for a in self.awards.rows.values() if a.student_id == student_id and a.badge_id == badge_id),
            None,
        )

    def list_awards(self, student_id):
        return [a for a in self.awards.rows.values() if a.student_id == student_id]

    def create_award(self, *, student_id, badge_id, date_awarded, awarded_by):
        if self.get_award(student_id, badge_id):
            raise ConflictError("Badge already awarded to this student")
        award = StudentBadge(
            id=self.awards.next_id(),
            student_id=student_id,
            badge_id=badge_id,
            date_awarded=date_awarded,
            awarded_by=awarded_by,
            badge=self.rows[badge_id],
        )
        self.awards.rows[award.id] = award
        return award


class InMemoryRoadmaps:
    def __init__(self):
        self.templates = _Table()
        self.stages = _Table()
        self.roadmaps = _Table()
        self.progress = _Table()

    def list_templates(self, *, active_only=True):
        return [t for t in self.templates.rows.values() if t.is_active or not active_only]

    def get_template(self, template_id):
        return self.templates.rows.get(int(template_id))

    def create_template(self, *, name, description, age_group, created_by_id):
        template = RoadmapTemplate(
            id=self.templates.next_id(),
            name=name,
            description=description,
            age_group=age_group,
            created_by_id=created_by_id,
        )
        self.templates.rows[template.id] = template
        return template

    def list_stages(self, template_id):
        return sorted((s for s in self.stages.rows.values() if s.template_id == template_id), key=lambda s: s.order)

    def get_stage(self, stage_id):
        return self.stages.rows.get(int(stage_id))

    def create_stage(self, *, template_id, title, description, order, expected_duration, skill_category):
        if any(s.order == order for s in self.list_stages(template_id)):
            raise ConflictError("This template already has a stage at that order")
        stage = RoadmapStage(
            id=self.stages.next_id(),
            template_id=template_id,
            title=title,
            description=description,
            order=order,
            expected_duration=expected_duration,
            skill_category=skill_category,
        )
        self.stages.rows[stage.id] = stage
        return stage

    def get_roadmap(self, roadmap_id):
        return self.roadmaps.rows.get(int(roadmap_id))

    def get_roadmap_for(self, student_id, template_id):
        return next(
            (r for r in self.roadmaps.rows.values() if r.student_id == student_id and r.template_id == template_id),
            None,
        )

    def list_roadmaps_for_student(self, student_id):
        return [r for r in self.roadmaps.rows.values() if r.student_id == student_id]

    def create_roadmap(self, *, student_id, template_id, current_stage_id, teacher_notes):
        if self.get_roadmap_for(student_id, template_id):
            raise ConflictError("This roadmap is already assigned to the student")
        now = datetime(2024, 5, 1, 9, 0, 0)
        roadmap = StudentRoadmap(
            id=self.roadmaps.next_id(),
            student_id=student_id,
            template_id=template_id,
            start_date=now,
            last_updated=now,
            current_stage_id=current_stage_id,
            teacher_notes=teacher_notes,
        )
        self.roadmaps.rows[roadmap.id] = roadmap
        return roadmap

    def list_progress(self, roadmap_id):
        return [p for p in self.progress.rows.values() if p.student_roadmap_id == roadmap_id]

    def get_progress(self, roadmap_id, stage_id):
        return next(
            (p for p in self.progress.rows.values() if p.student_roadmap_id == roadmap_id and p.stage_id == stage_id),
            None,
        )

    def record_progress(
        self, *, roadmap_id, stage, status, expected_status, started_at, completed_at, teacher_feedback, evidence
    ):
        existing = self.get_progress(roadmap_id, stage.id)
        if (existing.status if existing else StageStatus.NOT_STARTED) != expected_status:
            raise ConflictError(STALE_PROGRESS)
        progress = StageProgress(
            id=existing.id if existing else self.progress.next_id(),
            student_roadmap_id=roadmap_id,
            stage_id=stage.id,
            status=status,
            started_at=started_at,
            completed_at=completed_at,
            teacher_feedback=teacher_feedback,
            evidence=tuple(evidence),
        )
        self.progress.rows[progress.id] = progress

        if status == StageStatus.COMPLETED:
            roadmap = self.roadmaps.rows[roadmap_id]
            later = [s for s in self.list_stages(stage.template_id) if s.order > stage.order]
            if later and roadmap.current_stage_id in (stage.id, None):
                self.roadmaps.rows[roadmap_id] = replace(roadmap, current_stage_id=later[0].id)
        return progress


class InMemoryActivities(_Table):
    def get_by_name(self, class_id, name):
        return next((a for a in self.rows.values() if a.class_id == class_id and a.name == name), None)

    def list_by_classes(self, class_ids):
        ids = set(class_ids)
        return sorted((a for a in self.rows.values() if a.class_id in ids), key=lambda a: (a.class_id, a.name))

    def list_all(self):
        return sorted(self.rows.values(), key=lambda a: (a.class_id, a.name))

    def create_activity(self, *, name, class_id):
        if self.get_by_name(class_id, name):
            raise ConflictError(DUPLICATE_ACTIVITY)
        activity = Activity(id=self.next_id(), name=name, class_id=class_id)
        self.rows[activity.id] = activity
        return activity
