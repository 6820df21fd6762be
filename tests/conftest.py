from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from werkzeug.security import generate_password_hash

from smartkid import create_app
from smartkid.classes.model import SchoolClass
from smartkid.container import Container, build_services
from smartkid.core.enums import Role
from smartkid.students.model import Student
from smartkid.users.model import Identity, User
from smartkid.users.tokens import TokenService

from fakes import (
    InMemoryActivities,
    InMemoryAttendance,
    InMemoryBadges,
    InMemoryClasses,
    InMemoryMilestones,
    InMemoryReports,
    InMemoryRoadmaps,
    InMemoryStudents,
    InMemoryUsers,
)

PASSWORD = "password123"
TEST_SECRET = "test-jwt-secret"


@dataclass
class School:
    """Two classes, two teachers, two parents, three children.

    - class_a (teacher_a): olivia (parent_p), mia (parent_q)
    - class_b (teacher_b): noah (parent_q)
    """

    users: InMemoryUsers = field(default_factory=InMemoryUsers)
    classes: InMemoryClasses = field(default_factory=InMemoryClasses)
    students: InMemoryStudents = field(default_factory=InMemoryStudents)
    attendance: InMemoryAttendance = field(default_factory=InMemoryAttendance)
    reports: InMemoryReports = field(default_factory=InMemoryReports)
    milestones: InMemoryMilestones = field(default_factory=InMemoryMilestones)
    badges: InMemoryBadges = field(default_factory=InMemoryBadges)
    roadmaps: InMemoryRoadmaps = field(default_factory=InMemoryRoadmaps)
    activities: InMemoryActivities = field(default_factory=InMemoryActivities)
    people: dict[str, User] = field(default_factory=dict)
    groups: dict[str, SchoolClass] = field(default_factory=dict)
    kids: dict[str, Student] = field(default_factory=dict)

    def __post_init__(self):
        self.container: Container = build_services(
            users_repo=self.users,
            classes_repo=self.classes,
            students_repo=self.students,
            attendance_repo=self.attendance,
            reports_repo=self.reports,
            milestones_repo=self.milestones,
            badges_repo=self.badges,
            roadmaps_repo=self.roadmaps,
            activities_repo=self.activities,
            token_service=TokenService(TEST_SECRET, ttl_hours=24),
        )

    def identity(self, who: str) -> Identity:
        return Identity.from_user(self.people[who])

    def auth(self, who: str) -> dict[str, str]:
        token = self.container.token_service.issue_token(self.identity(who))
        return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def school() -> School:
    s = School()

    # Cheap hash keeps the suite fast.
    password_hash = generate_password_hash(PASSWORD, method="pbkdf2:sha256:1000")
    for key, first, role in (
        ("director", "Dana", Role.DIRECTOR),
        ("admin", "Ada", Role.ADMIN),
        ("teacher_a", "Sarah", Role.TEACHER),
        ("teacher_b", "Tom", Role.TEACHER),
        ("parent_p", "John", Role.PARENT),
        ("parent_q", "Quinn", Role.PARENT),
    ):
        s.people[key] = s.users.create_user(
            first_name=first,
            last_name="Test",
            email=f"{key}@smartkid.test",
            password_hash=password_hash,
            role=role,
        )

    s.groups["a"] = s.classes.create_class(name="Class 2A", teacher_id=s.people["teacher_a"].id)
    s.groups["b"] = s.classes.create_class(name="Class 2B", teacher_id=s.people["teacher_b"].id)

    for first, parent, group in (("olivia", "parent_p", "a"), ("mia", "parent_q", "a"), ("noah", "parent_q", "b")):
        s.kids[first] = s.students.create_student(
            first_name=first.capitalize(),
            last_name="Kid",
            date_of_birth="2018-03-01",
            profile_image=None,
            parent_id=s.people[parent].id,
            class_id=s.groups[group].id,
        )
    return s


@pytest.fixture
def client(school, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=school.container)
    return app.test_client()
