from __future__ import annotations

import pytest

from smartkid.access.policy import (
    CAPABILITIES,
    Capability,
    can,
    ensure_author,
    ensure_class_managed,
    ensure_student_visible,
    narrow_student_filter,
    require_capability,
)
from smartkid.access.scope import StudentScope
from smartkid.core.enums import Role
from smartkid.core.exceptions import AuthorizationError, NotFoundError
from smartkid.users.model import Identity


def test_parent_scope_is_exactly_own_children(school):
    scope = school.container.scopes.resolve(school.identity("parent_q"))
    assert scope.student_ids == {school.kids["mia"].id, school.kids["noah"].id}


def test_teacher_scope_is_students_of_taught_classes(school):
    scope = school.container.scopes.resolve(school.identity("teacher_a"))
    assert scope.student_ids == {school.kids["olivia"].id, school.kids["mia"].id}


def test_teacher_without_classes_sees_nobody(school):
    lonely = school.users.create_user(
        first_name="New", last_name="Teacher", email="new@smartkid.test", password_hash="x", role=Role.TEACHER
    )

    scope = school.container.scopes.resolve(Identity.from_user(lonely))
    assert scope.is_empty
    assert not scope.allows(school.kids["olivia"].id)


@pytest.mark.parametrize("who", ["director", "admin"])
def test_school_staff_scope_is_unrestricted(school, who):
    scope = school.container.scopes.resolve(school.identity(who))
    assert scope.is_unrestricted
    assert scope.allows(12345)


def test_visible_class_ids_per_role(school):
    scopes = school.container.scopes
    assert scopes.visible_class_ids(school.identity("parent_p")) == {school.groups["a"].id}
    assert scopes.visible_class_ids(school.identity("parent_q")) == {school.groups["a"].id, school.groups["b"].id}
    assert scopes.visible_class_ids(school.identity("teacher_b")) == {school.groups["b"].id}
    assert scopes.visible_class_ids(school.identity("director")) is None


def test_intersect_and_narrow():
    assert StudentScope.unrestricted().intersect([1, 2]).student_ids == {1, 2}
    assert StudentScope.of([1, 2, 3]).intersect([2, 9]).student_ids == {2}

    assert narrow_student_filter(StudentScope.of([1, 2]), 2).student_ids == {2}
    assert narrow_student_filter(StudentScope.of([1, 2]), None).student_ids == {1, 2}
    with pytest.raises(NotFoundError):
        narrow_student_filter(StudentScope.of([1, 2]), 3)


def test_out_of_scope_student_is_reported_as_missing():
    with pytest.raises(NotFoundError, match="Report not found"):
        ensure_student_visible(StudentScope.of([1]), 2, what="Report")


def test_capability_matrix(school):
    assert can(school.identity("teacher_a"), Capability.REPORTS_WRITE)
    assert not can(school.identity("director"), Capability.REPORTS_WRITE)
    assert can(school.identity("director"), Capability.ADMIN_READ)
    assert not can(school.identity("director"), Capability.ADMIN_WRITE)
    assert Role.PARENT not in set().union(*CAPABILITIES.values())

    with pytest.raises(AuthorizationError):
        require_capability(school.identity("parent_p"), Capability.STUDENTS_WRITE)


def test_author_and_class_checks(school):
    teacher = school.identity("teacher_a")
    ensure_author(teacher, teacher.id, what="report")
    with pytest.raises(AuthorizationError):
        ensure_author(teacher, teacher.id + 1, what="report")

    taught = frozenset({school.groups["a"].id})
    ensure_class_managed(teacher, school.groups["a"].id, taught)
    with pytest.raises(AuthorizationError):
        ensure_class_managed(teacher, school.groups["b"].id, taught)
    with pytest.raises(AuthorizationError):
        ensure_class_managed(teacher, None, taught)
    # Directors are not bound to classes.
    ensure_class_managed(school.identity("director"), school.groups["b"].id, frozenset())
