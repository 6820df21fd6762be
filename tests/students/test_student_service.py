from __future__ import annotations

import pytest

from smartkid.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def _ids(items):
    return {item.id for item in items}


def test_list_is_exactly_the_callers_entitlement(school):
    service = school.container.student_service
    kids = school.kids

    assert _ids(service.list_for(school.identity("parent_p"))) == {kids["olivia"].id}
    assert _ids(service.list_for(school.identity("parent_q"))) == {kids["mia"].id, kids["noah"].id}
    assert _ids(service.list_for(school.identity("teacher_a"))) == {kids["olivia"].id, kids["mia"].id}
    assert _ids(service.list_for(school.identity("teacher_b"))) == {kids["noah"].id}
    assert _ids(service.list_for(school.identity("director"))) == _ids(kids.values())


def test_parent_cannot_read_another_parents_child(school):
    with pytest.raises(NotFoundError):
        school.container.student_service.get(school.identity("parent_p"), school.kids["mia"].id)


def test_missing_and_hidden_students_look_the_same(school):
    service = school.container.student_service
    with pytest.raises(NotFoundError) as hidden:
        service.get(school.identity("teacher_b"), school.kids["olivia"].id)
    with pytest.raises(NotFoundError) as missing:
        service.get(school.identity("director"), 999)
    assert str(hidden.value) == str(missing.value)


def test_class_filter(school):
    service = school.container.student_service
    in_a = service.list_for(school.identity("parent_q"), class_id=school.groups["a"].id)
    assert _ids(in_a) == {school.kids["mia"].id}

    with pytest.raises(NotFoundError):
        service.list_for(school.identity("teacher_b"), class_id=school.groups["a"].id)


def test_teacher_creates_students_only_in_own_class(school):
    service = school.container.student_service
    teacher = school.identity("teacher_a")
    data = {"firstName": "Ava", "lastName": "Lee", "dateOfBirth": "2019-01-09", "parentId": school.people["parent_p"].id}

    created = service.create(teacher, {**data, "classId": school.groups["a"].id})
    assert created.class_id == school.groups["a"].id
    assert created.profile_image

    with pytest.raises(AuthorizationError):
        service.create(teacher, {**data, "classId": school.groups["b"].id})
    with pytest.raises(AuthorizationError):
        service.update(teacher, created.id, {"classId": school.groups["b"].id})


def test_parent_cannot_write_students(school):
    with pytest.raises(AuthorizationError):
        school.container.student_service.create(
            school.identity("parent_p"), {"firstName": "A", "lastName": "B", "dateOfBirth": "2019-01-01"}
        )


def test_parent_id_must_reference_a_parent(school):
    with pytest.raises(ValidationError) as exc:
        school.container.student_service.create(
            school.identity("director"),
            {
                "firstName": "A",
                "lastName": "B",
                "dateOfBirth": "2019-01-01",
                "parentId": school.people["teacher_a"].id,
            },
        )
    assert "parentId" in exc.value.errors


def test_bad_birth_date(school):
    with pytest.raises(ValidationError):
        school.container.student_service.create(
            school.identity("director"), {"firstName": "A", "lastName": "B", "dateOfBirth": "01/02/2019"}
        )


def test_director_updates_and_deletes(school):
    service = school.container.student_service
    director = school.identity("director")
    noah = school.kids["noah"].id

    updated = service.update(director, noah, {"firstName": "Noa", "classId": school.groups["a"].id})
    assert updated.first_name == "Noa"
    assert updated.class_id == school.groups["a"].id

    service.delete(director, noah)
    with pytest.raises(NotFoundError):
        service.get(director, noah)


def test_class_service_visibility_and_create(school):
    service = school.container.class_service
    assert _ids(service.list_for(school.identity("parent_p"))) == {school.groups["a"].id}
    assert _ids(service.list_for(school.identity("director"))) == {school.groups["a"].id, school.groups["b"].id}

    with pytest.raises(NotFoundError):
        service.get(school.identity("teacher_a"), school.groups["b"].id)

    created = service.create(school.identity("director"), {"name": "Class 3C", "teacherId": school.people["teacher_b"].id})
    assert created.teacher_id == school.people["teacher_b"].id
    with pytest.raises(ValidationError):
        service.create(school.identity("director"), {"name": "X", "teacherId": school.people["parent_p"].id})
    with pytest.raises(AuthorizationError):
        service.create(school.identity("teacher_a"), {"name": "Mine"})
