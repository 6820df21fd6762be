from __future__ import annotations

from datetime import date

import pytest

from smartkid.core.enums import BadgeCategory
from smartkid.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError


@pytest.fixture
def star(school):
    return school.container.badge_service.create(
        school.identity("teacher_a"),
        {"name": "Reading Star", "description": "Read 10 books", "icon": "book-open", "category": "academic"},
    )


def test_catalogue_filter(school, star):
    service = school.container.badge_service
    service.create(
        school.identity("director"),
        {"name": "Kind Friend", "description": "Helped a friend", "icon": "heart", "category": "behavioral"},
    )
    assert [b.id for b in service.list(category="academic")] == [star.id]
    assert len(service.list()) == 2
    with pytest.raises(ValidationError):
        service.list(category="sports")


def test_parents_cannot_create_badges(school):
    with pytest.raises(AuthorizationError):
        school.container.badge_service.create(
            school.identity("parent_p"), {"name": "X", "description": "Y", "icon": "z", "category": "special"}
        )


def test_award_defaults_and_duplicate(school, star):
    service = school.container.badge_service
    award = service.award(school.identity("teacher_a"), {"studentId": school.kids["olivia"].id, "badgeId": star.id})

    assert award.awarded_by == school.people["teacher_a"].id
    assert award.date_awarded == date.today().isoformat()
    assert award.badge.category == BadgeCategory.ACADEMIC

    with pytest.raises(ConflictError):
        service.award(school.identity("director"), {"studentId": school.kids["olivia"].id, "badgeId": star.id})
    assert len(service.list_awards(school.identity("director"), school.kids["olivia"].id)) == 1


def test_teacher_awards_only_own_students(school, star):
    with pytest.raises(NotFoundError):
        school.container.badge_service.award(
            school.identity("teacher_b"), {"studentId": school.kids["olivia"].id, "badgeId": star.id}
        )


def test_unknown_badge(school):
    with pytest.raises(NotFoundError):
        school.container.badge_service.award(
            school.identity("director"), {"studentId": school.kids["olivia"].id, "badgeId": 99}
        )


def test_awards_listing_requires_entitled_student(school, star):
    service = school.container.badge_service
    service.award(school.identity("director"), {"studentId": school.kids["mia"].id, "badgeId": star.id})

    with pytest.raises(ValidationError):
        service.list_awards(school.identity("parent_q"), None)
    with pytest.raises(NotFoundError):
        service.list_awards(school.identity("parent_p"), school.kids["mia"].id)
    assert [a.badge_id for a in service.list_awards(school.identity("parent_q"), school.kids["mia"].id)] == [star.id]
