from __future__ import annotations

from datetime import date

import pytest

from smartkid.core.enums import Mood
from smartkid.core.exceptions import AuthorizationError, ConflictError, NotFoundError


def _report(school, who="teacher_a", student="olivia", day="2024-05-06", mood="happy", **extra):
    data = {
        "studentId": school.kids[student].id,
        "date": day,
        "mood": mood,
        "activities": ["Painting", "Story time"],
        "notes": "Great day",
        "achievements": [],
        **extra,
    }
    return school.container.report_service.create(school.identity(who), data)


def test_create_duplicate_then_update(school):
    service = school.container.report_service
    report = _report(school)
    assert report.teacher_id == school.people["teacher_a"].id
    assert report.activities == ("Painting", "Story time")

    with pytest.raises(ConflictError):
        _report(school, mood="sad")

    updated = service.update(school.identity("teacher_a"), report.id, {"mood": "amazing", "achievements": ["Tied shoes"]})
    assert updated.mood == Mood.AMAZING
    assert updated.achievements == ("Tied shoes",)
    assert len(school.reports.list_reports(student_ids=None)) == 1


def test_only_the_author_edits_a_visible_report(school):
    report = _report(school)
    # Olivia moves to teacher_b's class: the report is now visible to teacher_b, but not theirs.
    school.students.update_student(school.kids["olivia"].id, {"class_id": school.groups["b"].id})

    with pytest.raises(AuthorizationError):
        school.container.report_service.update(school.identity("teacher_b"), report.id, {"notes": "Mine now"})


def test_invisible_report_is_not_found_for_other_teacher(school):
    report = _report(school)
    with pytest.raises(NotFoundError):
        school.container.report_service.update(school.identity("teacher_b"), report.id, {"notes": "x"})


def test_only_teachers_write_reports(school):
    with pytest.raises(AuthorizationError):
        _report(school, who="director")


def test_moving_a_report_onto_an_occupied_day_conflicts(school):
    _report(school, day="2024-05-06")
    second = _report(school, day="2024-05-07")
    with pytest.raises(ConflictError):
        school.container.report_service.update(school.identity("teacher_a"), second.id, {"date": "2024-05-06"})


def test_parent_sees_only_own_childrens_reports(school):
    _report(school, student="olivia")
    _report(school, student="mia")
    service = school.container.report_service

    assert {r.student_id for r in service.list(school.identity("parent_p"))} == {school.kids["olivia"].id}
    with pytest.raises(NotFoundError):
        service.list(school.identity("parent_p"), student_id=school.kids["mia"].id)


def test_latest_per_student_picks_the_newest_day(school):
    _report(school, student="olivia", day="2024-05-03")
    newest = _report(school, student="olivia", day="2024-05-10")
    _report(school, student="olivia", day="2024-05-07")
    mia = _report(school, student="mia", day="2024-05-01")

    latest = school.container.report_service.latest_per_student(school.identity("teacher_a"))
    assert [r.id for r in latest] == [newest.id, mia.id]


def test_stats_mood_counts_match_recent_reports(school):
    today = date(2024, 5, 10)
    _report(school, student="olivia", day="2024-05-03", mood="upset")  # today - 7, outside
    _report(school, student="olivia", day="2024-05-04", mood="happy")  # today - 6, inside
    _report(school, student="olivia", day="2024-05-10", mood="sad")  # today, inside
    _report(school, student="mia", day="2024-05-02", mood="happy")  # today - 8, outside
    _report(school, student="mia", day="2024-05-11", mood="upset")  # tomorrow, outside

    stats = school.container.admin_service.stats(school.identity("director"), today=today)

    assert stats.total_reports == 5
    assert stats.recent_reports_count == 2
    assert sum(stats.mood_counts.values()) == stats.recent_reports_count
    assert stats.mood_counts[Mood.HAPPY] == 1
    assert stats.mood_counts[Mood.SAD] == 1
    assert (stats.total_students, stats.total_teachers, stats.total_parents, stats.total_classes) == (3, 2, 2, 2)


def test_stats_need_admin_read(school):
    with pytest.raises(AuthorizationError):
        school.container.admin_service.stats(school.identity("teacher_a"))
