from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account roles used for access control."""

    PARENT = "parent"
    TEACHER = "teacher"
    DIRECTOR = "director"
    ADMIN = "admin"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class Mood(str, Enum):
    """Mood recorded on a daily report."""

    AMAZING = "amazing"
    HAPPY = "happy"
    OKAY = "okay"
    SAD = "sad"
    UPSET = "upset"


class BadgeCategory(str, Enum):
    ACADEMIC = "academic"
    BEHAVIORAL = "behavioral"
    ATTENDANCE = "attendance"
    SPECIAL = "special"


class MilestoneCategory(str, Enum):
    ACADEMIC = "academic"
    BEHAVIORAL = "behavioral"
    PHYSICAL = "physical"
    SOCIAL = "social"
    CREATIVE = "creative"


class SkillCategory(str, Enum):
    COGNITIVE = "cognitive"
    PHYSICAL = "physical"
    SOCIAL = "social"
    EMOTIONAL = "emotional"
    LANGUAGE = "language"
    CREATIVITY = "creativity"


class StageStatus(str, Enum):
    """Progress of a student on one roadmap stage."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    NEEDS_REVIEW = "needs_review"
