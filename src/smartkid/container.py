from __future__ import annotations

from dataclasses import dataclass

from .activities.mysql_activity_repository import MySQLActivityRepository
from .activities.service import ActivityService
from .access.scope import ScopeResolver
from .admin.service import AdminService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .badges.mysql_badge_repository import MySQLBadgeRepository
from .badges.service import BadgeService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.service import ClassService
from .core.constants import TOKEN_TTL_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .milestones.mysql_milestone_repository import MySQLMilestoneRepository
from .milestones.service import MilestoneService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.service import ReportService
from .roadmaps.mysql_roadmap_repository import MySQLRoadmapRepository
from .roadmaps.service import RoadmapService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import StudentService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    token_service: TokenService
    scopes: ScopeResolver

    auth_service: AuthService
    user_service: UserService
    class_service: ClassService
    student_service: StudentService
    attendance_service: AttendanceService
    report_service: ReportService
    admin_service: AdminService
    milestone_service: MilestoneService
    badge_service: BadgeService
    roadmap_service: RoadmapService
    activity_service: ActivityService


def build_services(
    *,
    users_repo,
    classes_repo,
    students_repo,
    attendance_repo,
    reports_repo,
    milestones_repo,
    badges_repo,
    roadmaps_repo,
    activities_repo,
    token_service: TokenService,
) -> Container:
    """Wire services over any set of repositories (MySQL in the app, in-memory in tests)."""
    scopes = ScopeResolver(students_repo, classes_repo)
    return Container(
        token_service=token_service,
        scopes=scopes,
        auth_service=AuthService(users_repo, token_service),
        user_service=UserService(users_repo),
        class_service=ClassService(classes_repo, users_repo, scopes),
        student_service=StudentService(students_repo, classes_repo, users_repo, scopes),
        attendance_service=AttendanceService(attendance_repo, students_repo, scopes),
        report_service=ReportService(reports_repo, students_repo, scopes),
        admin_service=AdminService(users_repo, students_repo, classes_repo, reports_repo),
        milestone_service=MilestoneService(milestones_repo, students_repo, scopes),
        badge_service=BadgeService(badges_repo, students_repo, scopes),
        roadmap_service=RoadmapService(roadmaps_repo, students_repo, scopes),
        activity_service=ActivityService(activities_repo, classes_repo, scopes),
    )


def build_container(*, db_config: dict, jwt_secret: str, token_ttl_hours: int = TOKEN_TTL_HOURS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        users_repo=MySQLUserRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        reports_repo=MySQLReportRepository(conn),
        milestones_repo=MySQLMilestoneRepository(conn),
        badges_repo=MySQLBadgeRepository(conn),
        roadmaps_repo=MySQLRoadmapRepository(conn),
        activities_repo=MySQLActivityRepository(conn),
        token_service=TokenService(jwt_secret, ttl_hours=token_ttl_hours),
    )
