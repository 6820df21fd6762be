from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_identity, json_body, login_required
from ..common.serialization import to_json
from ..common.validators import optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/badges", methods=["GET"], endpoint="list_badges")
    @login_required
    def list_badges():
        return jsonify(to_json(container.badge_service.list(category=request.args.get("category"))))

    @app.route("/api/badges", methods=["POST"], endpoint="create_badge")
    @login_required
    def create_badge():
        badge = container.badge_service.create(current_identity(), json_body())
        return jsonify(to_json(badge)), 201

    @app.route("/api/badges/<int:badge_id>", methods=["GET"], endpoint="get_badge")
    @login_required
    def get_badge(badge_id: int):
        return jsonify(to_json(container.badge_service.get(badge_id)))

    @app.route("/api/student-badges", methods=["GET"], endpoint="list_student_badges")
    @login_required
    def list_student_badges():
        student_id = optional_int(request.args.get("studentId"), "studentId")
        return jsonify(to_json(container.badge_service.list_awards(current_identity(), student_id)))

    @app.route("/api/student-badges", methods=["POST"], endpoint="award_badge")
    @login_required
    def award_badge():
        award = container.badge_service.award(current_identity(), json_body())
        return jsonify(to_json(award)), 201
