from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_identity, json_body, login_required
from ..common.serialization import to_json
from ..common.validators import optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/milestones", methods=["GET"], endpoint="list_milestones")
    @login_required
    def list_milestones():
        student_id = optional_int(request.args.get("studentId"), "studentId")
        return jsonify(to_json(container.milestone_service.list(current_identity(), student_id=student_id)))

    @app.route("/api/milestones", methods=["POST"], endpoint="create_milestone")
    @login_required
    def create_milestone():
        milestone = container.milestone_service.create(current_identity(), json_body())
        return jsonify(to_json(milestone)), 201

    @app.route("/api/milestones/<int:milestone_id>", methods=["GET"], endpoint="get_milestone")
    @login_required
    def get_milestone(milestone_id: int):
        return jsonify(to_json(container.milestone_service.get(current_identity(), milestone_id)))

    @app.route("/api/milestones/<int:milestone_id>", methods=["PUT"], endpoint="update_milestone")
    @login_required
    def update_milestone(milestone_id: int):
        milestone = container.milestone_service.update(current_identity(), milestone_id, json_body())
        return jsonify(to_json(milestone))
