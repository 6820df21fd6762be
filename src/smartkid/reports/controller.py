from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_identity, json_body, login_required
from ..common.serialization import to_json
from ..common.validators import optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reports", methods=["GET"], endpoint="list_reports")
    @login_required
    def list_reports():
        student_id = optional_int(request.args.get("studentId"), "studentId")
        return jsonify(to_json(container.report_service.list(current_identity(), student_id=student_id)))

    @app.route("/api/reports", methods=["POST"], endpoint="create_report")
    @login_required
    def create_report():
        report = container.report_service.create(current_identity(), json_body())
        return jsonify(to_json(report)), 201

    @app.route("/api/reports/latest", methods=["GET"], endpoint="latest_reports")
    @login_required
    def latest_reports():
        return jsonify(to_json(container.report_service.latest_per_student(current_identity())))

    @app.route("/api/reports/<int:report_id>", methods=["GET"], endpoint="get_report")
    @login_required
    def get_report(report_id: int):
        return jsonify(to_json(container.report_service.get(current_identity(), report_id)))

    @app.route("/api/reports/<int:report_id>", methods=["PUT"], endpoint="update_report")
    @login_required
    def update_report(report_id: int):
        report = container.report_service.update(current_identity(), report_id, json_body())
        return jsonify(to_json(report))
