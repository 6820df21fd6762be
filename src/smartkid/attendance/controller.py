from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_identity, json_body, login_required
from ..common.serialization import to_json
from ..common.validators import optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    @login_required
    def list_attendance():
        records = container.attendance_service.list(
            current_identity(),
            date=request.args.get("date") or None,
            class_id=optional_int(request.args.get("classId"), "classId"),
            student_id=optional_int(request.args.get("studentId"), "studentId"),
        )
        return jsonify(to_json(records))

    @app.route("/api/attendance", methods=["POST"], endpoint="mark_attendance")
    @login_required
    def mark_attendance():
        record = container.attendance_service.mark(current_identity(), json_body())
        return jsonify(to_json(record)), 201

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="get_attendance")
    @login_required
    def get_attendance(attendance_id: int):
        return jsonify(to_json(container.attendance_service.get(current_identity(), attendance_id)))

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="update_attendance")
    @login_required
    def update_attendance(attendance_id: int):
        record = container.attendance_service.update(current_identity(), attendance_id, json_body())
        return jsonify(to_json(record))
