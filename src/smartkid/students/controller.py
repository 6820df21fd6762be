from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_identity, json_body, login_required
from ..common.serialization import to_json
from ..common.validators import optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    @login_required
    def list_students():
        class_id = optional_int(request.args.get("classId"), "classId")
        students = container.student_service.list_for(current_identity(), class_id=class_id)
        return jsonify(to_json(students))

    @app.route("/api/students", methods=["POST"], endpoint="create_student")
    @login_required
    def create_student():
        student = container.student_service.create(current_identity(), json_body())
        return jsonify(to_json(student)), 201

    @app.route("/api/students/<int:student_id>", methods=["GET"], endpoint="get_student")
    @login_required
    def get_student(student_id: int):
        return jsonify(to_json(container.student_service.get(current_identity(), student_id)))

    @app.route("/api/students/<int:student_id>", methods=["PUT"], endpoint="update_student")
    @login_required
    def update_student(student_id: int):
        student = container.student_service.update(current_identity(), student_id, json_body())
        return jsonify(to_json(student))

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="delete_student")
    @login_required
    def delete_student(student_id: int):
        container.student_service.delete(current_identity(), student_id)
        return jsonify({"message": "Student deleted"})
