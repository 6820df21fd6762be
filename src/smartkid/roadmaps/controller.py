from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_identity, json_body, login_required
from ..common.serialization import to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/roadmaps/templates", methods=["GET"], endpoint="list_roadmap_templates")
    @login_required
    def list_roadmap_templates():
        return jsonify(to_json(container.roadmap_service.list_templates()))

    @app.route("/api/roadmaps/templates", methods=["POST"], endpoint="create_roadmap_template")
    @login_required
    def create_roadmap_template():
        template = container.roadmap_service.create_template(current_identity(), json_body())
        return jsonify(to_json(template)), 201

    @app.route("/api/roadmaps/templates/<int:template_id>/stages", methods=["GET"], endpoint="list_roadmap_stages")
    @login_required
    def list_roadmap_stages(template_id: int):
        return jsonify(to_json(container.roadmap_service.list_stages(template_id)))

    @app.route("/api/roadmaps/templates/<int:template_id>/stages", methods=["POST"], endpoint="add_roadmap_stage")
    @login_required
    def add_roadmap_stage(template_id: int):
        stage = container.roadmap_service.add_stage(current_identity(), template_id, json_body())
        return jsonify(to_json(stage)), 201

    @app.route("/api/roadmaps", methods=["POST"], endpoint="assign_roadmap")
    @login_required
    def assign_roadmap():
        roadmap = container.roadmap_service.assign(current_identity(), json_body())
        return jsonify(to_json(roadmap)), 201

    @app.route("/api/students/<int:student_id>/roadmap", methods=["GET"], endpoint="student_roadmap")
    @login_required
    def student_roadmap(student_id: int):
        return jsonify(to_json(container.roadmap_service.get_for_student(current_identity(), student_id)))

    @app.route("/api/roadmaps/<int:roadmap_id>/progress", methods=["GET"], endpoint="list_stage_progress")
    @login_required
    def list_stage_progress(roadmap_id: int):
        return jsonify(to_json(container.roadmap_service.list_progress(current_identity(), roadmap_id)))

    @app.route("/api/roadmaps/<int:roadmap_id>/progress", methods=["PUT"], endpoint="update_stage_progress")
    @login_required
    def update_stage_progress(roadmap_id: int):
        progress = container.roadmap_service.update_progress(current_identity(), roadmap_id, json_body())
        return jsonify(to_json(progress))
