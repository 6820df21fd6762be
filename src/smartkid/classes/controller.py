from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_identity, json_body, login_required
from ..common.serialization import to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/classes", methods=["GET"], endpoint="list_classes")
    @login_required
    def list_classes():
        return jsonify(to_json(container.class_service.list_for(current_identity())))

    @app.route("/api/classes/<int:class_id>", methods=["GET"], endpoint="get_class")
    @login_required
    def get_class(class_id: int):
        return jsonify(to_json(container.class_service.get(current_identity(), class_id)))

    @app.route("/api/classes", methods=["POST"], endpoint="create_class")
    @login_required
    def create_class():
        school_class = container.class_service.create(current_identity(), json_body())
        return jsonify(to_json(school_class)), 201
