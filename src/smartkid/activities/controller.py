from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_identity, json_body, login_required
from ..common.serialization import to_json
from ..common.validators import optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/activities", methods=["GET"], endpoint="list_activities")
    @login_required
    def list_activities():
        class_id = optional_int(request.args.get("classId"), "classId")
        return jsonify(to_json(container.activity_service.list_for(current_identity(), class_id=class_id)))

    @app.route("/api/activities", methods=["POST"], endpoint="create_activity")
    @login_required
    def create_activity():
        activity = container.activity_service.create(current_identity(), json_body())
        return jsonify(to_json(activity)), 201
