from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_identity, json_body, login_required
from ..common.serialization import to_json
from ..container import Container
from ..users.controller import user_json


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/stats", methods=["GET"], endpoint="admin_stats")
    @login_required
    def admin_stats():
        return jsonify(to_json(container.admin_service.stats(current_identity())))

    @app.route("/api/admin/users", methods=["GET"], endpoint="admin_list_users")
    @login_required
    def admin_list_users():
        users = container.user_service.list_users(current_identity())
        return jsonify([user_json(u) for u in users])

    @app.route("/api/admin/users", methods=["POST"], endpoint="admin_create_user")
    @login_required
    def admin_create_user():
        user = container.user_service.create_user(current_identity(), json_body())
        return jsonify(user_json(user)), 201
