from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_identity, json_body, login_required
from ..common.serialization import to_json
from ..container import Container
from .model import User


def user_json(user: User) -> dict:
    return to_json(user, exclude=("password_hash",))


def register(app: Flask, container: Container) -> None:
    def _auth_payload(result):
        return {"user": user_json(result.user), "token": result.token}

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        result = container.auth_service.authenticate(data.get("email"), data.get("password"))
        return jsonify(_auth_payload(result))

    @app.route("/api/auth/register", methods=["POST"], endpoint="register")
    def register_account():
        result = container.auth_service.register(json_body())
        return jsonify(_auth_payload(result)), 201

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify(user_json(container.auth_service.current_user(current_identity())))

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="update_profile")
    @login_required
    def update_profile(user_id: int):
        user = container.user_service.update_profile(current_identity(), user_id, json_body())
        return jsonify(user_json(user))

    @app.route("/api/users/<int:user_id>/password", methods=["PUT"], endpoint="change_password")
    @login_required
    def change_password(user_id: int):
        data = json_body()
        container.user_service.change_password(
            current_identity(), user_id, data.get("currentPassword"), data.get("newPassword")
        )
        return jsonify({"message": "Password updated"})
