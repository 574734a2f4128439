from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.web import current_role, current_user_id, json_body, login_required, manager_required
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import ErrorCode
from ..core.exceptions import ValidationError
from .model import User


def _user_json(u: User) -> dict:
    return {
        "id": u.user_id,
        "name": u.full_name,
        "email": u.email,
        "role": u.role.value,
        "phone": u.phone,
        "active": u.is_active,
        "nextDayActive": u.next_day_active,
    }


def _bool_field(data: dict, key: str) -> bool:
    value = data.get(key)
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false", ErrorCode.INVALID_FORMAT)
    return value


def register(app: Flask, container: Container) -> None:
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        s_user = container.auth_service.authenticate(
            data.get("email", ""),
            data.get("password", ""),
            ip_address=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
        )

        session.clear()
        session.permanent = bool(data.get("rememberMe"))
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value

        return jsonify(
            {
                "success": True,
                "user": {"id": s_user.user_id, "name": s_user.full_name, "email": s_user.email, "role": s_user.role.value},
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        if "user_id" in session:
            container.auth_service.logout(current_user_id())
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/auth/user", methods=["GET"], endpoint="auth_user")
    @login_required
    def auth_user():
        user = container.auth_service.current_user(current_user_id())
        return jsonify({"user": _user_json(user)})

    @app.route("/api/staff", methods=["GET"], endpoint="staff_list")
    @manager_required
    def staff_list():
        return jsonify({"staff": [_user_json(u) for u in container.user_service.list_staff()]})

    @app.route("/api/staff", methods=["POST"], endpoint="staff_register")
    @manager_required
    def staff_register():
        data = json_body()
        user_id = container.user_service.register_staff(
            current_role=current_role(),
            full_name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            phone=data.get("phone"),
        )
        return jsonify({"success": True, "userId": user_id}), 201

    @app.route("/api/staff/<int:user_id>/active", methods=["POST", "PATCH"], endpoint="staff_active")
    @manager_required
    def staff_active(user_id: int):
        active = _bool_field(json_body(), "active")
        container.user_service.set_active(current_role=current_role(), user_id=user_id, is_active=active)
        return jsonify({"success": True, "active": active})

    @app.route("/api/staff/<int:user_id>/next-day-active", methods=["POST", "PATCH"], endpoint="staff_next_day_active")
    @manager_required
    def staff_next_day_active(user_id: int):
        flag = _bool_field(json_body(), "nextDayActive")
        container.user_service.set_next_day_active(current_role=current_role(), user_id=user_id, next_day_active=flag)
        return jsonify({"success": True, "nextDayActive": flag})

    @app.route("/api/staff/<int:user_id>/access-logs", methods=["GET"], endpoint="staff_access_logs")
    @manager_required
    def staff_access_logs(user_id: int):
        logs = container.user_service.access_history(user_id)
        return jsonify(
            {
                "logs": [
                    {
                        "id": log.log_id,
                        "loginTime": log.login_time.isoformat(),
                        "logoutTime": log.logout_time.isoformat() if log.logout_time else None,
                        "ipAddress": log.ip_address,
                        "userAgent": log.user_agent,
                    }
                    for log in logs
                ]
            }
        )
