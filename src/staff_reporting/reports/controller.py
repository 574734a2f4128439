from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..common.web import current_user_id, json_body, login_required
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from .model import DailyReport


def _report_json(r: DailyReport) -> dict:
    return {
        "reportId": r.report_id,
        "date": r.work_date.isoformat(),
        "status": r.status.value,
        "content": r.content,
        "workHours": r.work_hours,
        "achievements": r.achievements,
        "challenges": r.challenges,
        "tomorrowPlan": r.tomorrow_plan,
        "submittedAt": r.submitted_at.isoformat() if r.submitted_at else None,
    }


def register(app: Flask, container: Container) -> None:
    reports = container.daily_report_service
    attendance = container.attendance_service

    def _today():
        return now_local(container.timezone).date()

    @app.route("/api/reports/daily", methods=["GET"], endpoint="reports_daily_get")
    @login_required
    def reports_daily_get():
        report = reports.get_for_date(current_user_id(), _today())
        return jsonify({"report": _report_json(report) if report else None})

    @app.route("/api/reports/daily", methods=["POST"], endpoint="reports_daily_submit")
    @login_required
    def reports_daily_submit():
        data = json_body()
        # Goes through the attendance service so the stage gate applies.
        report_id = attendance.submit_daily_report(
            current_user_id(),
            content=data.get("content"),
            work_hours=data.get("workHours"),
            achievements=data.get("achievements"),
            challenges=data.get("challenges"),
            tomorrow_plan=data.get("tomorrowPlan"),
        )
        return jsonify({"success": True, "reportId": report_id}), 201

    @app.route("/api/reports/daily/draft", methods=["POST"], endpoint="reports_daily_draft")
    @login_required
    def reports_daily_draft():
        data = json_body()
        report_id = reports.save_draft(
            staff_id=current_user_id(),
            work_date=_today(),
            content=data.get("content"),
            work_hours=data.get("workHours"),
            achievements=data.get("achievements"),
            challenges=data.get("challenges"),
            tomorrow_plan=data.get("tomorrowPlan"),
        )
        return jsonify({"success": True, "reportId": report_id})

    @app.route("/api/reports/history", methods=["GET"], endpoint="reports_history")
    @login_required
    def reports_history():
        limit = request.args.get("limit", type=int) or DEFAULT_HISTORY_LIMIT
        return jsonify({"rows": reports.list_history(current_user_id(), limit=limit)})
