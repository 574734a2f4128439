from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_user_id, date_arg, id_field, json_body, login_required, manager_required
from ..container import Container
from ..core.exceptions import ValidationError
from .model import AttendanceRecord, PreviousDayReport
from .workflow import completion_prompt


def _record_json(r: AttendanceRecord) -> dict:
    def iso(v):
        return v.isoformat() if v else None

    return {
        "attendanceId": r.attendance_id,
        "staffId": r.staff_id,
        "date": r.work_date.isoformat(),
        "status": r.status.value,
        "version": r.version,
        "wakeUpTime": iso(r.wake_up_time),
        "departureTime": iso(r.departure_time),
        "arrivalTime": iso(r.arrival_time),
        "destination": r.destination,
        "arrivalLocation": r.arrival_location,
        "arrivalGpsLocation": r.arrival_gps_location,
    }


def _plan_json(p: PreviousDayReport) -> dict:
    return {
        "reportId": p.report_id,
        "reportDate": p.report_date.isoformat(),
        "nextWakeUpTime": p.next_wake_up_time.strftime("%H:%M"),
        "nextDepartureTime": p.next_departure_time.strftime("%H:%M"),
        "nextArrivalTime": p.next_arrival_time.strftime("%H:%M"),
        "appearancePhotoUrl": p.appearance_photo_url,
        "routePhotoUrl": p.route_photo_url,
        "notes": p.notes,
        "attendanceRecordId": p.actual_attendance_record_id,
    }


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/status", methods=["GET"], endpoint="attendance_status")
    @login_required
    def attendance_status():
        status = service.get_status(current_user_id())
        payload = status.as_dict()
        payload["completionPrompt"] = completion_prompt(status)
        return jsonify(payload)

    @app.route("/api/attendance/previous-day", methods=["GET"], endpoint="attendance_previous_day_get")
    @login_required
    def attendance_previous_day_get():
        report = service.get_previous_day_report(current_user_id())
        return jsonify({"report": _plan_json(report) if report else None})

    @app.route("/api/attendance/previous-day", methods=["POST"], endpoint="attendance_previous_day")
    @login_required
    def attendance_previous_day():
        data = json_body()
        report_date = data.get("reportDate")
        report = service.submit_previous_day(
            current_user_id(),
            next_wake_up_time=data.get("nextWakeUpTime"),
            next_departure_time=data.get("nextDepartureTime"),
            next_arrival_time=data.get("nextArrivalTime"),
            appearance_photo_url=data.get("appearancePhotoUrl"),
            route_photo_url=data.get("routePhotoUrl"),
            notes=data.get("notes"),
            report_date=parse_iso_date(report_date) if report_date else None,
        )
        return jsonify({"success": True, "report": _plan_json(report)}), 201

    @app.route("/api/attendance/wakeup", methods=["POST"], endpoint="attendance_wakeup")
    @login_required
    def attendance_wakeup():
        data = json_body()
        record = service.submit_wakeup(current_user_id(), wake_up_time=data.get("wakeUpTime"), notes=data.get("notes"))
        return jsonify({"success": True, "record": _record_json(record)})

    @app.route("/api/attendance/departure", methods=["POST"], endpoint="attendance_departure")
    @login_required
    def attendance_departure():
        data = json_body()
        record = service.submit_departure(
            current_user_id(),
            departure_time=data.get("departureTime"),
            destination=data.get("destination"),
            route_photo_url=data.get("routePhotoUrl"),
            appearance_photo_url=data.get("appearancePhotoUrl"),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "record": _record_json(record)})

    @app.route("/api/attendance/arrival", methods=["POST"], endpoint="attendance_arrival")
    @login_required
    def attendance_arrival():
        data = json_body()
        record = service.submit_arrival(
            current_user_id(),
            arrival_time=data.get("arrivalTime"),
            arrival_location=data.get("arrivalLocation"),
            arrival_gps_location=data.get("arrivalGpsLocation"),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "record": _record_json(record)})

    @app.route("/api/attendance/complete-day", methods=["POST"], endpoint="attendance_complete_day")
    @login_required
    def attendance_complete_day():
        outcome = service.complete_day(current_user_id())
        return jsonify(
            {
                "success": True,
                "recordId": outcome.record_id,
                "message": outcome.message,
                "allTasksComplete": outcome.all_tasks_complete,
                "missingStages": [s.value for s in outcome.missing_stages],
                "alreadyCompleted": outcome.already_completed,
            }
        )

    @app.route("/api/attendance/start-new-day", methods=["POST"], endpoint="attendance_start_new_day")
    @login_required
    def attendance_start_new_day():
        outcome = service.start_new_day(current_user_id())
        return jsonify(
            {
                "success": True,
                "recordId": outcome.record_id,
                "message": outcome.message,
                "reset": outcome.reset,
                "alreadyActive": outcome.already_active,
            }
        )

    @app.route("/api/attendance/reopen-day", methods=["POST"], endpoint="attendance_reopen_day")
    @login_required
    def attendance_reopen_day():
        outcome = service.reopen_day(current_user_id())
        return jsonify(
            {
                "success": outcome.reopened,
                "recordId": outcome.record_id,
                "message": outcome.message,
            }
        )

    @app.route("/api/attendance/link-previous-day", methods=["POST"], endpoint="attendance_link_previous_day")
    @login_required
    def attendance_link_previous_day():
        data = json_body()
        record_id = data.get("attendanceRecordId")
        if record_id is None:
            raise ValidationError("attendanceRecordId is required")
        linked = service.link_previous_day_report(current_user_id(), id_field(record_id, "attendanceRecordId"))
        return jsonify({"success": linked is not None, "linkedReportId": linked})

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        start = date_arg("start")
        end = date_arg("end")
        if start and end:
            rows = service.get_history_range_ui(current_user_id(), start=start, end=end)
        else:
            rows = service.get_history_ui(current_user_id())
        return jsonify({"rows": rows})

    @app.route("/api/manager/staff/<int:staff_id>/history", methods=["GET"], endpoint="manager_staff_history")
    @manager_required
    def manager_staff_history(staff_id: int):
        start = date_arg("start")
        end = date_arg("end")
        if start and end:
            rows = service.get_history_range_ui(staff_id, start=start, end=end)
        else:
            rows = service.get_history_ui(staff_id)
        return jsonify({"staffId": staff_id, "rows": rows})
