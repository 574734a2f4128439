from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.web import current_role, current_user_id, date_arg, id_field, json_body, login_required, manager_required
from ..container import Container
from ..core.enums import ConflictType, ErrorCode, Severity
from ..core.exceptions import ValidationError
from .model import ShiftConflict, ShiftSchedule


def _shift_json(s: ShiftSchedule) -> dict:
    return {
        "scheduleId": s.schedule_id,
        "staffId": s.staff_id,
        "staffName": s.staff_name,
        "date": s.work_date.isoformat(),
        "startTime": s.start_time.strftime("%H:%M"),
        "endTime": s.end_time.strftime("%H:%M"),
        "status": s.status.value,
        "location": s.location,
        "notes": s.notes,
    }


def _conflict_json(c: ShiftConflict) -> dict:
    return {
        "type": c.type.value,
        "severity": c.severity.value,
        "staffId": c.staff_id,
        "message": c.message,
        "scheduleIds": list(c.schedule_ids),
        "totalHours": c.total_hours,
    }


def register(app: Flask, container: Container) -> None:
    service = container.shift_service

    def _range():
        today = now_local(container.timezone).date()
        start = date_arg("start", today)
        end = date_arg("end", start + timedelta(days=30))
        return start, end

    @app.route("/api/shifts", methods=["GET"], endpoint="shifts_list")
    @login_required
    def shifts_list():
        start, end = _range()
        shifts = service.list_range(start=start, end=end, staff_id=current_user_id())
        return jsonify({"shifts": [_shift_json(s) for s in shifts]})

    @app.route("/api/shifts", methods=["POST"], endpoint="shifts_submit")
    @login_required
    def shifts_submit():
        data = json_body()
        work_date = data.get("date")
        if not work_date:
            raise ValidationError("date is required")
        schedule_id = service.submit(
            current_user_id=current_user_id(),
            current_role=current_role(),
            staff_id=data.get("staffId"),
            work_date=parse_iso_date(work_date),
            start_time=data.get("startTime"),
            end_time=data.get("endTime"),
            location=data.get("location"),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "scheduleId": schedule_id}), 201

    @app.route("/api/shifts/<int:schedule_id>", methods=["DELETE"], endpoint="shifts_delete")
    @login_required
    def shifts_delete(schedule_id: int):
        service.delete(current_user_id=current_user_id(), current_role=current_role(), schedule_id=schedule_id)
        return jsonify({"success": True})

    @app.route("/api/attendance/today-worksite", methods=["GET"], endpoint="today_worksite")
    @login_required
    def today_worksite():
        availability = service.today_worksite(current_user_id())
        if availability is None or availability.worksite is None:
            return jsonify({"hasWorksite": False, "worksite": None, "message": "No worksite is scheduled for today"})

        w = availability.worksite
        return jsonify(
            {
                "hasWorksite": True,
                "worksite": {"id": w.worksite_id, "name": w.name, "address": w.address, "description": w.description},
                "availability": {
                    "id": availability.availability_id,
                    "date": availability.work_date.isoformat(),
                    "notes": availability.notes,
                },
            }
        )

    @app.route("/api/manager/shifts", methods=["GET"], endpoint="manager_shifts")
    @manager_required
    def manager_shifts():
        start, end = _range()
        shifts = service.list_range(start=start, end=end)
        return jsonify({"shifts": [_shift_json(s) for s in shifts]})

    @app.route("/api/manager/shifts/<int:schedule_id>/approve", methods=["POST"], endpoint="manager_shift_approve")
    @manager_required
    def manager_shift_approve(schedule_id: int):
        service.approve(current_role=current_role(), schedule_id=schedule_id)
        return jsonify({"success": True})

    @app.route("/api/manager/shifts/<int:schedule_id>/complete", methods=["POST"], endpoint="manager_shift_complete")
    @manager_required
    def manager_shift_complete(schedule_id: int):
        service.complete(current_role=current_role(), schedule_id=schedule_id)
        return jsonify({"success": True})

    @app.route("/api/manager/shifts/conflicts", methods=["GET"], endpoint="manager_shift_conflicts")
    @manager_required
    def manager_shift_conflicts():
        start, end = _range()
        conflicts = service.detect_conflicts(start=start, end=end)
        return jsonify({"conflicts": [_conflict_json(c) for c in conflicts]})

    @app.route("/api/manager/shifts/conflicts/resolve", methods=["POST"], endpoint="manager_shift_conflict_resolve")
    @manager_required
    def manager_shift_conflict_resolve():
        data = json_body()
        ids = data.get("scheduleIds") or []
        if not isinstance(ids, list) or len(ids) < 2:
            raise ValidationError("scheduleIds must list the conflicting shifts")
        try:
            conflict_type = ConflictType(data.get("type"))
        except ValueError:
            raise ValidationError("Unknown conflict type", ErrorCode.INVALID_FORMAT) from None

        conflict = ShiftConflict(
            type=conflict_type,
            severity=Severity.MEDIUM,
            staff_id=id_field(data.get("staffId") or 0, "staffId"),
            message="",
            schedule_ids=tuple(id_field(i, "scheduleIds") for i in ids),
        )
        changed = service.resolve_conflict(current_role=current_role(), conflict=conflict, resolution=data.get("resolution"))
        return jsonify({"success": True, "changed": changed})
