from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import manager_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.alert_service

    @app.route("/api/manager/alerts", methods=["GET"], endpoint="manager_alerts")
    @manager_required
    def manager_alerts():
        alerts = service.list_active()
        return jsonify(
            {
                "alerts": [
                    {
                        "id": a.alert_id,
                        "staffId": a.staff_id,
                        "staffName": a.staff_name,
                        "type": a.type.value,
                        "message": a.message,
                        "triggeredAt": a.triggered_at.isoformat(),
                    }
                    for a in alerts
                ]
            }
        )

    @app.route("/api/manager/alerts/scan", methods=["POST"], endpoint="manager_alerts_scan")
    @manager_required
    def manager_alerts_scan():
        created = service.raise_missing_stage_alerts()
        return jsonify({"success": True, "created": created})

    @app.route("/api/manager/alerts/<int:alert_id>/dismiss", methods=["POST"], endpoint="manager_alert_dismiss")
    @manager_required
    def manager_alert_dismiss(alert_id: int):
        service.dismiss(alert_id)
        return jsonify({"success": True})
