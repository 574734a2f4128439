from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import now_local
from ..common.web import date_arg, manager_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/manager/overview", methods=["GET"], endpoint="manager_overview")
    @manager_required
    def manager_overview():
        work_date = date_arg("date", now_local(container.timezone).date())
        overview = container.dashboard_service.build_overview(work_date)
        return jsonify(overview.as_dict())
