from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from ..attendance.service import AttendanceService
from ..attendance.workflow import STAGE_LABELS
from ..common.events import AttendanceEvents, AttendanceUpdated
from ..core.exceptions import NotFoundError
from ..users.service import UserService
from .model import ALERT_STAGE, STAGE_ALERT, Alert
from .repository import AlertRepository

logger = logging.getLogger(__name__)


class AlertService:
    """Missing-stage alerts for managers.

    Alerts are raised on demand from each staff member's derived next action
    and cleared automatically when the matching stage is submitted.
    """

    def __init__(self, alerts: AlertRepository, attendance: AttendanceService, users: UserService):
        self._alerts = alerts
        self._attendance = attendance
        self._users = users

    def subscribe(self, events: AttendanceEvents):
        return events.subscribe(self.on_attendance_updated)

    def raise_missing_stage_alerts(self, *, now: datetime | None = None) -> list[int]:
        created: list[int] = []
        for user in self._users.list_active_staff():
            status = self._attendance.get_status(user.user_id, now=now)
            alert_type = STAGE_ALERT.get(status.next_action) if status.next_action else None
            if alert_type is None:
                continue
            if self._alerts.get_active(user.user_id, alert_type) is not None:
                continue

            alert_id = self._alerts.create(
                staff_id=user.user_id,
                alert_type=alert_type,
                message=f"{user.full_name} has not submitted the {STAGE_LABELS[ALERT_STAGE[alert_type]]}",
                triggered_at=now or datetime.now(timezone.utc),
            )
            logger.info("alert %s (%s) raised for staff=%s", alert_id, alert_type.value, user.user_id)
            created.append(alert_id)
        return created

    def on_attendance_updated(self, event: AttendanceUpdated) -> None:
        alert_type = STAGE_ALERT.get(event.stage) if event.stage else None
        if alert_type is None:
            return
        alert = self._alerts.get_active(event.staff_id, alert_type)
        if alert is not None:
            self._alerts.dismiss(alert_id=alert.alert_id, dismissed_at=datetime.now(timezone.utc))
            logger.info("alert %s auto-dismissed after %s", alert.alert_id, event.stage.value)

    def dismiss(self, alert_id: int, *, now: datetime | None = None) -> None:
        if not self._alerts.dismiss(alert_id=int(alert_id), dismissed_at=now or datetime.now(timezone.utc)):
            raise NotFoundError("Alert not found or already dismissed")

    def list_active(self) -> Sequence[Alert]:
        return self._alerts.list_active()
