from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AlertStatus, AlertType, Stage

# Stage whose submission clears each alert type.
ALERT_STAGE = {
    AlertType.MISSING_WAKEUP: Stage.WAKEUP,
    AlertType.MISSING_DEPARTURE: Stage.DEPARTURE,
    AlertType.MISSING_ARRIVAL: Stage.ARRIVAL,
    AlertType.MISSING_REPORT: Stage.DAILY_REPORT,
}

STAGE_ALERT = {stage: alert_type for alert_type, stage in ALERT_STAGE.items()}


@dataclass(frozen=True)
class Alert:
    alert_id: int
    staff_id: int
    type: AlertType
    message: str
    status: AlertStatus
    triggered_at: datetime
    dismissed_at: Optional[datetime] = None
    staff_name: Optional[str] = None
