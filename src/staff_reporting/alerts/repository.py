from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AlertType
from .model import Alert


class AlertRepository(Protocol):
    def get_active(self, staff_id: int, alert_type: AlertType) -> Optional[Alert]:
        raise NotImplementedError

    def create(self, *, staff_id: int, alert_type: AlertType, message: str, triggered_at: datetime) -> int:
        raise NotImplementedError

    def dismiss(self, *, alert_id: int, dismissed_at: datetime) -> bool:
        """Dismiss an active alert; False when it was missing or already dismissed."""

        raise NotImplementedError

    def list_active(self) -> Sequence[Alert]:
        raise NotImplementedError
