"""Explicit observer for "attendance updated" notifications.

Consumers (alerts, views) subscribe once at wiring time and re-read state
when notified; publishers never know who is listening.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from ..core.enums import Stage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceUpdated:
    staff_id: int
    work_date: date
    kind: str
    stage: Optional[Stage] = None
    record_id: Optional[int] = None


Listener = Callable[[AttendanceUpdated], None]


class AttendanceEvents:
    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: AttendanceUpdated) -> None:
        # The write is already committed; listener failures are only logged.
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("attendance listener failed for staff=%s kind=%s", event.staff_id, event.kind)
