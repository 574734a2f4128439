"""Attendance workflow tracker.

The daily sequence is previous-day plan -> wake-up -> departure -> arrival ->
daily report, then an explicit "complete day". Every consumer (staff status
API, manager overview, alerts) derives progress through ``derive_status`` so
the rules live in one place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import STAGE_ORDER, Stage


@dataclass(frozen=True)
class WorkflowState:
    """Persisted facts about one staff member's day, already fetched."""

    previous_day_reported: bool = False
    report_date: Optional[date] = None
    wake_up_reported: bool = False
    departure_reported: bool = False
    arrival_reported: bool = False
    daily_report_submitted: bool = False
    day_completed: bool = False

    def is_satisfied(self, stage: Stage) -> bool:
        return {
            Stage.PREVIOUS_DAY: self.previous_day_reported,
            Stage.WAKEUP: self.wake_up_reported,
            Stage.DEPARTURE: self.departure_reported,
            Stage.ARRIVAL: self.arrival_reported,
            Stage.DAILY_REPORT: self.daily_report_submitted,
        }[stage]


@dataclass(frozen=True)
class DerivedStatus:
    state: WorkflowState
    is_all_tasks_complete: bool
    should_enable_actions: bool
    is_waiting_for_next_day: bool
    should_hide_previous_day_card: bool
    next_action: Optional[Stage]
    disabled_stages: frozenset[Stage] = field(default_factory=frozenset)
    missing_stages: tuple[Stage, ...] = ()

    @property
    def day_completed(self) -> bool:
        return self.state.day_completed

    @property
    def can_complete_day(self) -> bool:
        return not self.state.day_completed

    @property
    def can_start_new_day(self) -> bool:
        return self.state.day_completed

    def is_enabled(self, stage: Stage) -> bool:
        return stage not in self.disabled_stages

    def is_satisfied(self, stage: Stage) -> bool:
        return self.state.is_satisfied(stage)

    def as_dict(self) -> dict:
        s = self.state
        return {
            "previousDayReported": s.previous_day_reported,
            "reportDate": s.report_date.isoformat() if s.report_date else None,
            "wakeUpReported": s.wake_up_reported,
            "departureReported": s.departure_reported,
            "arrivalReported": s.arrival_reported,
            "dailyReportSubmitted": s.daily_report_submitted,
            "dayCompleted": s.day_completed,
            "isAllTasksComplete": self.is_all_tasks_complete,
            "shouldEnableActions": self.should_enable_actions,
            "isWaitingForNextDay": self.is_waiting_for_next_day,
            "shouldHidePreviousDayCard": self.should_hide_previous_day_card,
            "nextAction": self.next_action.value if self.next_action else None,
            "enabledStages": [st.value for st in STAGE_ORDER if self.is_enabled(st)],
            "missingStages": [st.value for st in self.missing_stages],
            "canCompleteDay": self.can_complete_day,
            "canStartNewDay": self.can_start_new_day,
        }


def derive_status(state: WorkflowState, today: date) -> DerivedStatus:
    """Derive progress, next action and stage gating for one staff day.

    Total over every flag/date combination. ``report_date`` only matters when
    a previous-day report exists; a report aimed at a future date means the
    staff member already planned tomorrow and must wait for it.
    """

    reported = state.previous_day_reported
    report_date = state.report_date if reported else None

    missing = tuple(s for s in STAGE_ORDER if not state.is_satisfied(s))
    all_complete = not missing

    should_enable = not reported or report_date is None or report_date <= today
    waiting = reported and not should_enable
    hide_previous_card = reported and report_date is not None and report_date > today

    if state.day_completed or all_complete or waiting:
        next_action = None
    else:
        next_action = missing[0]

    disabled: set[Stage] = set()
    if not reported or waiting or state.day_completed:
        disabled.update(s for s in STAGE_ORDER if s is not Stage.PREVIOUS_DAY)
    if hide_previous_card or state.day_completed:
        disabled.add(Stage.PREVIOUS_DAY)

    return DerivedStatus(
        state=state,
        is_all_tasks_complete=all_complete,
        should_enable_actions=should_enable,
        is_waiting_for_next_day=waiting,
        should_hide_previous_day_card=hide_previous_card,
        next_action=next_action,
        disabled_stages=frozenset(disabled),
        missing_stages=missing,
    )


def completion_prompt(status: DerivedStatus) -> str:
    """Confirmation text shown before ending the day."""

    if status.is_all_tasks_complete:
        return "End today's report? Today's tasks will be closed and the next day can start."
    labels = ", ".join(STAGE_LABELS[s] for s in status.missing_stages)
    return f"Some tasks are not finished yet: {labels}. End the day anyway?"


STAGE_LABELS = {
    Stage.PREVIOUS_DAY: "previous-day report",
    Stage.WAKEUP: "wake-up report",
    Stage.DEPARTURE: "departure report",
    Stage.ARRIVAL: "arrival report",
    Stage.DAILY_REPORT: "daily report",
}
