"""Upcoming preventive-care reminders derived from the dog profile."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from src.common.models import DogProfile

URGENCY_ORDER = {"urgent": 0, "warning": 1, "ok": 2}


@dataclass(frozen=True)
class Reminder:
    kind: str
    label: str
    due: date
    days_left: int
    urgency: str  # urgent | warning | ok

    @property
    def is_overdue(self) -> bool:
        return self.days_left < 0


def _urgency(days_left: int) -> str:
    if days_left <= 7:
        return "urgent"
    if days_left <= 14:
        return "warning"
    return "ok"


def upcoming_reminders(
    profile: Optional[DogProfile],
    today: Optional[date] = None,
    horizon_days: int = 30,
) -> List[Reminder]:
    """Due dates within the horizon, overdue ones included, most urgent first."""

    if profile is None:
        return []
    today = today or date.today()
    candidates = (
        ("vaccination", "Next vaccination", profile.next_vaccination),
        ("antiparasitic", "Next antiparasitic", profile.next_antiparasitic),
        ("flea_tick", "Next flea/tick treatment", profile.next_flea_tick),
    )
    reminders = []
    for kind, label, due in candidates:
        if due is None:
            continue
        days_left = (due - today).days
        if days_left > horizon_days:
            continue
        reminders.append(
            Reminder(kind=kind, label=label, due=due, days_left=days_left, urgency=_urgency(days_left))
        )
    reminders.sort(key=lambda item: (URGENCY_ORDER[item.urgency], item.days_left))
    return reminders
