"""Time window, category and food predicates over entry collections."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional

from src.common.models import Entry, FilterSpec, Period


def to_local(moment: datetime) -> datetime:
    """Express a timestamp as naive local time so aware and naive values compare."""

    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def local_day(moment: datetime) -> date:
    return to_local(moment).date()


def subtract_month(moment: datetime) -> datetime:
    """Step back one calendar month, clamping the day to the target month."""

    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_predicate(period: Period, now: datetime) -> Callable[[Entry], bool]:
    now = to_local(now)
    today = now.date()

    if period is Period.TODAY:
        return lambda entry: local_day(entry.timestamp) == today
    if period is Period.YESTERDAY:
        yesterday = today - timedelta(days=1)
        return lambda entry: local_day(entry.timestamp) == yesterday
    if period is Period.WEEK:
        week_ago = now - timedelta(days=7)
        return lambda entry: to_local(entry.timestamp) >= week_ago
    if period is Period.MONTH:
        month_ago = subtract_month(now)
        return lambda entry: to_local(entry.timestamp) >= month_ago
    return lambda entry: True


def apply_filters(
    entries: Iterable[Entry],
    spec: FilterSpec,
    now: Optional[datetime] = None,
) -> List[Entry]:
    """Return the order-preserving subsequence matching every active selector."""

    in_period = period_predicate(spec.period, now or datetime.now())
    filtered = []
    for entry in entries:
        if not in_period(entry):
            continue
        if spec.category is not None and entry.category != spec.category:
            continue
        if spec.food is not None and entry.food != spec.food:
            continue
        filtered.append(entry)
    return filtered
