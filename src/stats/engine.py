"""Aggregates that feed the charts, lists and reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from src.common.config import StatsConfig
from src.common.models import Category, Entry

from .filters import local_day, to_local

PROBLEM_SHARE_WARNING = 30.0
FREQUENT_DIARRHEA = 3


def rate(part: int, total: int) -> float:
    """Percentage of ``part`` in ``total``; zero totals give 0.0."""

    if total <= 0:
        return 0.0
    return part * 100 / total


@dataclass(frozen=True)
class Statistics:
    total: int
    normal: int
    problems: int
    normal_percentage: float
    problem_percentage: float
    category_histogram: Dict[Category, int] = field(default_factory=dict)
    food_histogram: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class DailyBucket:
    day: date
    label: str
    normal: int
    problems: int


@dataclass(frozen=True)
class FoodCorrelation:
    food: str
    total: int
    problems: int
    problem_rate: float


class StatisticsEngine:
    """Stateless aggregations over an already-filtered entry sequence."""

    def __init__(
        self,
        recent_limit: int = 10,
        correlation_top_n: int = 5,
        timeline_days: int = 30,
    ) -> None:
        self.recent_limit = max(int(recent_limit), 0)
        self.correlation_top_n = max(int(correlation_top_n), 0)
        self.timeline_days = max(int(timeline_days), 1)

    @classmethod
    def from_config(cls, config: StatsConfig) -> "StatisticsEngine":
        return cls(
            recent_limit=config.recent_limit,
            correlation_top_n=config.correlation_top_n,
            timeline_days=config.timeline_days,
        )

    def statistics(self, entries: Iterable[Entry]) -> Statistics:
        total = 0
        problems = 0
        categories: Dict[Category, int] = {}
        foods: Dict[str, int] = {}
        for entry in entries:
            total += 1
            if entry.is_problem:
                problems += 1
            categories[entry.category] = categories.get(entry.category, 0) + 1
            food = entry.food
            if food:
                foods[food] = foods.get(food, 0) + 1
        normal = total - problems
        return Statistics(
            total=total,
            normal=normal,
            problems=problems,
            normal_percentage=round(rate(normal, total), 1),
            problem_percentage=round(rate(problems, total), 1),
            category_histogram=categories,
            food_histogram=foods,
        )

    def time_series(
        self,
        entries: Iterable[Entry],
        window_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[DailyBucket]:
        """One bucket per local calendar day, oldest first, ending today."""

        days = self.timeline_days if window_days is None else max(int(window_days), 1)
        today = to_local(now or datetime.now()).date()
        buckets: Dict[date, List[int]] = {
            today - timedelta(days=offset): [0, 0] for offset in range(days - 1, -1, -1)
        }
        for entry in entries:
            counts = buckets.get(local_day(entry.timestamp))
            if counts is None:
                continue
            counts[1 if entry.is_problem else 0] += 1
        return [
            DailyBucket(day=day, label=day.isoformat(), normal=normal, problems=problems)
            for day, (normal, problems) in buckets.items()
        ]

    def top_correlations(
        self, entries: Iterable[Entry], top_n: Optional[int] = None
    ) -> List[FoodCorrelation]:
        """Food labels ranked by usage, with the share of problem entries for each.

        Equal totals are ordered by label so the ranking never depends on
        insertion order.
        """

        limit = self.correlation_top_n if top_n is None else max(int(top_n), 0)
        per_food: Dict[str, List[int]] = {}
        for entry in entries:
            food = entry.food
            if not food:
                continue
            counts = per_food.setdefault(food, [0, 0])
            counts[0] += 1
            if entry.is_problem:
                counts[1] += 1
        ranked = sorted(per_food.items(), key=lambda item: (-item[1][0], item[0]))
        return [
            FoodCorrelation(food=food, total=total, problems=problems, problem_rate=rate(problems, total))
            for food, (total, problems) in ranked[:limit]
        ]

    def recent_entries(self, entries: Sequence[Entry], limit: Optional[int] = None) -> List[Entry]:
        """Newest first; for equal timestamps the later-recorded entry leads."""

        limit = self.recent_limit if limit is None else max(int(limit), 0)
        ordered = sorted(
            enumerate(entries),
            key=lambda item: (to_local(item[1].timestamp), item[0]),
            reverse=True,
        )
        return [entry for _, entry in ordered[:limit]]


def health_recommendations(stats: Statistics) -> List[str]:
    notes: List[str] = []
    if stats.problems == 0:
        return notes
    if stats.problem_percentage > PROBLEM_SHARE_WARNING:
        notes.append("High share of problem entries detected.")
        notes.append("A veterinary check-up is recommended.")
    histogram = stats.category_histogram
    if histogram.get(Category.BLOOD, 0) > 0 or histogram.get(Category.MUCUS, 0) > 0:
        notes.append("Blood or mucus present: consult a veterinarian.")
    if histogram.get(Category.DIARRHEA, 0) > FREQUENT_DIARRHEA:
        notes.append("Frequent diarrhea: review the diet.")
    return notes
