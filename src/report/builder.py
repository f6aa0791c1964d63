"""Tabular health reports built from the grid and statistics engines."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Sequence

import pandas as pd

from src.common.models import DogProfile, Entry, FilterSpec
from src.grid.engine import GridEngine
from src.stats.engine import StatisticsEngine, health_recommendations, rate
from src.stats.filters import apply_filters

NOTES_PREVIEW = 30

SUMMARY_COLUMNS = ["metric", "value"]
DISTRIBUTION_COLUMNS = ["label", "count", "percentage"]
TIMELINE_COLUMNS = ["day", "normal", "problems"]
CORRELATION_COLUMNS = ["food", "total", "problems", "problem_rate"]
ENTRY_COLUMNS = [
    "id",
    "timestamp",
    "category",
    "size",
    "color",
    "smell",
    "food",
    "hours_since_meal",
    "notes",
    "latitude",
    "longitude",
    "is_manual",
]
GRID_COLUMNS = ["cell_id", "south", "west", "north", "east", "count", "completed", "tier"]


class ReportBuilder:
    """Calculates every report table for one filter specification."""

    def __init__(self, grid_engine: GridEngine, stats_engine: StatisticsEngine) -> None:
        self.grid_engine = grid_engine
        self.stats_engine = stats_engine

    def run(
        self,
        entries: Sequence[Entry],
        spec: FilterSpec | None = None,
        now: Optional[datetime] = None,
        profile: Optional[DogProfile] = None,
    ) -> Dict[str, pd.DataFrame]:
        spec = spec or FilterSpec()
        now = now or datetime.now()
        filtered = apply_filters(entries, spec, now=now)
        return {
            "summary": self._summary(filtered, spec, now, profile),
            "category_distribution": self._category_distribution(filtered),
            "food_distribution": self._food_distribution(filtered),
            "timeline": self._timeline(filtered, now),
            "food_correlations": self._food_correlations(filtered),
            "recent_entries": self._entry_frame(self.stats_engine.recent_entries(filtered)),
            "entry_log": self._entry_frame(filtered),
            "grid_cells": self._grid_cells(entries),
            "recommendations": self._recommendations(filtered),
        }

    def _summary(
        self,
        entries: Sequence[Entry],
        spec: FilterSpec,
        now: datetime,
        profile: Optional[DogProfile],
    ) -> pd.DataFrame:
        stats = self.stats_engine.statistics(entries)
        rows = [
            ("generated_at", now.isoformat(timespec="seconds")),
            ("period", spec.period.value),
            ("category", spec.category.value if spec.category else "all"),
            ("food", spec.food or "all"),
            ("total", stats.total),
            ("normal", stats.normal),
            ("problems", stats.problems),
            ("normal_percentage", stats.normal_percentage),
            ("problem_percentage", stats.problem_percentage),
        ]
        if profile is not None:
            rows.insert(0, ("dog", profile.name))
            if profile.breed:
                rows.insert(1, ("breed", profile.breed))
        return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)

    def _category_distribution(self, entries: Sequence[Entry]) -> pd.DataFrame:
        stats = self.stats_engine.statistics(entries)
        rows = [
            (category.value, count, round(rate(count, stats.total), 1))
            for category, count in stats.category_histogram.items()
        ]
        return pd.DataFrame(rows, columns=DISTRIBUTION_COLUMNS)

    def _food_distribution(self, entries: Sequence[Entry]) -> pd.DataFrame:
        stats = self.stats_engine.statistics(entries)
        rows = [
            (food, count, round(rate(count, stats.total), 1))
            for food, count in stats.food_histogram.items()
        ]
        frame = pd.DataFrame(rows, columns=DISTRIBUTION_COLUMNS)
        return frame.sort_values("count", ascending=False, kind="stable").reset_index(drop=True)

    def _timeline(self, entries: Sequence[Entry], now: datetime) -> pd.DataFrame:
        buckets = self.stats_engine.time_series(entries, now=now)
        rows = [(bucket.label, bucket.normal, bucket.problems) for bucket in buckets]
        return pd.DataFrame(rows, columns=TIMELINE_COLUMNS)

    def _food_correlations(self, entries: Sequence[Entry]) -> pd.DataFrame:
        rows = [
            (item.food, item.total, item.problems, round(item.problem_rate, 1))
            for item in self.stats_engine.top_correlations(entries)
        ]
        return pd.DataFrame(rows, columns=CORRELATION_COLUMNS)

    def _grid_cells(self, entries: Sequence[Entry]) -> pd.DataFrame:
        geometry = self.grid_engine.geometry
        rows = []
        for cell in self.grid_engine.compute_grid(entries).values():
            bounds = geometry.cell_bounds(cell.cell_id)
            rows.append(
                (
                    cell.cell_id.key,
                    bounds.south,
                    bounds.west,
                    bounds.north,
                    bounds.east,
                    cell.count,
                    cell.completed,
                    self.grid_engine.cell_tier(cell.count),
                )
            )
        frame = pd.DataFrame(rows, columns=GRID_COLUMNS)
        return frame.sort_values("count", ascending=False, kind="stable").reset_index(drop=True)

    def _recommendations(self, entries: Sequence[Entry]) -> pd.DataFrame:
        notes = health_recommendations(self.stats_engine.statistics(entries))
        return pd.DataFrame({"recommendation": notes}, columns=["recommendation"])

    @staticmethod
    def _entry_frame(entries: Sequence[Entry]) -> pd.DataFrame:
        rows = []
        for entry in entries:
            attributes = entry.attributes
            notes = attributes.notes or ""
            if len(notes) > NOTES_PREVIEW:
                notes = notes[:NOTES_PREVIEW] + "..."
            rows.append(
                (
                    entry.id,
                    entry.timestamp.isoformat(timespec="minutes"),
                    entry.category.value,
                    attributes.size.value if attributes.size else None,
                    attributes.color.value if attributes.color else None,
                    attributes.smell.value if attributes.smell else None,
                    entry.food,
                    attributes.hours_since_meal,
                    notes or None,
                    entry.position.latitude if entry.position else None,
                    entry.position.longitude if entry.position else None,
                    entry.is_manual,
                )
            )
        return pd.DataFrame(rows, columns=ENTRY_COLUMNS)
