"""Orchestration: sequence store mutations before recomputing derived views."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple

from src.common.config import AppConfig
from src.common.models import (
    Achievement,
    Category,
    Entry,
    EntryAttributes,
    FilterSpec,
    Placement,
    Position,
)
from src.grid.engine import AchievementSummary, GridEngine
from src.stats.engine import DailyBucket, FoodCorrelation, Statistics, StatisticsEngine
from src.stats.filters import apply_filters
from src.store.entry_store import EntryStore
from src.store.reminders import Reminder, upcoming_reminders

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordResult:
    entry: Entry
    placement: Optional[Placement]
    achievement: Optional[Achievement]


@dataclass(frozen=True)
class TrackerView:
    """Everything the map, chart and list layers render for one filter."""

    spec: FilterSpec
    entries: Tuple[Entry, ...]
    statistics: Statistics
    timeline: Tuple[DailyBucket, ...]
    correlations: Tuple[FoodCorrelation, ...]
    recent: Tuple[Entry, ...]
    achievements: AchievementSummary


class TrackerContext:
    """Holds the store and both engines; constructed once and passed explicitly."""

    def __init__(
        self,
        store: EntryStore,
        grid_engine: GridEngine,
        stats_engine: StatisticsEngine,
        completed_cells: int = 0,
    ) -> None:
        self.store = store
        self.grid_engine = grid_engine
        self.stats_engine = stats_engine
        self.completed_cells = max(int(completed_cells), 0)

    @classmethod
    def from_config(cls, config: AppConfig, store: EntryStore | None = None) -> "TrackerContext":
        return cls(
            store or EntryStore(),
            GridEngine.from_config(config.grid),
            StatisticsEngine.from_config(config.stats),
            completed_cells=config.tracker.completed_cells,
        )

    def record_entry(
        self,
        category: Category,
        attributes: Optional[EntryAttributes] = None,
        position: Optional[Position] = None,
        timestamp: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> RecordResult:
        placement = None
        if position is not None:
            placement = self.grid_engine.find_free_position(
                position.latitude, position.longitude, self.store.list_entries()
            )
            if not placement.collision_avoided:
                logger.info("No free slot near (%s, %s); keeping original", position.latitude, position.longitude)
            position = placement.position

        entry = self.store.add_entry(category, attributes, position, timestamp=timestamp, now=now)
        achievement = self._refresh_progress()
        return RecordResult(entry=entry, placement=placement, achievement=achievement)

    def delete_entry(self, entry_id: str) -> Entry:
        entry = self.store.remove_entry(entry_id)
        self._refresh_progress()
        return entry

    def _refresh_progress(self) -> Optional[Achievement]:
        grid = self.grid_engine.compute_grid(self.store.list_entries())
        current = self.grid_engine.completed_count(grid)
        achievement = self.grid_engine.detect_newly_unlocked(self.completed_cells, current)
        if achievement is not None:
            logger.info("Unlocked %s: %s (+%d points)", achievement.kind, achievement.name, achievement.points)
        self.completed_cells = current
        return achievement

    def view(self, spec: FilterSpec | None = None, now: Optional[datetime] = None) -> TrackerView:
        spec = spec or FilterSpec()
        now = now or datetime.now()
        snapshot = self.store.list_entries()
        filtered = apply_filters(snapshot, spec, now=now)
        return TrackerView(
            spec=spec,
            entries=tuple(filtered),
            statistics=self.stats_engine.statistics(filtered),
            timeline=tuple(self.stats_engine.time_series(filtered, now=now)),
            correlations=tuple(self.stats_engine.top_correlations(filtered)),
            recent=tuple(self.stats_engine.recent_entries(filtered)),
            achievements=self.grid_engine.summarize(snapshot),
        )

    def reminders(self, today: Optional[date] = None) -> List[Reminder]:
        return upcoming_reminders(self.store.profile, today=today)
