"""Grid completion, points, badges and marker placement."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from src.common.config import GridConfig
from src.common.geo import GridGeometry, InvalidCoordinateError, validate_coordinates
from src.common.models import (
    DEFAULT_BADGES,
    Achievement,
    Badge,
    CellId,
    Entry,
    GridCell,
    Placement,
    Position,
)

# Lower bounds of the overlay bands below completion.
NEAR_COMPLETE_COUNT = 16
IN_PROGRESS_COUNT = 6
STARTED_COUNT = 1
TOP_CELLS = 5

Grid = Dict[CellId, GridCell]


@dataclass(frozen=True)
class BadgeProgress:
    badge: Badge
    progress: int
    remaining: int


@dataclass(frozen=True)
class CellSummary:
    cell_id: CellId
    count: int
    completed: bool
    center: Position
    progress: float


@dataclass(frozen=True)
class AchievementSummary:
    total_points: int
    total_cells: int
    completed_cells: int
    completion_rate: int
    unlocked_badges: Tuple[Badge, ...]
    next_badge: Optional[BadgeProgress]
    top_cells: Tuple[CellSummary, ...]
    grid: Grid


class GridEngine:
    """Derives grid progress from a snapshot of the entry collection.

    Nothing is cached between calls: every query recomputes from the entries
    it is handed, so results always match the caller's current collection.
    """

    def __init__(
        self,
        geometry: GridGeometry | None = None,
        completion_threshold: int = 20,
        points_per_cell: int = 100,
        badges: Sequence[Badge] = DEFAULT_BADGES,
        min_distance: float = 0.00003,
        max_attempts: int = 8,
    ) -> None:
        self.geometry = geometry or GridGeometry()
        self.completion_threshold = max(int(completion_threshold), 1)
        self.points_per_cell = int(points_per_cell)
        self.badges: Tuple[Badge, ...] = tuple(sorted(badges, key=lambda badge: badge.threshold))
        self.min_distance = float(min_distance)
        self.max_attempts = max(int(max_attempts), 1)

    @classmethod
    def from_config(cls, config: GridConfig) -> "GridEngine":
        return cls(
            GridGeometry(config.cell_size_meters),
            completion_threshold=config.completion_threshold,
            points_per_cell=config.points_per_cell,
            badges=config.badges,
            min_distance=config.min_distance_degrees,
            max_attempts=config.max_placement_attempts,
        )

    def compute_grid(self, entries: Iterable[Entry]) -> Grid:
        counts: Dict[CellId, List[str]] = {}
        for entry in entries:
            # Manual entries have no position and never count toward progress.
            if entry.position is None:
                continue
            cell_id = self.geometry.cell_id_for(entry.position.latitude, entry.position.longitude)
            counts.setdefault(cell_id, []).append(entry.id)
        return {
            cell_id: GridCell(
                cell_id=cell_id,
                count=len(entry_ids),
                completed=len(entry_ids) >= self.completion_threshold,
                entry_ids=tuple(entry_ids),
            )
            for cell_id, entry_ids in counts.items()
        }

    @staticmethod
    def completed_count(grid: Grid) -> int:
        return sum(1 for cell in grid.values() if cell.completed)

    def total_points(self, grid: Grid) -> int:
        return self.points_per_cell * self.completed_count(grid)

    def unlocked_badges(self, completed_cells: int) -> List[Badge]:
        return [badge for badge in self.badges if completed_cells >= badge.threshold]

    def next_badge(self, completed_cells: int) -> Optional[Badge]:
        for badge in self.badges:
            if completed_cells < badge.threshold:
                return badge
        return None

    def detect_newly_unlocked(self, old_completed: int, new_completed: int) -> Optional[Achievement]:
        """Report at most one progress event between two completed-cell counts.

        A crossed badge threshold wins over the generic cell-completed event.
        """

        if new_completed <= old_completed:
            return None
        for badge in self.badges:
            if old_completed < badge.threshold <= new_completed:
                return Achievement(kind="badge", name=badge.name, points=badge.points, badge=badge)
        return Achievement(kind="cell", name="Cell completed", points=self.points_per_cell)

    def cell_tier(self, count: int) -> Optional[str]:
        if count >= self.completion_threshold:
            return "full"
        if count >= NEAR_COMPLETE_COUNT:
            return "near_complete"
        if count >= IN_PROGRESS_COUNT:
            return "in_progress"
        if count >= STARTED_COUNT:
            return "started"
        return None

    def find_free_position(
        self, latitude: float, longitude: float, existing: Iterable[Entry]
    ) -> Placement:
        """Search the candidate and a widening ring around it for a clear slot.

        Candidates past the poles or the antimeridian are skipped. Falls back
        to the original coordinate when every attempt collides.
        """

        occupied = [entry.position for entry in existing if entry.position is not None]
        for attempt in range(self.max_attempts):
            test_lat, test_lng = latitude, longitude
            if attempt > 0:
                angle = attempt / self.max_attempts * 2 * math.pi
                radius = self.min_distance * (1 + attempt * 0.3)
                test_lat += math.cos(angle) * radius
                test_lng += math.sin(angle) * radius
                if not _is_valid(test_lat, test_lng):
                    continue
            if not any(self._too_close(pos, test_lat, test_lng) for pos in occupied):
                return Placement(
                    position=Position(test_lat, test_lng),
                    collision_avoided=True,
                    attempts=attempt + 1,
                )
        return Placement(
            position=Position(latitude, longitude),
            collision_avoided=False,
            attempts=self.max_attempts,
        )

    def _too_close(self, position: Position, latitude: float, longitude: float) -> bool:
        distance = math.hypot(position.latitude - latitude, position.longitude - longitude)
        return distance < self.min_distance

    def summarize(self, entries: Iterable[Entry]) -> AchievementSummary:
        grid = self.compute_grid(entries)
        completed = self.completed_count(grid)
        total_cells = len(grid)
        upcoming = self.next_badge(completed)
        top = sorted(grid.values(), key=lambda cell: -cell.count)[:TOP_CELLS]
        return AchievementSummary(
            total_points=self.total_points(grid),
            total_cells=total_cells,
            completed_cells=completed,
            completion_rate=round(completed / total_cells * 100) if total_cells else 0,
            unlocked_badges=tuple(self.unlocked_badges(completed)),
            next_badge=(
                BadgeProgress(badge=upcoming, progress=completed, remaining=upcoming.threshold - completed)
                if upcoming
                else None
            ),
            top_cells=tuple(
                CellSummary(
                    cell_id=cell.cell_id,
                    count=cell.count,
                    completed=cell.completed,
                    center=self.geometry.cell_center(cell.cell_id),
                    progress=min(100.0, cell.count / self.completion_threshold * 100),
                )
                for cell in top
            ),
            grid=grid,
        )


def _is_valid(latitude: float, longitude: float) -> bool:
    try:
        validate_coordinates(latitude, longitude)
    except InvalidCoordinateError:
        return False
    return True
