"""Configuration helpers for the dog health tracker."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml

from .models import DEFAULT_BADGES, Badge


@dataclass(frozen=True)
class GridConfig:
    """Grid resolution, completion rules and badge ladder."""

    cell_size_meters: float = 1000.0
    completion_threshold: int = 20
    points_per_cell: int = 100
    min_distance_degrees: float = 0.00003  # ~3.3 m
    max_placement_attempts: int = 8
    badges: Tuple[Badge, ...] = DEFAULT_BADGES


@dataclass(frozen=True)
class StatsConfig:
    """Default sizes for the derived views."""

    recent_limit: int = 10
    correlation_top_n: int = 5
    timeline_days: int = 30


@dataclass(frozen=True)
class StoreConfig:
    """Where the JSON backup of entries and profile lives."""

    backup_path: Optional[str] = None


@dataclass(frozen=True)
class OutputConfig:
    """Where report tables are written."""

    base_path: str = "./data/reports"


@dataclass(frozen=True)
class TrackerConfig:
    """Progress carried over between sessions."""

    completed_cells: int = 0


@dataclass(frozen=True)
class AppConfig:
    """Aggregated configuration model."""

    grid: GridConfig
    stats: StatsConfig
    store: StoreConfig
    output: OutputConfig
    tracker: TrackerConfig


def default_config() -> AppConfig:
    return AppConfig(
        grid=GridConfig(),
        stats=StatsConfig(),
        store=StoreConfig(),
        output=OutputConfig(),
        tracker=TrackerConfig(),
    )


def load_config(path: str | Path) -> AppConfig:
    """Parse a YAML config file into an AppConfig dataclass."""

    raw = _load_yaml(path)
    grid_cfg = raw.get("grid", {})
    stats_cfg = raw.get("stats", {})
    store_cfg = raw.get("store", {})
    output_cfg = raw.get("output", {})
    tracker_cfg = raw.get("tracker", {})

    grid = GridConfig(
        cell_size_meters=float(grid_cfg.get("cell_size_meters", 1000.0)),
        completion_threshold=int(grid_cfg.get("completion_threshold", 20)),
        points_per_cell=int(grid_cfg.get("points_per_cell", 100)),
        min_distance_degrees=float(grid_cfg.get("min_distance_degrees", 0.00003)),
        max_placement_attempts=int(grid_cfg.get("max_placement_attempts", 8)),
        badges=_parse_badges(grid_cfg.get("badges")),
    )
    stats = StatsConfig(
        recent_limit=int(stats_cfg.get("recent_limit", 10)),
        correlation_top_n=int(stats_cfg.get("correlation_top_n", 5)),
        timeline_days=int(stats_cfg.get("timeline_days", 30)),
    )
    store = StoreConfig(backup_path=store_cfg.get("backup_path"))
    output = OutputConfig(base_path=str(output_cfg.get("base_path", "./data/reports")))
    tracker = TrackerConfig(completed_cells=int(tracker_cfg.get("completed_cells", 0)))
    return AppConfig(grid=grid, stats=stats, store=store, output=output, tracker=tracker)


def _parse_badges(raw_badges: Any) -> Tuple[Badge, ...]:
    if not raw_badges:
        return DEFAULT_BADGES
    if not isinstance(raw_badges, list):
        raise ValueError("grid.badges must be a list of badge mappings.")
    badges = [
        Badge(
            key=str(item["key"]),
            name=str(item.get("name", item["key"])),
            threshold=int(item["threshold"]),
            points=int(item.get("points", 0)),
        )
        for item in raw_badges
    ]
    return tuple(sorted(badges, key=lambda badge: badge.threshold))


def _load_yaml(path: str | Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a top-level mapping.")
    return data
