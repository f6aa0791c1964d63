from pathlib import Path

import pytest

from src.common.config import load_config
from src.grid.engine import GridEngine
from src.stats.engine import StatisticsEngine

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def test_shipped_config_matches_defaults():
    config = load_config(PROJECT_ROOT / "config" / "local.yaml")

    assert config.grid.cell_size_meters == 1000
    assert config.grid.completion_threshold == 20
    assert [badge.threshold for badge in config.grid.badges] == [5, 10, 20, 50]
    assert config.stats.correlation_top_n == 5
    assert config.tracker.completed_cells == 0


def test_partial_config_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "grid:\n"
        "  completion_threshold: 10\n"
        "  badges:\n"
        "    - {key: gold, threshold: 3, points: 30}\n"
        "    - {key: bronze, threshold: 1}\n"
        "stats:\n"
        "  recent_limit: 4\n",
        encoding="utf-8",
    )
    config = load_config(path)

    grid = GridEngine.from_config(config.grid)
    assert grid.completion_threshold == 10
    assert grid.points_per_cell == 100
    assert [badge.key for badge in grid.badges] == ["bronze", "gold"]
    assert grid.badges[0].name == "bronze"
    assert StatisticsEngine.from_config(config.stats).recent_limit == 4
    assert config.output.base_path == "./data/reports"


def test_non_mapping_config_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)
