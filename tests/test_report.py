from datetime import timedelta

import pandas as pd
import pytest

from src.common.models import Category, DogProfile, FilterSpec
from src.grid.engine import GridEngine
from src.report.builder import ReportBuilder
from src.report.persistence import Persistence
from src.report.run_report import main
from src.stats.engine import StatisticsEngine
from src.store.backup import write_backup_file
from src.store.entry_store import EntryStore

ROME = (41.9028, 12.4964)


def _builder():
    return ReportBuilder(GridEngine(), StatisticsEngine())


def test_report_builds_every_table(make_entry, now):
    entries = [make_entry(Category.HEALTHY, at=ROME, food="kibble") for _ in range(20)]
    entries += [make_entry(Category.DIARRHEA, food="kibble", notes="x" * 40) for _ in range(5)]

    tables = _builder().run(entries, now=now, profile=DogProfile(name="Rex"))

    assert set(tables) == {
        "summary",
        "category_distribution",
        "food_distribution",
        "timeline",
        "food_correlations",
        "recent_entries",
        "entry_log",
        "grid_cells",
        "recommendations",
    }
    summary = dict(zip(tables["summary"]["metric"], tables["summary"]["value"]))
    assert summary["dog"] == "Rex"
    assert summary["total"] == 25
    assert summary["problem_percentage"] == 20.0

    grid = tables["grid_cells"]
    assert len(grid) == 1
    assert bool(grid.iloc[0]["completed"])
    assert grid.iloc[0]["tier"] == "full"

    correlations = tables["food_correlations"]
    assert correlations.iloc[0]["food"] == "kibble"
    assert correlations.iloc[0]["problem_rate"] == 20.0

    assert len(tables["recent_entries"]) == 10
    assert len(tables["entry_log"]) == 25
    assert tables["entry_log"]["notes"].dropna().str.len().max() == 33
    assert len(tables["timeline"]) == 30


def test_report_respects_filters_but_grid_sees_everything(make_entry, now):
    entries = [
        make_entry(Category.HEALTHY, at=ROME, timestamp=now - timedelta(days=20)),
        make_entry(Category.SOFT, at=ROME),
    ]
    tables = _builder().run(entries, FilterSpec.parse(period="today"), now=now)

    assert len(tables["entry_log"]) == 1
    assert tables["grid_cells"].iloc[0]["count"] == 2
    assert list(tables["category_distribution"]["label"]) == ["soft"]


def test_empty_report_has_columns(now):
    tables = _builder().run([], now=now)

    assert tables["grid_cells"].empty
    assert list(tables["food_correlations"].columns) == ["food", "total", "problems", "problem_rate"]
    assert tables["recommendations"].empty
    assert (tables["timeline"][["normal", "problems"]] == 0).all().all()


def test_persistence_writes_csv(tmp_path, make_entry, now):
    tables = _builder().run([make_entry(Category.BLOOD, food="tuna")], now=now)
    written = Persistence(str(tmp_path / "reports")).write(tables)

    assert len(written) == len(tables)
    frame = pd.read_csv(tmp_path / "reports" / "food_correlations.csv")
    assert frame.iloc[0]["food"] == "tuna"
    assert frame.iloc[0]["problem_rate"] == 100.0


def test_cli_runs_end_to_end(tmp_path):
    store = EntryStore()
    store.add_entry(Category.HEALTHY)
    store.add_entry(Category.MUCUS)
    backup = write_backup_file(store, tmp_path / "backup.json")

    exit_code = main(
        [
            "--config",
            str(tmp_path / "missing.yaml"),
            "--backup",
            str(backup),
            "--output",
            str(tmp_path / "out"),
            "--category",
            "mucus",
        ]
    )

    assert exit_code == 0
    log = pd.read_csv(tmp_path / "out" / "entry_log.csv")
    assert list(log["category"]) == ["mucus"]


def test_cli_without_backup_reports_usage_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(tmp_path / "missing.yaml"), "--output", str(tmp_path / "out")])

    assert excinfo.value.code == 2
    assert "no backup given" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_cli_reports_on_sample_data(tmp_path):
    exit_code = main(
        [
            "--config",
            str(tmp_path / "missing.yaml"),
            "--sample",
            "50",
            "--seed",
            "7",
            "--output",
            str(tmp_path / "out"),
        ]
    )

    assert exit_code == 0
    summary = pd.read_csv(tmp_path / "out" / "summary.csv")
    values = dict(zip(summary["metric"], summary["value"]))
    assert values["dog"] == "Bobby"
    assert len(pd.read_csv(tmp_path / "out" / "entry_log.csv")) == 50
