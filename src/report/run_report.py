"""Entry point that turns a tracker backup into CSV report tables."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from pathlib import Path

from src.common.config import default_config, load_config
from src.common.models import Category, FilterSpec, Period
from src.report.builder import ReportBuilder
from src.report.persistence import Persistence
from src.store.backup import read_backup_file
from src.store.sample_data import load_sample_data
from src.tracker.context import TrackerContext

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Aggregate a tracker backup into report tables.")
    parser.add_argument("--config", default="config/local.yaml", help="Path to YAML config.")
    parser.add_argument("--backup", help="Backup JSON to read (defaults to store.backup_path).")
    parser.add_argument("--sample", type=int, help="Report on N generated demo entries instead of a backup.")
    parser.add_argument("--seed", type=int, help="Random seed for --sample.")
    parser.add_argument("--output", help="Directory for CSV tables (defaults to output.base_path).")
    parser.add_argument("--period", default="all", choices=[period.value for period in Period])
    parser.add_argument("--category", default="all", choices=["all"] + [cat.value for cat in Category])
    parser.add_argument("--food", default="all", help="Food label to keep, or 'all'.")
    parser.add_argument("--log-level", default="INFO")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = load_config(args.config) if Path(args.config).exists() else default_config()
    backup_path = args.backup or config.store.backup_path
    if args.sample is None and not backup_path:
        parser.error("no backup given: pass --backup or --sample, or set store.backup_path")

    now = datetime.now()
    context = TrackerContext.from_config(config)
    if args.sample is not None:
        count = load_sample_data(context.store, args.sample, now=now, seed=args.seed)
        logger.info("Generated %d sample entries", count)
    else:
        count = read_backup_file(context.store, backup_path, now=now)
        logger.info("Loaded %d entries from %s", count, backup_path)

    spec = FilterSpec.parse(args.period, args.category, args.food)
    builder = ReportBuilder(context.grid_engine, context.stats_engine)
    tables = builder.run(context.store.list_entries(), spec, now=now, profile=context.store.profile)

    output = args.output or config.output.base_path
    Persistence(output).write(tables)
    logger.info("Wrote %d report tables to %s", len(tables), output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
