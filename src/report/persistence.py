"""Persist report tables for spreadsheets and the vet."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

import pandas as pd

logger = logging.getLogger(__name__)


class Persistence:
    """Write DataFrames as CSV files into a folder."""

    def __init__(self, base_path: str) -> None:
        self.base_path = Path(base_path)

    def write(self, tables: Dict[str, pd.DataFrame]) -> List[Path]:
        self.base_path.mkdir(parents=True, exist_ok=True)
        written = []
        for name, frame in tables.items():
            target = self.base_path / f"{name}.csv"
            target.parent.mkdir(parents=True, exist_ok=True)
            frame.to_csv(target, index=False)
            logger.debug("Wrote %d rows to %s", len(frame), target)
            written.append(target)
        return written
