import itertools
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Ensure the repository root (which contains the `src` package) is importable in tests.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.common.models import Category, Entry, EntryAttributes, Position  # noqa: E402


@pytest.fixture
def now():
    return datetime(2025, 3, 15, 12, 0)


@pytest.fixture
def make_entry(now):
    counter = itertools.count()

    def _make(
        category=Category.HEALTHY,
        at=None,
        timestamp=None,
        food=None,
        notes=None,
    ):
        position = Position(*at) if at is not None else None
        return Entry(
            id=f"entry-{next(counter)}",
            timestamp=timestamp or now,
            category=Category(category),
            position=position,
            attributes=EntryAttributes(food=food, notes=notes),
        )

    return _make
