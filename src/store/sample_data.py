"""Random demo entries scattered around Rome, for trying out the report CLI."""

from __future__ import annotations

import random
from datetime import date, datetime, timedelta
from typing import List, Optional

from src.common.models import (
    Category,
    Color,
    DogProfile,
    Entry,
    EntryAttributes,
    Position,
    Size,
    Smell,
)

from .entry_store import EntryStore

# (south, north) and (west, east) of the Rome area.
LAT_RANGE = (41.85, 42.05)
LNG_RANGE = (12.35, 12.65)
HISTORY_DAYS = 180
MANUAL_SHARE = 0.2

FOODS = [
    "Chicken kibble",
    "Beef kibble",
    "Raw meat",
    "Boiled chicken",
    "Rice and chicken",
    "Wet salmon food",
    "Grain-free kibble",
    "Mixed vegetables",
    "Lamb and rice",
    "White fish",
    "Turkey",
    "Diet food",
    "Natural treats",
    "Beef chunks",
]
NOTES = [
    "Calm during the walk",
    "Ate well this morning",
    "Very active at the park",
    "A bit nervous",
    "After playing with other dogs",
    "Before the evening meal",
    "Drank a lot of water",
    "Hot day",
    "Recent change of diet",
    "All regular",
    None,
    None,
    None,
]

SAMPLE_PROFILE = DogProfile(
    name="Bobby",
    breed="Labrador Retriever",
    birthdate=date(2020, 5, 15),
    weight_kg=15.5,
    microchip="380260000123456",
)


def generate_sample_entries(
    count: int,
    now: Optional[datetime] = None,
    seed: Optional[int] = None,
) -> List[Entry]:
    """Build ``count`` entries spread over the last six months.

    About one in five is a manual entry without a position.
    """

    rng = random.Random(seed if seed is not None else 42)
    now = now or datetime.now()
    entries = []
    for index in range(max(int(count), 0)):
        position = None
        if rng.random() >= MANUAL_SHARE:
            position = Position(rng.uniform(*LAT_RANGE), rng.uniform(*LNG_RANGE))
        entries.append(
            Entry(
                id=f"sample-{index:05d}",
                timestamp=now - timedelta(seconds=rng.uniform(0, HISTORY_DAYS * 86400)),
                category=rng.choice(list(Category)),
                position=position,
                attributes=EntryAttributes(
                    size=rng.choice(list(Size)),
                    color=rng.choice(list(Color)),
                    smell=rng.choice(list(Smell)),
                    food=rng.choice(FOODS),
                    hours_since_meal=float(rng.randint(1, 12)),
                    notes=rng.choice(NOTES),
                ),
            )
        )
    return entries


def load_sample_data(
    store: EntryStore,
    count: int,
    now: Optional[datetime] = None,
    seed: Optional[int] = None,
) -> int:
    entries = generate_sample_entries(count, now=now, seed=seed)
    store.restore(entries, SAMPLE_PROFILE, saved_notes=[], food_history=[])
    return len(entries)
