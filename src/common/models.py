"""Dataclasses shared between the store, the engines and the report layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple

MAX_FOOD_LABEL_LENGTH = 80


class Category(str, Enum):
    """Outcome class of a logged entry."""

    HEALTHY = "healthy"
    SOFT = "soft"
    DIARRHEA = "diarrhea"
    HARD = "hard"
    BLOOD = "blood"
    MUCUS = "mucus"

    @property
    def is_problem(self) -> bool:
        return self is not Category.HEALTHY


NORMAL_CATEGORY = Category.HEALTHY
PROBLEM_CATEGORIES = frozenset(cat for cat in Category if cat.is_problem)


class Size(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Color(str, Enum):
    NORMAL = "normal"
    LIGHT = "light"
    DARK = "dark"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class Smell(str, Enum):
    NORMAL = "normal"
    STRONG = "strong"
    UNUSUAL = "unusual"


def normalize_food_label(value: Optional[str]) -> Optional[str]:
    """Trim a free-text food label; blank labels collapse to ``None``."""

    if value is None:
        return None
    label = str(value).strip()
    if not label:
        return None
    if len(label) > MAX_FOOD_LABEL_LENGTH:
        raise ValueError(
            f"Food label must be at most {MAX_FOOD_LABEL_LENGTH} characters, got {len(label)}."
        )
    return label


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class EntryAttributes:
    """Secondary descriptive fields, all optional."""

    size: Optional[Size] = None
    color: Optional[Color] = None
    smell: Optional[Smell] = None
    food: Optional[str] = None
    hours_since_meal: Optional[float] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Entry:
    """A single logged observation."""

    id: str
    timestamp: datetime
    category: Category
    position: Optional[Position] = None
    attributes: EntryAttributes = field(default_factory=EntryAttributes)

    @property
    def is_manual(self) -> bool:
        """Manual entries carry no position and never reach the grid."""

        return self.position is None

    @property
    def food(self) -> Optional[str]:
        """The trimmed food label, or ``None`` when blank."""

        label = (self.attributes.food or "").strip()
        return label or None

    @property
    def is_problem(self) -> bool:
        return self.category.is_problem


@dataclass(frozen=True, order=True)
class CellId:
    """Integer grid indices produced by the grid geometry."""

    lat_index: int
    lng_index: int

    @property
    def key(self) -> str:
        return f"{self.lat_index}_{self.lng_index}"

    @classmethod
    def parse(cls, key: str) -> "CellId":
        try:
            lat_part, lng_part = key.split("_")
            return cls(int(lat_part), int(lng_part))
        except ValueError as exc:
            raise ValueError(f"Malformed cell id: {key!r}") from exc


@dataclass(frozen=True)
class CellBounds:
    north: float
    south: float
    east: float
    west: float

    def contains(self, latitude: float, longitude: float) -> bool:
        """Half-open containment matching the floor-based indexing."""

        return self.south <= latitude < self.north and self.west <= longitude < self.east


@dataclass(frozen=True)
class GridCell:
    """Snapshot of a grid cell derived from the current entry collection."""

    cell_id: CellId
    count: int
    completed: bool
    entry_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Badge:
    key: str
    name: str
    threshold: int
    points: int


DEFAULT_BADGES: Tuple[Badge, ...] = (
    Badge(key="explorer", name="Urban Explorer", threshold=5, points=500),
    Badge(key="adventurer", name="Adventurer", threshold=10, points=1000),
    Badge(key="conqueror", name="City Conqueror", threshold=20, points=2000),
    Badge(key="nomad", name="Nomad", threshold=50, points=5000),
)


@dataclass(frozen=True)
class Achievement:
    """Progress event reported after a completed-cell count changes."""

    kind: str  # badge | cell
    name: str
    points: int
    badge: Optional[Badge] = None


@dataclass(frozen=True)
class Placement:
    """Outcome of a free-slot search for a new marker."""

    position: Position
    collision_avoided: bool
    attempts: int


class Period(str, Enum):
    ALL = "all"
    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK = "week"
    MONTH = "month"


ALL = "all"


@dataclass(frozen=True)
class FilterSpec:
    """Time window, category and food selectors; each may be ``"all"``."""

    period: Period = Period.ALL
    category: Optional[Category] = None
    food: Optional[str] = None

    @classmethod
    def parse(
        cls,
        period: str = ALL,
        category: str = ALL,
        food: str = ALL,
    ) -> "FilterSpec":
        return cls(
            period=Period(period or ALL),
            category=None if not category or category == ALL else Category(category),
            food=None if not food or food == ALL else normalize_food_label(food),
        )

    @property
    def is_identity(self) -> bool:
        return self.period is Period.ALL and self.category is None and self.food is None


@dataclass(frozen=True)
class DogProfile:
    name: str
    breed: Optional[str] = None
    birthdate: Optional[date] = None
    weight_kg: Optional[float] = None
    microchip: Optional[str] = None
    vet_name: Optional[str] = None
    vet_phone: Optional[str] = None
    vet_email: Optional[str] = None
    next_vaccination: Optional[date] = None
    next_antiparasitic: Optional[date] = None
    next_flea_tick: Optional[date] = None
