"""Validation for entries and the dog profile before they reach the store."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Optional

from src.common.geo import InvalidCoordinateError, validate_coordinates
from src.common.models import Category, DogProfile, Position
from src.stats.filters import to_local

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[+]?[(]?[0-9]{1,4}[)]?[-\s.]?[(]?[0-9]{1,4}[)]?[-\s.]?[0-9]{1,9}$")
MICROCHIP_RE = re.compile(r"^\d{15}$")


class EntryValidationError(ValueError):
    """Raised with every problem found in a rejected record."""

    def __init__(self, errors: List[str]) -> None:
        super().__init__(", ".join(errors))
        self.errors = errors


def validate_entry_fields(
    category: Optional[Category],
    timestamp: datetime,
    position: Optional[Position],
    is_manual: Optional[bool] = None,
    hours_since_meal: Optional[float] = None,
    now: Optional[datetime] = None,
) -> None:
    errors: List[str] = []
    if category is None:
        errors.append("Category is required")
    if to_local(timestamp) > to_local(now or datetime.now()):
        errors.append("Timestamp cannot be in the future")
    if hours_since_meal is not None and hours_since_meal <= 0:
        errors.append("Hours since meal must be a positive number")
    if is_manual is not None and is_manual != (position is None):
        errors.append("Manual entries must have no position and positioned entries cannot be manual")
    if position is not None:
        try:
            validate_coordinates(position.latitude, position.longitude)
        except InvalidCoordinateError as exc:
            errors.append(str(exc))
    if errors:
        raise EntryValidationError(errors)


def validate_profile(profile: DogProfile, today: Optional[date] = None) -> None:
    today = today or date.today()
    errors: List[str] = []
    if not profile.name or not profile.name.strip():
        errors.append("Dog name is required")
    if profile.birthdate and profile.birthdate > today:
        errors.append("Birthdate cannot be in the future")
    if profile.weight_kg is not None and profile.weight_kg <= 0:
        errors.append("Weight must be a positive number")
    if profile.vet_email and not EMAIL_RE.match(profile.vet_email):
        errors.append("Invalid vet email")
    if profile.vet_phone and not PHONE_RE.match(profile.vet_phone):
        errors.append("Invalid vet phone")
    if profile.microchip and not MICROCHIP_RE.match(profile.microchip):
        errors.append("Microchip must contain 15 digits")
    if errors:
        raise EntryValidationError(errors)
