"""JSON backup and restore of the entry collection and dog profile."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional

from src.common.models import (
    Category,
    Color,
    DogProfile,
    Entry,
    EntryAttributes,
    Position,
    Size,
    Smell,
    normalize_food_label,
)

from .entry_store import EntryStore
from .validators import validate_entry_fields

logger = logging.getLogger(__name__)

BACKUP_VERSION = "2.0.0"

PROFILE_FIELDS = {
    "name": "name",
    "dogBreed": "breed",
    "dogBirthdate": "birthdate",
    "dogWeight": "weight_kg",
    "dogMicrochip": "microchip",
    "vetName": "vet_name",
    "vetPhone": "vet_phone",
    "vetEmail": "vet_email",
    "nextVaccination": "next_vaccination",
    "nextAntiparasitic": "next_antiparasitic",
    "nextFleaTick": "next_flea_tick",
}
DATE_FIELDS = {"birthdate", "next_vaccination", "next_antiparasitic", "next_flea_tick"}


class BackupFormatError(ValueError):
    """The document is not valid JSON or lacks the expected structure."""


def export_backup(store: EntryStore, now: Optional[datetime] = None) -> str:
    document = {
        "version": BACKUP_VERSION,
        "timestamp": (now or datetime.now()).isoformat(),
        "entries": [entry_to_record(entry) for entry in store.list_entries()],
        "dogProfile": profile_to_record(store.profile),
        "savedNotes": list(store.saved_notes),
        "foodHistory": list(store.food_history),
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def import_backup(store: EntryStore, text: str, now: Optional[datetime] = None) -> int:
    """Validate a backup document and replace the store contents with it."""

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BackupFormatError("Invalid backup file format") from exc
    if not isinstance(data, dict) or "version" not in data:
        raise BackupFormatError("Invalid backup data structure")
    records = data.get("entries", data.get("poops"))
    if not isinstance(records, list) or not isinstance(data.get("dogProfile", {}), dict):
        raise BackupFormatError("Invalid backup data structure")

    entries = [entry_from_record(record, now=now) for record in records]
    if len({entry.id for entry in entries}) != len(entries):
        raise BackupFormatError("Backup contains duplicate entry ids")
    store.restore(
        entries,
        profile_from_record(data.get("dogProfile") or {}),
        saved_notes=[str(note) for note in data.get("savedNotes") or []],
        food_history=[str(food) for food in data.get("foodHistory") or []],
    )
    logger.info("Imported backup version %s with %d entries", data["version"], len(entries))
    return len(entries)


def read_backup_file(store: EntryStore, path: str | Path, now: Optional[datetime] = None) -> int:
    with open(path, "r", encoding="utf-8") as handle:
        return import_backup(store, handle.read(), now=now)


def write_backup_file(store: EntryStore, path: str | Path, now: Optional[datetime] = None) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(export_backup(store, now=now), encoding="utf-8")
    return target


def entry_to_record(entry: Entry) -> Dict[str, Any]:
    attributes = entry.attributes
    return {
        "id": entry.id,
        "timestamp": entry.timestamp.isoformat(),
        "type": entry.category.value,
        "lat": entry.position.latitude if entry.position else None,
        "lng": entry.position.longitude if entry.position else None,
        "isManual": entry.is_manual,
        "size": attributes.size.value if attributes.size else None,
        "color": attributes.color.value if attributes.color else None,
        "smell": attributes.smell.value if attributes.smell else None,
        "food": attributes.food,
        "hoursSinceMeal": attributes.hours_since_meal,
        "notes": attributes.notes,
    }


def entry_from_record(record: Any, now: Optional[datetime] = None) -> Entry:
    if not isinstance(record, dict) or not record.get("id"):
        raise BackupFormatError(f"Entry record without id: {record!r}")
    try:
        category = Category(record.get("type"))
    except ValueError as exc:
        raise BackupFormatError(f"Unknown category in entry {record['id']}") from exc

    position = None
    if record.get("lat") is not None and record.get("lng") is not None:
        position = Position(float(record["lat"]), float(record["lng"]))
    is_manual = record.get("isManual")
    if is_manual is None:
        is_manual = position is None
    hours = record.get("hoursSinceMeal")
    timestamp = parse_timestamp(record.get("timestamp"))

    validate_entry_fields(
        category,
        timestamp,
        position,
        is_manual=bool(is_manual),
        hours_since_meal=float(hours) if hours not in (None, "") else None,
        now=now,
    )
    return Entry(
        id=str(record["id"]),
        timestamp=timestamp,
        category=category,
        position=position,
        attributes=EntryAttributes(
            size=_optional_enum(Size, record.get("size")),
            color=_optional_enum(Color, record.get("color")),
            smell=_optional_enum(Smell, record.get("smell")),
            food=normalize_food_label(record.get("food")),
            hours_since_meal=float(hours) if hours not in (None, "") else None,
            notes=record.get("notes") or None,
        ),
    )


def profile_to_record(profile: Optional[DogProfile]) -> Dict[str, Any]:
    if profile is None:
        return {}
    values = asdict(profile)
    record = {}
    for key, attr in PROFILE_FIELDS.items():
        value = values[attr]
        if value is None:
            continue
        record[key] = value.isoformat() if isinstance(value, date) else value
    return record


def profile_from_record(record: Dict[str, Any]) -> Optional[DogProfile]:
    if not record.get("name"):
        return None
    values: Dict[str, Any] = {}
    for key, attr in PROFILE_FIELDS.items():
        value = record.get(key)
        if value in (None, ""):
            continue
        if attr in DATE_FIELDS:
            value = date.fromisoformat(str(value)[:10])
        elif attr == "weight_kg":
            value = float(value)
        else:
            value = str(value)
        values[attr] = value
    return DogProfile(**values)


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse ISO timestamps, including the trailing ``Z`` written by browsers."""

    if not value:
        raise BackupFormatError("Entry record without timestamp")
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise BackupFormatError(f"Unreadable timestamp {value!r}") from exc


def _optional_enum(enum_type, value):
    if value in (None, ""):
        return None
    try:
        return enum_type(value)
    except ValueError:
        logger.warning("Ignoring unknown %s value %r", enum_type.__name__, value)
        return None
