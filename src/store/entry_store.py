"""In-memory entry store with mutation notifications."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from src.common.models import Category, DogProfile, Entry, EntryAttributes, Position, normalize_food_label

from .validators import validate_entry_fields, validate_profile

logger = logging.getLogger(__name__)

Listener = Callable[[str, Optional[Entry]], None]


class EntryNotFoundError(KeyError):
    pass


class EntryStore:
    """Owns the canonical ordered entry collection and the dog profile."""

    def __init__(self) -> None:
        self._entries: List[Entry] = []
        self._food_history: List[str] = []
        self._saved_notes: List[str] = []
        self._listeners: List[Listener] = []
        self.profile: Optional[DogProfile] = None

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked as ``listener(action, entry)`` after mutations."""

        self._listeners.append(listener)

    def _notify(self, action: str, entry: Optional[Entry] = None) -> None:
        for listener in self._listeners:
            listener(action, entry)

    def add_entry(
        self,
        category: Category,
        attributes: Optional[EntryAttributes] = None,
        position: Optional[Position] = None,
        timestamp: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> Entry:
        attributes = attributes or EntryAttributes()
        timestamp = timestamp or now or datetime.now()
        validate_entry_fields(
            category,
            timestamp,
            position,
            hours_since_meal=attributes.hours_since_meal,
            now=now,
        )
        entry = Entry(
            id=uuid.uuid4().hex,
            timestamp=timestamp,
            category=Category(category),
            position=position,
            attributes=replace(attributes, food=normalize_food_label(attributes.food)),
        )
        self.insert(entry)
        return entry

    def insert(self, entry: Entry) -> None:
        """Append an already-built entry, e.g. one restored from a backup."""

        if any(existing.id == entry.id for existing in self._entries):
            raise ValueError(f"Duplicate entry id {entry.id}")
        self._entries.append(entry)
        self.remember_food(entry.food)
        logger.debug("Stored entry %s (%s)", entry.id, entry.category.value)
        self._notify("add", entry)

    def remove_entry(self, entry_id: str) -> Entry:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                del self._entries[index]
                logger.debug("Removed entry %s", entry_id)
                self._notify("remove", entry)
                return entry
        raise EntryNotFoundError(entry_id)

    def get_entry(self, entry_id: str) -> Optional[Entry]:
        return next((entry for entry in self._entries if entry.id == entry_id), None)

    def list_entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self._food_history.clear()
        self._saved_notes.clear()
        self.profile = None
        logger.info("Cleared all tracker data")
        self._notify("clear")

    def remember_food(self, food: Optional[str]) -> None:
        if food and food not in self._food_history:
            self._food_history.append(food)

    @property
    def food_history(self) -> Tuple[str, ...]:
        return tuple(self._food_history)

    def save_note(self, note: str) -> bool:
        if not note or not note.strip():
            return False
        if note not in self._saved_notes:
            self._saved_notes.append(note)
        return True

    def remove_note(self, note: str) -> bool:
        if note in self._saved_notes:
            self._saved_notes.remove(note)
            return True
        return False

    @property
    def saved_notes(self) -> Tuple[str, ...]:
        return tuple(self._saved_notes)

    def save_profile(self, profile: DogProfile) -> None:
        validate_profile(profile)
        self.profile = profile

    def restore(
        self,
        entries: List[Entry],
        profile: Optional[DogProfile],
        saved_notes: List[str],
        food_history: List[str],
    ) -> None:
        """Replace the whole collection in one step."""

        self._entries = list(entries)
        self.profile = profile
        self._saved_notes = list(saved_notes)
        self._food_history = []
        for food in list(food_history) + [entry.food for entry in entries]:
            self.remember_food(food)
        logger.info("Restored %d entries", len(self._entries))
        self._notify("restore")

