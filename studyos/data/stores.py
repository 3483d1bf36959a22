"""
StudyOS Assistant — Entity stores.

Each store keeps one whole-collection JSON snapshot under a namespaced key.
Every mutation is load -> mutate -> save; there are no partial updates and
no locking, which is fine for a single active UI context.

The namespace is resolved on every call, so logging in as someone else
immediately switches which records are visible.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

from pydantic import BaseModel, TypeAdapter, ValidationError

from studyos.core.errors import InvalidInputError
from studyos.data.db import LocalStorage
from studyos.data.models import (
    CollegeEvent,
    Goal,
    GoalProgress,
    ImportantDate,
    Task,
    TimetableTask,
    UserProfile,
)

logger = logging.getLogger(__name__)

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


# ---------------------------------------------------------------------------
# Generic collection / singleton stores
# ---------------------------------------------------------------------------


class CollectionStore:
    """A list of records stored as one JSON array."""

    key: str = ""
    model: type[BaseModel] = BaseModel

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage
        self._adapter = TypeAdapter(list[self.model])

    def _key(self) -> str:
        return self._storage.user_key(self.key)

    def load_all(self) -> list:
        """Return every stored record; absent or malformed data reads as empty."""
        key = self._key()
        raw = self._storage.get_item(key)
        if raw is None:
            return []
        try:
            return self._adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning("Malformed data under '%s', treating as empty: %s", key, exc.errors()[:1])
            return []

    def save_all(self, items: list) -> None:
        """Overwrite the whole collection."""
        payload = json.dumps([item.to_json_dict() for item in items])
        self._storage.set_item(self._key(), payload)

    def add(self, item):
        items = self.load_all()
        items.append(item)
        self.save_all(items)
        logger.info("Added %s '%s' to %s", type(item).__name__, item.id, self._key())
        return item

    def get(self, item_id: str):
        for item in self.load_all():
            if item.id == item_id:
                return item
        return None

    def update(self, item) -> bool:
        """Replace the stored record with the same id. Returns False if absent."""
        items = self.load_all()
        for i, existing in enumerate(items):
            if existing.id == item.id:
                items[i] = item
                self.save_all(items)
                return True
        return False

    def remove(self, item_id: str) -> bool:
        items = self.load_all()
        kept = [item for item in items if item.id != item_id]
        if len(kept) == len(items):
            return False
        self.save_all(kept)
        logger.info("Removed '%s' from %s", item_id, self._key())
        return True

    def clear(self) -> None:
        self.save_all([])
        logger.info("Cleared %s", self._key())


class RecordStore:
    """A single record stored as one JSON object."""

    key: str = ""
    model: type[BaseModel] = BaseModel

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    def _key(self) -> str:
        return self._storage.user_key(self.key)

    def load(self):
        key = self._key()
        raw = self._storage.get_item(key)
        if raw is None:
            return None
        try:
            return self.model.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Malformed data under '%s', treating as absent: %s", key, exc.errors()[:1])
            return None

    def save(self, record) -> None:
        self._storage.set_item(self._key(), json.dumps(record.to_json_dict()))

    def clear(self) -> None:
        self._storage.remove_item(self._key())


# ---------------------------------------------------------------------------
# Concrete stores
# ---------------------------------------------------------------------------


class TaskStore(CollectionStore):
    key = "tasks"
    model = Task

    def add_task(
        self,
        title: str,
        time: str,
        priority: str = "medium",
        description: str = "",
    ) -> Task:
        """Create a task from manual entry. Title and time are required."""
        title = (title or "").strip()
        time = (time or "").strip()
        if not title or not time:
            raise InvalidInputError("Please fill in title and time")
        try:
            datetime.strptime(time, "%H:%M")
        except ValueError:
            raise InvalidInputError(f"Time must be HH:MM (24h), got '{time}'") from None
        if priority not in _PRIORITY_ORDER:
            raise InvalidInputError(f"Priority must be high, medium or low, got '{priority}'")
        return self.add(Task(title=title, time=time, priority=priority, description=description))

    def set_completed(self, task_id: str, completed: bool = True) -> Task | None:
        tasks = self.load_all()
        for task in tasks:
            if task.id == task_id:
                task.completed = completed
                self.save_all(tasks)
                logger.info("Task '%s' completed=%s", task.title, completed)
                return task
        return None

    def toggle_completed(self, task_id: str) -> Task | None:
        task = self.get(task_id)
        if task is None:
            return None
        return self.set_completed(task_id, not task.completed)

    def find_by_title_in(self, text: str) -> Task | None:
        """First task (store order) whose title occurs in ``text``, case-insensitively."""
        lowered = text.lower()
        for task in self.load_all():
            if task.title and task.title.lower() in lowered:
                return task
        return None

    def sorted_tasks(self) -> list[Task]:
        """Scheduler order: priority high -> low, then by time."""
        return sorted(
            self.load_all(),
            key=lambda t: (_PRIORITY_ORDER.get(t.priority, 3), t.time),
        )


class EventStore(CollectionStore):
    key = "collegeEvents"
    model = CollegeEvent

    def add_event(
        self,
        title: str,
        date: str,
        time: str,
        description: str = "",
        location: str = "",
        type: str = "academic",
    ) -> CollegeEvent:
        """Create an event from manual entry. Title, date and time are required."""
        if not (title or "").strip() or not date or not time:
            raise InvalidInputError("Please fill in required fields")
        try:
            event = CollegeEvent(
                title=title.strip(), date=date, time=time,
                description=description, location=location, type=type,
            )
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid event: {exc.errors()[0]['msg']}") from None
        return self.add(event)

    def sorted_events(self) -> list[CollegeEvent]:
        return sorted(self.load_all(), key=lambda e: (e.date, e.time))


class ImportantDateStore(CollectionStore):
    key = "importantDates"
    model = ImportantDate

    def on_date(self, iso_date: str) -> list[ImportantDate]:
        return [d for d in self.load_all() if d.date == iso_date]


class TimetableStore(CollectionStore):
    key = "goalTimetable"
    model = TimetableTask


class ProfileStore(RecordStore):
    key = "userProfile"
    model = UserProfile


class GoalStore(RecordStore):
    key = "goals"
    model = Goal


class ProgressStore(RecordStore):
    key = "goalProgress"
    model = GoalProgress

    def load(self) -> GoalProgress:
        return super().load() or GoalProgress()
