"""Shared test fixtures and configuration.

Sets up fake environment variables so studyos.config doesn't sys.exit(),
and provides temp-path storage fixtures.
"""

import os

# Patch env vars BEFORE any studyos imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("ALLOWED_USER_IDS", "12345")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("SYSTEM_NOTIFICATIONS", "default")

from datetime import datetime

import pytest


@pytest.fixture
def storage(tmp_path):
    """Return a LocalStorage backed by a temp file."""
    from studyos.data.db import LocalStorage
    return LocalStorage(db_path=str(tmp_path / "test_studyos.db"))


@pytest.fixture
def task_store(storage):
    from studyos.data.stores import TaskStore
    return TaskStore(storage)


@pytest.fixture
def event_store(storage):
    from studyos.data.stores import EventStore
    return EventStore(storage)


@pytest.fixture
def date_store(storage):
    from studyos.data.stores import ImportantDateStore
    return ImportantDateStore(storage)


@pytest.fixture
def fixed_now():
    """Monday 2026-10-19, 10:00 local."""
    return datetime(2026, 10, 19, 10, 0)


@pytest.fixture
def interpreter(task_store, event_store, date_store, fixed_now):
    from studyos.core.interpreter import CommandInterpreter
    return CommandInterpreter(task_store, event_store, date_store, clock=lambda: fixed_now)
