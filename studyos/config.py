"""
StudyOS Assistant — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from studyos/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_PERMISSIONS = ("granted", "denied", "default")


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str

    # SQLite key-value storage
    DATABASE_PATH: str = "data/studyos.db"

    # Security
    ALLOWED_USER_IDS: list[int] = []

    # Task reminders
    NOTIFICATION_POLL_SECONDS: int = 30
    WARNING_LEAD_MINUTES: int = 5
    SYSTEM_NOTIFICATIONS: str = "default"   # granted | denied | default
    INBOX_SIZE: int = 50

    # Goal timetable
    STAR_DEBOUNCE_MS: int = 2000

    @field_validator("ALLOWED_USER_IDS", mode="before")
    @classmethod
    def parse_user_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(uid.strip()) for uid in v.split(",") if uid.strip()]
        return []

    @field_validator(
        "NOTIFICATION_POLL_SECONDS", "WARNING_LEAD_MINUTES",
        "STAR_DEBOUNCE_MS", "INBOX_SIZE",
        mode="before",
    )
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        return int(v)

    @field_validator("SYSTEM_NOTIFICATIONS", mode="before")
    @classmethod
    def parse_permission(cls, v: str) -> str:
        value = (v or "default").strip().lower()
        if value not in _PERMISSIONS:
            raise ValueError(f"SYSTEM_NOTIFICATIONS must be one of {_PERMISSIONS}, got {v!r}")
        return value


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/studyos.db"),
        ALLOWED_USER_IDS=os.getenv("ALLOWED_USER_IDS", ""),
        NOTIFICATION_POLL_SECONDS=os.getenv("NOTIFICATION_POLL_SECONDS", "30"),
        WARNING_LEAD_MINUTES=os.getenv("WARNING_LEAD_MINUTES", "5"),
        SYSTEM_NOTIFICATIONS=os.getenv("SYSTEM_NOTIFICATIONS", "default"),
        INBOX_SIZE=os.getenv("INBOX_SIZE", "50"),
        STAR_DEBOUNCE_MS=os.getenv("STAR_DEBOUNCE_MS", "2000"),
    )


# Singleton, imported by all other modules as:
#   from studyos.config import settings
settings = _load_settings()
