"""
StudyOS Assistant — Profile and birthday wishes.

The birthday greeting fires at most once per calendar day. The "last wish"
stamp is stored per identity, so two users with the same birthday each get
their greeting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from studyos.core.errors import InvalidInputError
from studyos.data.db import LocalStorage
from studyos.data.models import UserProfile
from studyos.data.stores import ProfileStore

logger = logging.getLogger(__name__)

LAST_WISH_KEY = "lastBirthdayWish"


@dataclass
class BirthdayStatus:
    is_birthday: bool
    days_until: int | None    # None on the birthday itself


def _parse_birthday(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _birthday_in_year(birthday: date, year: int) -> date:
    # Feb 29 birthdays fall on Feb 28 in common years.
    try:
        return birthday.replace(year=year)
    except ValueError:
        return birthday.replace(year=year, day=28)


def birthday_status(profile: UserProfile, today: date) -> BirthdayStatus | None:
    """Whether today is the birthday, otherwise days until the next one."""
    birthday = _parse_birthday(profile.birthday)
    if birthday is None:
        return None
    this_year = _birthday_in_year(birthday, today.year)
    if this_year == today:
        return BirthdayStatus(is_birthday=True, days_until=None)
    if this_year < today:
        this_year = _birthday_in_year(birthday, today.year + 1)
    return BirthdayStatus(is_birthday=False, days_until=(this_year - today).days)


def age(profile: UserProfile, today: date) -> int | None:
    birthday = _parse_birthday(profile.birthday)
    if birthday is None:
        return None
    years = today.year - birthday.year
    if (today.month, today.day) < (birthday.month, birthday.day):
        years -= 1
    return years


class ProfileService:
    """Profile persistence plus the once-a-day birthday greeting."""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage
        self._profiles = ProfileStore(storage)

    def load(self) -> UserProfile:
        """Stored profile, or a blank one pre-filled with the session email."""
        profile = self._profiles.load()
        if profile is not None:
            return profile
        return UserProfile(email=self._storage.current_identity() or "")

    def save(self, profile: UserProfile) -> UserProfile:
        if not profile.name.strip() or not profile.birthday:
            raise InvalidInputError("Please fill in at least your name and birthday")
        if _parse_birthday(profile.birthday) is None:
            raise InvalidInputError("Birthday must be a date in YYYY-MM-DD format")
        self._profiles.save(profile)
        logger.info("Profile saved for %s", profile.name)
        return profile

    def birthday_wish(self, today: date | None = None) -> str | None:
        """Return the greeting if it's the user's birthday and not yet wished today."""
        today = today or date.today()
        profile = self._profiles.load()
        if profile is None:
            return None
        status = birthday_status(profile, today)
        if status is None or not status.is_birthday:
            return None

        stamp_key = self._storage.user_key(LAST_WISH_KEY)
        if self._storage.get_item(stamp_key) == today.isoformat():
            return None
        self._storage.set_item(stamp_key, today.isoformat())
        logger.info("Birthday wish issued for %s", profile.name)

        name = f", {profile.name}" if profile.name else ""
        return (
            f"🎉 Happy Birthday{name}! 🎂\n"
            "Wishing you an amazing year ahead filled with success and happiness!"
        )
