"""
StudyOS Assistant — Data Models.

Plain records persisted as JSON in the local key-value store. Field names
are snake_case in Python and camelCase on disk (``notifiedBefore``,
``starClaimed``...), so stored snapshots keep the layout the rest of the
app and older data expect.
"""

from __future__ import annotations

import time
import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Priority = Literal["high", "medium", "low"]
EventType = Literal["academic", "cultural", "sports", "other"]


def new_id() -> str:
    """Creation-time derived id; the suffix keeps ids unique within one millisecond."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


class Record(BaseModel):
    """Base for every persisted record: accepts both python and JSON key names."""

    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class Task(Record):
    """A timed item in the daily scheduler.

    ``notified`` / ``notified_before`` are one-shot guards owned by the
    notification scheduler; nothing resets them.
    """

    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    time: str                      # HH:MM, 24h
    priority: Priority = "medium"
    notified: bool = False
    notified_before: bool = Field(default=False, alias="notifiedBefore")
    completed: bool = False


class CollegeEvent(Record):
    """A dated college event (exam, fest, match...)."""

    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    date: str                      # ISO yyyy-mm-dd
    time: str = ""
    location: str = ""
    type: EventType = "academic"


class ImportantDate(Record):
    """A highlighted calendar day. No time component."""

    id: str = Field(default_factory=new_id)
    date: str
    title: str
    description: str = ""


class UserProfile(Record):
    name: str = ""
    email: str = ""
    birthday: str = ""             # ISO yyyy-mm-dd
    college: str = ""
    course: str = ""
    year: str = ""


class Goal(Record):
    short_term: str = Field(alias="shortTerm")
    long_term: str = Field(alias="longTerm")
    created_at: str = Field(alias="createdAt")


class TimetableTask(Record):
    """An entry of the goal timetable. Separate id space from Task."""

    id: str
    title: str
    time: str                      # display string, e.g. "07:00 AM"
    duration: str                  # display string, e.g. "30 min"
    completed: bool = False
    star_claimed: bool = Field(default=False, alias="starClaimed")
    day: str = "Daily"


class GoalProgress(Record):
    completed_tasks: int = Field(default=0, alias="completedTasks")
    total_tasks: int = Field(default=0, alias="totalTasks")
    stars_earned: int = Field(default=0, alias="starsEarned")
    last_star_time: int | None = Field(default=None, alias="lastStarTime")  # epoch ms
