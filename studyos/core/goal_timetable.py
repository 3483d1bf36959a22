"""
StudyOS Assistant — Goal timetable and star rewards.

Setting goals produces a fixed daily timetable. Ticking an entry off makes
it eligible for one star. Stars survive timetable regeneration; completion
counts do not.
"""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime
from typing import Callable

from studyos.config import settings
from studyos.core.errors import InvalidInputError, NotFoundError
from studyos.data.db import LocalStorage
from studyos.data.models import Goal, GoalProgress, TimetableTask
from studyos.data.stores import GoalStore, ProgressStore, TimetableStore

logger = logging.getLogger(__name__)

# (title, time, duration)
TEMPLATE = (
    ("Morning Review Session", "07:00 AM", "30 min"),
    ("Focus Study Block 1 - Core Subjects", "08:00 AM", "90 min"),
    ("Short Break & Refresh", "09:30 AM", "15 min"),
    ("Focus Study Block 2 - Practice", "10:00 AM", "90 min"),
    ("Active Learning Activity", "11:30 AM", "30 min"),
    ("Lunch & Rest", "12:30 PM", "60 min"),
    ("Light Study Session", "02:00 PM", "60 min"),
    ("Problem-Solving Practice", "03:30 PM", "90 min"),
    ("Revision Session", "05:30 PM", "60 min"),
    ("Evening Break", "06:30 PM", "30 min"),
    ("Goal Progress Review", "08:00 PM", "30 min"),
    ("Light Reading/Revision", "09:00 PM", "45 min"),
)


def generate_timetable() -> list[TimetableTask]:
    """A fresh copy of the daily template; ids are "1".."12"."""
    return [
        TimetableTask(id=str(index), title=title, time=at, duration=duration)
        for index, (title, at, duration) in enumerate(TEMPLATE, start=1)
    ]


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class GoalTracker:
    """Goals, the generated timetable and the star counter for one identity."""

    def __init__(
        self,
        storage: LocalStorage,
        clock: Callable[[], int] = _epoch_ms,
    ) -> None:
        self._goals = GoalStore(storage)
        self._timetable = TimetableStore(storage)
        self._progress = ProgressStore(storage)
        self._clock = clock

    # -- reads ----------------------------------------------------------------

    def goal(self) -> Goal | None:
        return self._goals.load()

    def timetable(self) -> list[TimetableTask]:
        return self._timetable.load_all()

    def progress(self) -> GoalProgress:
        return self._progress.load()

    # -- goals & generation ---------------------------------------------------

    def save_goal(self, short_term: str, long_term: str) -> Goal:
        short_term, long_term = (short_term or "").strip(), (long_term or "").strip()
        if not short_term or not long_term:
            raise InvalidInputError("Please fill in both short-term and long-term goals")
        goal = Goal(
            short_term=short_term,
            long_term=long_term,
            created_at=datetime.now().isoformat(),
        )
        self._goals.save(goal)
        logger.info("Goals saved")
        self.generate()
        return goal

    def generate(self) -> list[TimetableTask]:
        """Replace the timetable with the template. Stars are kept."""
        if self._goals.load() is None:
            raise InvalidInputError("Please set your short-term and long-term goals first")
        entries = generate_timetable()
        self._timetable.save_all(entries)

        progress = self._progress.load()
        progress.completed_tasks = 0
        progress.total_tasks = len(entries)
        self._progress.save(progress)
        logger.info("Goal timetable generated with %d entries", len(entries))
        return entries

    # -- completion & stars ---------------------------------------------------

    def toggle_complete(self, task_id: str) -> TimetableTask:
        entries = self._timetable.load_all()
        target = next((e for e in entries if e.id == task_id), None)
        if target is None:
            raise NotFoundError(f"No timetable entry with id {task_id}")
        target.completed = not target.completed
        self._timetable.save_all(entries)

        progress = self._progress.load()
        progress.completed_tasks = sum(1 for e in entries if e.completed)
        self._progress.save(progress)
        return target

    def claim_star(self, task_id: str) -> bool:
        """One star per completed entry. Returns False when nothing was awarded."""
        entries = self._timetable.load_all()
        target = next((e for e in entries if e.id == task_id), None)
        if target is None or not target.completed or target.star_claimed:
            return False
        target.star_claimed = True
        self._timetable.save_all(entries)

        progress = self._progress.load()
        progress.stars_earned += 1
        progress.last_star_time = self._clock()
        self._progress.save(progress)
        logger.info("Star claimed for '%s' (total %d)", target.title, progress.stars_earned)
        return True

    def trigger_reward(self, now_ms: int | None = None) -> bool:
        """Bonus star, rate-limited to one per debounce window."""
        now_ms = self._clock() if now_ms is None else now_ms
        progress = self._progress.load()
        last = progress.last_star_time
        if last is not None and now_ms - last <= settings.STAR_DEBOUNCE_MS:
            return False
        progress.stars_earned += 1
        progress.last_star_time = now_ms
        self._progress.save(progress)
        return True

    # -- messages -------------------------------------------------------------

    def progress_percentage(self) -> int:
        progress = self._progress.load()
        if progress.total_tasks <= 0:
            return 0
        return math.floor(progress.completed_tasks * 100 / progress.total_tasks + 0.5)

    def motivational_message(self) -> str:
        pct = self.progress_percentage()
        if pct == 100:
            return "🏆 Amazing! You've completed all tasks!"
        if pct >= 75:
            return "🔥 Outstanding progress! Keep going!"
        if pct >= 50:
            return "💪 Halfway there! You're doing great!"
        if pct >= 25:
            return "🌟 Great start! Keep up the momentum!"
        return "🚀 Let's begin your journey to success!"

    def star_milestone_message(self) -> str:
        stars = self._progress.load().stars_earned
        if stars >= 50:
            return "🌟 Superstar! You're unstoppable!"
        if stars >= 30:
            return "⭐ Amazing dedication! Keep shining!"
        if stars >= 20:
            return "✨ Incredible progress! You're on fire!"
        if stars >= 10:
            return "🌠 Great momentum! Keep collecting stars!"
        if stars >= 5:
            return "💫 Nice work! Stars are adding up!"
        if stars >= 1:
            return "⭐ Your journey begins! Keep going!"
        return "🎯 Complete tasks to earn your first star!"
