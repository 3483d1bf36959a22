"""
StudyOS Assistant — Task reminder scheduler.

Each task gets at most two reminders: a "starting soon" warning five
minutes ahead and a "time to start" alert on the minute. Matching is exact
``HH:MM`` string equality on a fixed poll, so a poll that misses the minute
(process suspended, clock jump) skips that reminder for good. The one-shot
flags on the task are what make a reminder fire only once.

Every reminder goes to the in-app inbox; it is also pushed through the
NotificationPort when system notifications are granted.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Callable

from studyos.config import settings

if TYPE_CHECKING:
    from telegram.ext import CallbackContext, Job, JobQueue

    from studyos.data.models import Task
    from studyos.data.stores import TaskStore
    from studyos.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)


class NotificationPermission(Enum):
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"


@dataclass
class Notification:
    title: str
    body: str
    task_id: str
    created_at: datetime = field(default_factory=datetime.now)


def _hhmm(moment: datetime) -> str:
    return f"{moment.hour:02d}:{moment.minute:02d}"


# ---------------------------------------------------------------------------
# Pure transition function
# ---------------------------------------------------------------------------


def check_notifications(
    tasks: list[Task],
    now: datetime,
    lead_minutes: int = 5,
) -> tuple[list[Task], list[Notification]]:
    """Apply one poll to ``tasks``.

    Returns the (possibly) updated task list and the notifications to emit.
    Input tasks are not mutated. Completed tasks are skipped entirely.
    """
    current_time = _hhmm(now)
    warning_time = _hhmm(now + timedelta(minutes=lead_minutes))

    updated: list[Task] = []
    notifications: list[Notification] = []
    for task in tasks:
        if task.completed:
            updated.append(task)
            continue

        task = task.model_copy()
        if task.time == warning_time and not task.notified_before:
            notifications.append(Notification(
                title=f"⏰ Starting Soon: {task.title}",
                body=f'Your task "{task.title}" will start in {lead_minutes} minutes!',
                task_id=task.id,
                created_at=now,
            ))
            task.notified_before = True

        if task.time == current_time and not task.notified:
            notifications.append(Notification(
                title=f"🔔 Time to Start: {task.title}",
                body=f"It's time for: {task.description or task.title}",
                task_id=task.id,
                created_at=now,
            ))
            task.notified = True

        updated.append(task)

    return updated, notifications


# ---------------------------------------------------------------------------
# Dispatch: in-app inbox + permission-gated system push
# ---------------------------------------------------------------------------


class NotificationDispatcher:
    """Fans a notification out to the in-app inbox and, if allowed, the push port."""

    def __init__(
        self,
        port: NotificationPort | None = None,
        recipients: list[int] | None = None,
        inbox_size: int | None = None,
    ) -> None:
        self._port = port
        self._recipients = list(settings.ALLOWED_USER_IDS if recipients is None else recipients)
        self.inbox: deque[Notification] = deque(maxlen=inbox_size or settings.INBOX_SIZE)
        self.permission = NotificationPermission.DEFAULT

    def request_permission(self) -> NotificationPermission:
        """Resolve the system-notification permission once, at startup."""
        self.permission = NotificationPermission(settings.SYSTEM_NOTIFICATIONS)
        if self.permission is NotificationPermission.GRANTED:
            logger.info("System notifications enabled")
        else:
            logger.info("System notifications %s, in-app alerts only", self.permission.value)
        return self.permission

    def set_permission(self, permission: NotificationPermission) -> None:
        self.permission = permission
        logger.info("System notification permission set to %s", permission.value)

    async def dispatch(self, notification: Notification) -> None:
        self.inbox.append(notification)
        logger.info("Reminder: %s", notification.title)

        if self.permission is not NotificationPermission.GRANTED or self._port is None:
            return
        for chat_id in self._recipients:
            try:
                await self._port.push(chat_id, notification.title, notification.body)
            except Exception as exc:
                logger.warning("System notification to %d failed: %s", chat_id, exc)

    def drain_inbox(self) -> list[Notification]:
        items = list(self.inbox)
        self.inbox.clear()
        return items


# ---------------------------------------------------------------------------
# Store-backed scheduler and its polling job
# ---------------------------------------------------------------------------


class NotificationScheduler:
    """Runs one poll against the logged-in user's task store."""

    def __init__(
        self,
        tasks: TaskStore,
        dispatcher: NotificationDispatcher,
        clock: Callable[[], datetime] = datetime.now,
        lead_minutes: int | None = None,
    ) -> None:
        self._tasks = tasks
        self._dispatcher = dispatcher
        self._clock = clock
        self._lead = settings.WARNING_LEAD_MINUTES if lead_minutes is None else lead_minutes

    async def check(self) -> list[Notification]:
        tasks = self._tasks.load_all()
        updated, notifications = check_notifications(tasks, self._clock(), self._lead)
        if not notifications:
            return []

        self._tasks.save_all(updated)
        for notification in notifications:
            await self._dispatcher.dispatch(notification)
        return notifications


class ReminderPoller:
    """Owns the recurring reminder job on a python-telegram-bot JobQueue.

    The job runs once immediately and then every interval. Use as
    ``with ReminderPoller(...)`` or call start()/stop(); the job is removed
    on every exit path.
    """

    def __init__(
        self,
        scheduler: NotificationScheduler,
        job_queue: JobQueue,
        interval: float | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._job_queue = job_queue
        self._interval = settings.NOTIFICATION_POLL_SECONDS if interval is None else interval
        self._job: Job | None = None

    @property
    def running(self) -> bool:
        return self._job is not None

    def start(self) -> None:
        if self.running:
            return
        self._job = self._job_queue.run_repeating(
            self._tick,
            interval=self._interval,
            first=0,
            name="task_reminders",
        )
        logger.info("Reminder poller started (every %ss)", self._interval)

    def stop(self) -> None:
        job, self._job = self._job, None
        if job is None:
            return
        job.schedule_removal()
        logger.info("Reminder poller stopped")

    def __enter__(self) -> ReminderPoller:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    async def _tick(self, context: CallbackContext) -> None:
        try:
            await self._scheduler.check()
        except Exception as exc:
            logger.error("Reminder check failed: %s", exc)
