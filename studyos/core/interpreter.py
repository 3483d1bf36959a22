"""
StudyOS Assistant — Chat command interpreter.

Rule-based, no AI: a message is lower-cased and tested against an ordered
list of (intent, predicate) rules, and the first rule that matches wins.
The order is part of the behaviour. "add" shows up in several trigger sets,
so moving a rule changes what ambiguous messages do.

Failures (no date, unknown task...) are replies asking for more detail.
They never raise, and they never touch storage.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable

from studyos.core.extractors import (
    EXAM_SUBJECTS,
    detect_subjects,
    extract_date,
    extract_time,
    extract_title,
    format_long_date,
)
from studyos.core.study_planner import (
    StudyPlan,
    build_custom_routine,
    build_default_routine,
    build_exam_plan,
)
from studyos.data.models import CollegeEvent, ImportantDate, Task
from studyos.data.stores import EventStore, ImportantDateStore, TaskStore

logger = logging.getLogger(__name__)

NAVIGATE_DELAY_SECONDS = 1.0


class Intent(Enum):
    DELETE = "delete"
    COMPLETE = "complete"
    NAVIGATE = "navigate"
    MARK_DATE = "mark_date"
    ADD_EVENT = "add_event"
    ADD_TASK = "add_task"
    ROUTINE = "routine"
    EXAM_PREP = "exam_prep"
    STUDY_TIPS = "study_tips"
    MOTIVATION = "motivation"
    EXAM_ADVICE = "exam_advice"
    HELP = "help"


@dataclass
class CommandResult:
    text: str
    action: str | None = None
    navigate_to: str | None = None
    navigate_delay: float = 0.0
    intent: Intent = Intent.HELP


def _has_any(lowered: str, words: tuple[str, ...]) -> bool:
    return any(word in lowered for word in words)


# ---------------------------------------------------------------------------
# Keyword sets
# ---------------------------------------------------------------------------

_DELETE_VERBS = ("delete", "remove", "cancel", "clear")
_DELETE_TARGETS = ("task", "schedule", "event", "date")
_COMPLETE_VERBS = ("complete", "done", "finish", "mark as complete")
_NAVIGATE_VERBS = ("show", "open", "view", "go to")
_MARK_VERBS = ("mark", "make", "set", "add")
_MARK_NOUNS = (
    "important", "special", "date", "day", "birthday", "anniversary", "holiday", "celebration",
)
_EVENT_WORDS = (
    "event", "exam", "test", "meeting", "class", "lecture", "seminar", "workshop",
    "conference", "fest", "tournament", "competition",
)
_CULTURAL_WORDS = ("cultural", "fest", "celebration", "function", "festival", "party")
_SPORTS_WORDS = ("sport", "game", "match", "tournament", "competition")
_ACADEMIC_WORDS = ("exam", "test", "class", "lecture", "seminar", "workshop")
_TASK_VERBS = (
    "add", "schedule", "remind", "set", "create", "plan",
    "need to", "have to", "want to", "going to",
)
_HIGH_PRIORITY_WORDS = ("important", "urgent", "critical", "asap", "priority", "must")
_LOW_PRIORITY_WORDS = ("low priority", "optional", "when free", "if time", "maybe")
_ROUTINE_WORDS = (
    "routine", "daily plan", "study plan", "schedule for day", "create timetable",
    "study timetable", "make timetable", "time table",
)
_EXAM_WORDS = ("exam", "test")
_EXAM_PLAN_WORDS = ("prepare", "schedule", "study", "routine", "plan", "timetable")
_TIPS_WORDS = ("study", "tips", "focus")
_MOTIVATION_WORDS = ("motivat", "tired", "stress", "overwhelm", "can't do", "give up")
_EXAM_ADVICE_WORDS = ("exam", "test", "preparation", "how to prepare")


# ---------------------------------------------------------------------------
# Predicates (pure over the lower-cased message)
# ---------------------------------------------------------------------------


def _is_delete(lowered: str, today: date) -> bool:
    return _has_any(lowered, _DELETE_VERBS) and _has_any(lowered, _DELETE_TARGETS)


def _is_complete(lowered: str, today: date) -> bool:
    return _has_any(lowered, _COMPLETE_VERBS) and ("task" in lowered or "event" not in lowered)


def navigation_target(lowered: str) -> str | None:
    """The view a show/open message points at, or None."""
    if "goal" in lowered or ("timetable" in lowered and "create" not in lowered):
        return "goaltimetable"
    if "schedule" in lowered or "task" in lowered:
        return "scheduler"
    if "event" in lowered:
        return "events"
    if "calendar" in lowered:
        return "calendar"
    if _has_any(lowered, ("analytic", "statistic", "progress")):
        return "analytics"
    if "profile" in lowered:
        return "profile"
    return None


def _is_navigate(lowered: str, today: date) -> bool:
    return _has_any(lowered, _NAVIGATE_VERBS) and navigation_target(lowered) is not None


def _is_mark_date(lowered: str, today: date) -> bool:
    return _has_any(lowered, _MARK_VERBS) and _has_any(lowered, _MARK_NOUNS)


def _is_exam_sitting(lowered: str, today: date) -> bool:
    """'Tomorrow I have English exam at 9:30' style: known subjects sat within two days."""
    if not _has_any(lowered, _EXAM_WORDS) or not detect_subjects(lowered, EXAM_SUBJECTS):
        return False
    when = extract_date(lowered, today)
    near = {"", *((today + timedelta(days=n)).isoformat() for n in range(3))}
    return when in near


def _is_add_event(lowered: str, today: date) -> bool:
    return _has_any(lowered, _EVENT_WORDS)


def _is_add_task(lowered: str, today: date) -> bool:
    return _has_any(lowered, _TASK_VERBS)


def _is_routine(lowered: str, today: date) -> bool:
    return _has_any(lowered, _ROUTINE_WORDS) and not _has_any(lowered, _EXAM_WORDS)


def _is_exam_prep(lowered: str, today: date) -> bool:
    return _has_any(lowered, _EXAM_WORDS) and _has_any(lowered, _EXAM_PLAN_WORDS)


def _is_study_tips(lowered: str, today: date) -> bool:
    return _has_any(lowered, _TIPS_WORDS) or (
        "how to" in lowered and _has_any(lowered, ("learn", "concentrate"))
    )


def _is_motivation(lowered: str, today: date) -> bool:
    return _has_any(lowered, _MOTIVATION_WORDS)


def _is_exam_advice(lowered: str, today: date) -> bool:
    return _has_any(lowered, _EXAM_ADVICE_WORDS)


RULES: tuple[tuple[Intent, Callable[[str, date], bool]], ...] = (
    (Intent.DELETE, _is_delete),
    (Intent.COMPLETE, _is_complete),
    (Intent.NAVIGATE, _is_navigate),
    (Intent.MARK_DATE, _is_mark_date),
    (Intent.EXAM_PREP, _is_exam_sitting),
    (Intent.ADD_EVENT, _is_add_event),
    (Intent.ADD_TASK, _is_add_task),
    (Intent.ROUTINE, _is_routine),
    # Unreachable for "exam"/"test" messages: add-event matches them first.
    (Intent.EXAM_PREP, _is_exam_prep),
    (Intent.STUDY_TIPS, _is_study_tips),
    (Intent.MOTIVATION, _is_motivation),
    (Intent.EXAM_ADVICE, _is_exam_advice),
)


def classify(message: str, today: date) -> Intent:
    lowered = message.lower()
    for intent, predicate in RULES:
        if predicate(lowered, today):
            return intent
    return Intent.HELP


# ---------------------------------------------------------------------------
# Canned replies
# ---------------------------------------------------------------------------

WELCOME_TEXT = (
    "Hello! 👋 I'm your study assistant, and study timetables are my specialty!\n\n"
    "📚 Custom daily study schedules with breaks\n"
    "📝 Exam preparation timetables\n"
    "🎯 Goal-based timetable with stars as you complete tasks\n"
    "✅ Tasks, events and important dates from plain sentences\n\n"
    "Try:\n"
    "• 'Study timetable for Math, Physics, English'\n"
    "• 'Tomorrow I have English exam at 9:30 AM and Math at 2 PM'\n"
    "• 'Add homework at 5 PM'\n"
    "• 'Show me goal timetable'"
)

HELP_TEXT = (
    "I'm your study assistant! I can help you with:\n\n"
    "✅ **Add Tasks:** 'Schedule homework at 5 PM tomorrow'\n"
    "✅ **Mark Dates:** 'Make next Friday my special day'\n"
    "✅ **Add Events:** 'Add exam on December 1 at 9 AM'\n"
    "✅ **Create Routines:** 'My daily routine please'\n"
    "✅ **Delete Tasks:** 'Remove my morning task'\n"
    "✅ **Complete Tasks:** 'Mark homework as done'\n"
    "✅ **View Sections:** 'Show me my calendar'\n"
    "✅ **Get Advice:** 'Give me study tips'\n\n"
    "💡 Just talk naturally! What would you like to do?"
)

STUDY_TIPS_TEXT = (
    "📚 Here are proven study strategies:\n\n"
    "1. ⏱️ Pomodoro Technique: 25 min focus + 5 min break\n"
    "2. 🧠 Active Recall: Test yourself instead of re-reading\n"
    "3. 📅 Spaced Repetition: Review at increasing intervals\n"
    "4. 👥 Teach Others: Best way to solidify knowledge\n"
    "5. 💧 Stay Hydrated: Brain needs water to function\n"
    "6. 😴 Sleep Well: Memory consolidation happens during sleep\n\n"
    "Schedule your most challenging tasks for when you feel freshest!"
)

MOTIVATION_TEXT = (
    "💪 You're doing AMAZING! Here's why:\n\n"
    "✨ You're actively working on your goals right now\n"
    "🎯 Every small step counts toward success\n"
    "📈 Progress isn't always visible but it's happening\n"
    "🌟 You've already accomplished so much\n"
    "⚡ Taking breaks is productive too\n\n"
    "Remember: Success is built one day at a time. You've got this! 🚀"
)

EXAM_ADVICE_TEXT = (
    "📋 Exam Preparation Strategy:\n\n"
    "🗓️ 2-3 weeks before:\n• Review all topics\n• Identify weak areas\n• Make summary notes\n\n"
    "📚 1-2 weeks before:\n• Practice problems daily\n• Use active recall\n• Join study groups\n\n"
    "📝 1 week before:\n• Take mock tests\n• Time yourself\n• Review mistakes\n\n"
    "🎯 2-3 days before:\n• Light revision only\n• Sleep well (8 hours)\n• Stay calm and confident\n\n"
    "Want me to create a study schedule for your exam?"
)

_NAVIGATION_REPLIES = {
    "goaltimetable": (
        "🎯 Opening your Goal-Based Timetable now...\n\n"
        "Here you can set your goals and get a timetable to achieve them!"
    ),
    "scheduler": "📅 Opening your scheduler now...",
    "events": "📅 Opening your events page...",
    "calendar": "📅 Opening your calendar...",
    "analytics": "📊 Opening your analytics dashboard...",
    "profile": "👤 Opening your profile...",
}

_TASK_NOT_FOUND = (
    "I couldn't find that specific task. Could you tell me the exact name? "
    "You can also delete it with /deletetask."
)
_COMPLETE_NOT_FOUND = "Which task would you like to mark as complete? Please mention the task name."
_DATE_NEEDED = (
    "I'd love to mark that date! Could you specify when? For example:\n"
    "• 'Mark December 25 as Christmas'\n"
    "• 'Make tomorrow my special day'\n"
    "• 'Set next Monday as important'"
)
_EVENT_DATE_NEEDED = (
    "I can add that event! When should it be? For example:\n"
    "• 'Add exam on November 30 at 9 AM'\n"
    "• 'Schedule meeting tomorrow at 2 PM'\n"
    "• 'Add workshop next Monday at 10 AM'"
)

ASSISTANT_NOTE = "Added via AI Assistant"


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------


class CommandInterpreter:
    """Turns one chat message into store mutations and a reply."""

    def __init__(
        self,
        tasks: TaskStore,
        events: EventStore,
        dates: ImportantDateStore,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._tasks = tasks
        self._events = events
        self._dates = dates
        self._clock = clock
        self._handlers: dict[Intent, Callable[[str, str, datetime], CommandResult]] = {
            Intent.DELETE: self._delete,
            Intent.COMPLETE: self._complete,
            Intent.NAVIGATE: self._navigate,
            Intent.MARK_DATE: self._mark_date,
            Intent.ADD_EVENT: self._add_event,
            Intent.ADD_TASK: self._add_task,
            Intent.ROUTINE: self._routine,
            Intent.EXAM_PREP: self._exam_prep,
            Intent.STUDY_TIPS: lambda *_: CommandResult(STUDY_TIPS_TEXT),
            Intent.MOTIVATION: lambda *_: CommandResult(MOTIVATION_TEXT),
            Intent.EXAM_ADVICE: lambda *_: CommandResult(EXAM_ADVICE_TEXT),
            Intent.HELP: lambda *_: CommandResult(HELP_TEXT),
        }

    def classify(self, message: str) -> Intent:
        return classify(message, self._clock().date())

    def interpret(self, message: str) -> CommandResult:
        now = self._clock()
        intent = classify(message, now.date())
        logger.debug("Classified %r as %s", message, intent.value)
        result = self._handlers[intent](message, message.lower(), now)
        result.intent = intent
        return result

    # -- rule handlers --------------------------------------------------------

    def _delete(self, message: str, lowered: str, now: datetime) -> CommandResult:
        if "all" in lowered or "everything" in lowered:
            if "task" in lowered:
                self._tasks.clear()
                return CommandResult(
                    "✅ All tasks have been cleared from your schedule. Ready for a fresh start!",
                    action="all_tasks_cleared",
                )
            if "event" in lowered:
                self._events.clear()
                return CommandResult("✅ All events have been cleared!", action="all_events_cleared")

        task = self._tasks.find_by_title_in(lowered)
        if task is None:
            return CommandResult(_TASK_NOT_FOUND)
        self._tasks.remove(task.id)
        return CommandResult(f'✅ I\'ve removed "{task.title}" from your schedule.', action="task_deleted")

    def _complete(self, message: str, lowered: str, now: datetime) -> CommandResult:
        task = self._tasks.find_by_title_in(lowered)
        if task is None:
            return CommandResult(_COMPLETE_NOT_FOUND)
        self._tasks.set_completed(task.id)
        return CommandResult(
            f'✅ Excellent! I\'ve marked "{task.title}" as completed. Great job staying productive! 🎉',
            action="task_completed",
        )

    def _navigate(self, message: str, lowered: str, now: datetime) -> CommandResult:
        view = navigation_target(lowered)
        return CommandResult(
            _NAVIGATION_REPLIES[view],
            action=f"navigate_{view}",
            navigate_to=view,
            navigate_delay=NAVIGATE_DELAY_SECONDS,
        )

    def _mark_date(self, message: str, lowered: str, now: datetime) -> CommandResult:
        when = extract_date(message, now.date())
        if not when:
            return CommandResult(_DATE_NEEDED)
        title = extract_title(message, "date")
        self._dates.add(ImportantDate(date=when, title=title, description="Marked via AI Assistant"))
        return CommandResult(
            f'⭐ Perfect! I\'ve marked {format_long_date(when)} as "{title}" in your calendar.\n\n'
            "This date will be highlighted in your Calendar view. 🎉",
            action="date_marked",
        )

    def _add_event(self, message: str, lowered: str, now: datetime) -> CommandResult:
        when = extract_date(message, now.date())
        if not when:
            return CommandResult(_EVENT_DATE_NEEDED)
        time = extract_time(message, now)
        title = extract_title(message, "event")
        event_type = _event_type(lowered)
        self._events.add(CollegeEvent(
            title=title,
            description=ASSISTANT_NOTE,
            date=when,
            time=time,
            location="To be confirmed",
            type=event_type,
        ))
        return CommandResult(
            f'📅 Awesome! I\'ve added "{title}" to your events.\n\n'
            "📋 Event Details:\n"
            f"• Date: {format_long_date(when)}\n"
            f"• Time: {time}\n"
            f"• Type: {event_type.upper()}\n"
            "• Location: To be confirmed\n\n"
            "Use /events to view them!",
            action="event_added",
        )

    def _add_task(self, message: str, lowered: str, now: datetime) -> CommandResult:
        time = extract_time(message, now)
        title = extract_title(message, "task")
        priority = _task_priority(lowered)
        self._tasks.add(Task(title=title, description=ASSISTANT_NOTE, time=time, priority=priority))
        return CommandResult(
            f'✅ Done! I\'ve added "{title}" to your schedule.\n\n'
            "📋 Task Details:\n"
            f"• Time: {time}\n"
            f"• Priority: {priority.upper()}\n"
            "• Notifications: 5 min before + at start time\n\n"
            "Anything else you'd like to add?",
            action="task_added",
        )

    def _routine(self, message: str, lowered: str, now: datetime) -> CommandResult:
        plan = build_custom_routine(lowered, now)
        if plan.tasks:
            self._save_plan(plan)
            return CommandResult(plan.message, action="custom_timetable_created")
        plan = build_default_routine()
        self._save_plan(plan)
        return CommandResult(plan.message, action="routine_created")

    def _exam_prep(self, message: str, lowered: str, now: datetime) -> CommandResult:
        plan = build_exam_plan(lowered, now)
        if not plan.tasks:
            return CommandResult(plan.message)
        self._save_plan(plan)
        return CommandResult(plan.message, action="exam_schedule_created")

    def _save_plan(self, plan: StudyPlan) -> None:
        if plan.tasks:
            tasks = self._tasks.load_all()
            tasks += [
                Task(title=p.title, time=p.time, priority=p.priority, description=p.description)
                for p in plan.tasks
            ]
            self._tasks.save_all(tasks)
        if plan.events:
            events = self._events.load_all()
            events += [
                CollegeEvent(
                    title=e.title, date=e.date, time=e.time,
                    description=e.description, location=e.location, type=e.type,
                )
                for e in plan.events
            ]
            self._events.save_all(events)
        logger.info("Saved study plan: %d tasks, %d events", len(plan.tasks), len(plan.events))


def _event_type(lowered: str) -> str:
    if _has_any(lowered, _CULTURAL_WORDS):
        return "cultural"
    if _has_any(lowered, _SPORTS_WORDS):
        return "sports"
    if not _has_any(lowered, _ACADEMIC_WORDS):
        return "other"
    return "academic"


def _task_priority(lowered: str) -> str:
    if _has_any(lowered, _HIGH_PRIORITY_WORDS):
        return "high"
    if _has_any(lowered, _LOW_PRIORITY_WORDS):
        return "low"
    return "medium"
