"""
StudyOS Assistant — Study timetable builders.

Turns a study/exam request into a list of planned tasks (and, for exams,
planned events) plus the chat reply describing them. Nothing is stored
here: the interpreter persists what these builders return.

No I/O: the current time is always passed in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from studyos.core.extractors import (
    EXAM_SUBJECTS,
    ROUTINE_SUBJECTS,
    Subject,
    add_minutes,
    detect_subjects,
    extract_date,
    extract_duration_minutes,
    find_clock_times,
    format_12h,
    format_hhmm,
)

logger = logging.getLogger(__name__)


@dataclass
class PlannedTask:
    title: str
    time: str          # HH:MM
    priority: str
    description: str = ""


@dataclass
class PlannedEvent:
    title: str
    date: str
    time: str
    description: str = ""
    location: str = "Exam Hall"
    type: str = "academic"


@dataclass
class StudyPlan:
    message: str
    tasks: list[PlannedTask] = field(default_factory=list)
    events: list[PlannedEvent] = field(default_factory=list)


@dataclass
class ExamSitting:
    subject: str
    emoji: str
    time: str          # HH:MM
    date: str          # ISO


# ---------------------------------------------------------------------------
# Daily routine
# ---------------------------------------------------------------------------

_DEFAULT_ROUTINE = (
    PlannedTask("Morning Study Session", "09:00", "high", "Fresh mind - tackle difficult subjects"),
    PlannedTask("Attend Classes", "11:00", "high", "Focus and take notes"),
    PlannedTask("Lunch Break", "13:00", "low", "Healthy meal and relaxation"),
    PlannedTask("Afternoon Study", "15:00", "medium", "Review class notes"),
    PlannedTask("Exercise/Break", "17:00", "low", "Physical activity - refresh mind"),
    PlannedTask("Evening Revision", "19:00", "medium", "Practice and problem-solving"),
)


def build_default_routine() -> StudyPlan:
    """The fixed six-block daily study routine."""
    lines = ["📅 **Daily Study Routine Created!**", "", "✅ All tasks added to your Scheduler:", ""]
    for task in _DEFAULT_ROUTINE:
        suffix = " (High Priority)" if task.priority == "high" else ""
        lines.append(f"• {task.title} - {format_12h(task.time)}{suffix}")
    lines += ["", "All tasks have notifications enabled. Stay productive! 🎯"]
    return StudyPlan(
        message="\n".join(lines),
        tasks=[PlannedTask(t.title, t.time, t.priority, t.description) for t in _DEFAULT_ROUTINE],
    )


def _routine_times(lowered: str) -> list[str]:
    """Explicit clock times in a routine request, deduplicated, in order."""
    times: list[str] = []
    for hour, minute, meridiem in find_clock_times(lowered):
        if meridiem == "pm" and hour < 12:
            hour += 12
        elif meridiem == "am" and hour == 12:
            hour = 0
        elif meridiem is None and hour < 7 and hour not in (1, 2, 3):
            hour += 12  # study hours: "4:30" means 16:30
        if hour > 23 or minute > 59:
            continue
        formatted = format_hhmm(hour, minute)
        if formatted not in times:
            times.append(formatted)
    return times


def _study_block(subject: Subject, time: str) -> PlannedTask:
    return PlannedTask(
        title=f"{subject.emoji} {subject.name} Study",
        time=time,
        priority="high",
        description=f"Focus on {subject.name} - important topics and practice",
    )


def build_custom_routine(lowered: str, now: datetime) -> StudyPlan:
    """Build study blocks from the subjects and/or times named in the request.

    Returns a plan with no tasks when neither subjects nor times are found.
    """
    subjects = detect_subjects(lowered, ROUTINE_SUBJECTS)
    times = _routine_times(lowered)
    duration = extract_duration_minutes(lowered)
    tasks: list[PlannedTask] = []
    lines = ["📚 **Custom Study Timetable Created!**", ""]

    if subjects and times:
        paired = min(len(subjects), len(times))
        for index in range(paired):
            subject, time = subjects[index], times[index]
            tasks.append(_study_block(subject, time))
            lines.append(f"• {format_12h(time)} - {subject.name} Study {subject.emoji}")
            if index < paired - 1:
                break_time = add_minutes(time, duration)
                tasks.append(PlannedTask(
                    "☕ Short Break", break_time, "low", "Rest and refresh - 10-15 minutes",
                ))
                lines.append(f"• {format_12h(break_time)} - Short Break ☕")
    elif subjects:
        hour = max(now.hour + 1, 14)
        lines += [f"📅 **Created schedule starting from {format_12h(format_hhmm(hour))}**", ""]
        for index, subject in enumerate(subjects):
            study_time = format_hhmm(hour)
            tasks.append(_study_block(subject, study_time))
            lines.append(f"• {format_12h(study_time)} - {subject.name} Study {subject.emoji}")
            hour += 2
            if index < len(subjects) - 1:
                break_time = format_hhmm(hour - 1, 30)
                tasks.append(PlannedTask("☕ Short Break", break_time, "low", "Rest and refresh"))
                lines.append(f"• {format_12h(break_time)} - Break ☕")
    elif times:
        for index, time in enumerate(times, start=1):
            tasks.append(PlannedTask(
                f"📚 Study Session {index}", time, "high", "Focused study time - important topics",
            ))
            lines.append(f"• {format_12h(time)} - Study Session {index} 📚")

    if not tasks:
        return StudyPlan(message="")

    lines += [
        "",
        "✅ All tasks added to your Scheduler with notifications!",
        "",
        "Stay focused and productive! 🎯",
    ]
    logger.debug("Custom routine: %d subjects, %d times, %d tasks", len(subjects), len(times), len(tasks))
    return StudyPlan(message="\n".join(lines), tasks=tasks)


# ---------------------------------------------------------------------------
# Exam preparation
# ---------------------------------------------------------------------------

EXAM_CLARIFICATION = (
    "I couldn't detect specific exam details. Please tell me:\n"
    "- Which subjects?\n"
    "- What time are the exams?\n"
    "- When are they (today/tomorrow/day after tomorrow)?\n\n"
    "Example: 'Tomorrow I have English at 9:30 AM and Math at 2 PM'"
)


def exam_date(lowered: str, today: date) -> date:
    """An explicit date wins; otherwise day-after wording -> +2, 'tomorrow' -> +1, else today."""
    resolved = extract_date(lowered, today)
    if resolved:
        return date.fromisoformat(resolved)
    if "day after" in lowered or "next day" in lowered:
        return today + timedelta(days=2)
    if "tomorrow" in lowered:
        return today + timedelta(days=1)
    return today


def _exam_times(lowered: str) -> list[str]:
    times: list[str] = []
    for hour, minute, meridiem in find_clock_times(lowered):
        if meridiem == "pm" and hour < 12:
            hour += 12
        elif meridiem == "am" and hour == 12:
            hour = 0
        if hour > 23 or minute > 59:
            continue
        times.append(format_hhmm(hour, minute))
    return times


def parse_exam_sittings(lowered: str, today: date) -> list[ExamSitting]:
    """Pair detected subjects with detected times by position.

    Missing times fall back to 09:00; times without subjects become
    "Subject N". The result is ordered by exam time.
    """
    when = exam_date(lowered, today).isoformat()
    subjects = detect_subjects(lowered, EXAM_SUBJECTS)
    times = _exam_times(lowered)

    if subjects:
        sittings = [
            ExamSitting(s.name, s.emoji, times[i] if i < len(times) else "09:00", when)
            for i, s in enumerate(subjects)
        ]
    else:
        sittings = [ExamSitting(f"Subject {i}", "📝", t, when) for i, t in enumerate(times, start=1)]

    sittings.sort(key=lambda s: s.time)
    return sittings


def _hour_of(hhmm: str) -> int:
    return int(hhmm.split(":")[0])


def _session_step(window: int, count: int) -> int:
    """Minutes between a subject's two sessions; every subject fits the window.

    Whole half-hours where possible, then quarter-hours, then five-minute
    steps when the evening is crowded.
    """
    step = window // (count * 2)
    if step >= 30:
        return step // 30 * 30
    if step >= 15:
        return 15
    return max(5, step // 5 * 5)


def _evening_before(sittings: list[ExamSitting], now: datetime, lines: list[str]) -> list[PlannedTask]:
    """Study blocks for the evening before tomorrow's exams."""
    tasks: list[PlannedTask] = []
    hour = now.hour
    lines += ["🎯 **TODAY'S PREPARATION SCHEDULE:**", ""]

    if hour < 18:
        cursor = max(18, hour + 1) * 60
        step = _session_step(23 * 60 - cursor, len(sittings))
        for sitting in sittings:
            core_time = format_hhmm(cursor // 60, cursor % 60)
            tasks.append(PlannedTask(
                f"📚 {sitting.subject} - Core Concepts", core_time, "high",
                "Main topics, important concepts, formulas",
            ))
            lines.append(f"• {format_12h(core_time)} - {sitting.subject} Core Concepts 📚")

            break_time = add_minutes(core_time, step // 2)
            tasks.append(PlannedTask(
                "☕ Quick Break - Refresh", break_time, "low", "10-15 min break, hydrate, stretch",
            ))
            lines.append(f"• {format_12h(break_time)} - Short Break ☕")

            practice_time = add_minutes(core_time, step)
            tasks.append(PlannedTask(
                f"📖 {sitting.subject} - Practice & Revision", practice_time, "high",
                "Solve problems, previous papers, quick revision",
            ))
            lines.append(f"• {format_12h(practice_time)} - {sitting.subject} Practice 📖")
            cursor += step * 2

        if hour < 21:
            tasks.append(PlannedTask("🍽️ Dinner Break", "21:00", "low", "Proper meal, relax for 30 minutes"))
            lines.append(f"• {format_12h('21:00')} - Dinner Break 🍽️")
        tasks.append(PlannedTask(
            "📝 Quick Revision - All Subjects", "22:30", "medium",
            "Quick overview of key points from all subjects",
        ))
        lines.append(f"• {format_12h('22:30')} - Quick Revision All Subjects 📝")

    elif hour < 22:
        lines.append("⚡ **Quick Evening Revision (Starting Now!):**")
        for index, sitting in enumerate(sittings):
            study_time = format_hhmm(hour + 1 + index)
            tasks.append(PlannedTask(
                f"📚 {sitting.subject} - Quick Revision", study_time, "high",
                "Focus on important topics, formulas, key concepts",
            ))
            lines.append(f"• {format_12h(study_time)} - {sitting.subject} Quick Revision 📚")

    else:
        lines += [
            "🌙 It's quite late! Quick last-minute tips:",
            "• Review your notes briefly",
            "• Get good sleep (very important!)",
            "• Wake up early for final revision",
            "",
        ]

    tasks.append(PlannedTask(
        "😴 Sleep Time - Rest Well!", "23:30", "high",
        "7-8 hours sleep is crucial for exam performance!",
    ))
    lines += [f"• {format_12h('23:30')} - Sleep Well 😴 (7-8 hours!)", ""]
    return tasks


def _exam_day(sittings: list[ExamSitting], lines: list[str]) -> list[PlannedTask]:
    tasks: list[PlannedTask] = []
    lines += ["🌅 **EXAM DAY SCHEDULE:**", ""]

    first_hour = _hour_of(sittings[0].time)
    wake_hour = max(6, first_hour - 2)

    wake_time = format_hhmm(wake_hour)
    tasks.append(PlannedTask("⏰ Wake Up & Fresh Start", wake_time, "high", "Good breakfast, get ready, stay calm"))
    lines.append(f"• {format_12h(wake_time)} - Wake Up & Breakfast ⏰")

    revision_time = format_hhmm(wake_hour + 1)
    tasks.append(PlannedTask(
        f"📚 {sittings[0].subject} - Final Revision", revision_time, "high",
        "Last minute revision, important formulas, key points",
    ))
    lines.append(f"• {format_12h(revision_time)} - {sittings[0].subject} Final Revision 📚")

    ready_time = format_hhmm(max(0, first_hour - 1))
    tasks.append(PlannedTask("🎒 Get Ready & Pack", ready_time, "medium", "Stationery, water bottle, admit card, ID"))
    lines.append(f"• {format_12h(ready_time)} - Get Ready & Pack 🎒")

    for index, sitting in enumerate(sittings):
        tasks.append(PlannedTask(
            f"📝 {sitting.subject.upper()} EXAM", sitting.time, "high",
            "Stay calm, read questions carefully, manage time well",
        ))
        lines.append(f"• {format_12h(sitting.time)} - **{sitting.subject.upper()} EXAM** 📝")

        if index < len(sittings) - 1:
            following = sittings[index + 1]
            this_hour = _hour_of(sitting.time)
            if _hour_of(following.time) - this_hour > 1:
                gap_time = format_hhmm(this_hour + 1)
                tasks.append(PlannedTask(
                    f"☕ Break + {following.subject} Revision", gap_time, "medium",
                    "Relax, quick snack, light revision for next exam",
                ))
                lines.append(f"• {format_12h(gap_time)} - Break + {following.subject} Quick Revision ☕")

    done_time = format_hhmm(_hour_of(sittings[-1].time) + 1)
    tasks.append(PlannedTask("🎉 All Exams Done! Celebrate!", done_time, "low", "Well deserved rest! You did great! 🎊"))
    lines += [f"• {format_12h(done_time)} - CELEBRATE! 🎉 You did it!", ""]
    return tasks


def build_exam_plan(lowered: str, now: datetime) -> StudyPlan:
    """Evening-before study blocks (for tomorrow's exams) plus an exam-day schedule."""
    sittings = parse_exam_sittings(lowered, now.date())
    if not sittings:
        return StudyPlan(message=EXAM_CLARIFICATION)

    is_tomorrow = sittings[0].date == (now.date() + timedelta(days=1)).isoformat()
    day_label = "Tomorrow" if is_tomorrow else sittings[0].date

    lines = ["📚 **PERSONALIZED EXAM PREPARATION TIMETABLE**", "", f"📅 **Exam Schedule ({day_label}):**"]
    for index, sitting in enumerate(sittings, start=1):
        lines.append(f"{index}. {sitting.subject} - {format_12h(sitting.time)} {sitting.emoji}")
    lines.append("")

    tasks: list[PlannedTask] = []
    if is_tomorrow:
        tasks += _evening_before(sittings, now, lines)
    tasks += _exam_day(sittings, lines)

    lines += [
        "💡 **EXAM DAY TIPS:**",
        "✅ Stay hydrated - drink water regularly",
        "✅ Read all questions carefully",
        "✅ Manage your time well",
        "✅ Stay calm and confident",
        "✅ Review your answers if time permits",
        "",
        "All tasks added to your Scheduler with notifications! 💪",
        "You've got this! Good luck! 🌟",
    ]

    events = [
        PlannedEvent(
            title=f"{s.subject} Exam",
            date=s.date,
            time=s.time,
            description=f"{s.emoji} Stay focused and confident!",
        )
        for s in sittings
    ]
    logger.debug("Exam plan: %d sittings, %d tasks", len(sittings), len(tasks))
    return StudyPlan(message="\n".join(lines), tasks=tasks, events=events)
