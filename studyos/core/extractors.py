"""
StudyOS Assistant — Deterministic text extractors.

Pure functions shared by the command interpreter and the study planner:
time, date and title extraction, subject detection and clock helpers.
No I/O: the current time is always passed in.
"""

from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Clock helpers
# ---------------------------------------------------------------------------


def format_hhmm(hour: int, minute: int = 0) -> str:
    return f"{hour % 24:02d}:{minute:02d}"


def add_minutes(hhmm: str, minutes: int) -> str:
    """Add minutes to an HH:MM string, wrapping past midnight."""
    hour, minute = map(int, hhmm.split(":"))
    total = (hour * 60 + minute + minutes) % (24 * 60)
    return format_hhmm(total // 60, total % 60)


def format_12h(hhmm: str) -> str:
    """'14:05' -> '2:05 PM'."""
    hour, minute = map(int, hhmm.split(":"))
    meridiem = "PM" if hour >= 12 else "AM"
    display = hour - 12 if hour > 12 else (12 if hour == 0 else hour)
    return f"{display}:{minute:02d} {meridiem}"


def format_long_date(iso_date: str) -> str:
    """'2026-12-25' -> 'Friday, December 25, 2026'."""
    d = date.fromisoformat(iso_date)
    return f"{d:%A, %B} {d.day}, {d.year}"


# ---------------------------------------------------------------------------
# Time extraction
# ---------------------------------------------------------------------------

_TIME_PATTERNS = (
    re.compile(r"(\d{1,2})\s*[:.]\s*(\d{2})\s*(am|pm)?\b", re.IGNORECASE),
    re.compile(r"(\d{1,2})\s*(am|pm)\b", re.IGNORECASE),
    re.compile(r"\bat\s+(\d{1,2})\b", re.IGNORECASE),
)

_PERIODS = re.compile(r"\b(morning|afternoon|evening|night)\b", re.IGNORECASE)
_PERIOD_TIMES = {
    "morning": "09:00",
    "afternoon": "14:00",
    "evening": "18:00",
    "night": "20:00",
}


def _to_24h(hour: int, minute: int, meridiem: str | None) -> tuple[int, int] | None:
    meridiem = meridiem.lower() if meridiem else None
    if meridiem == "pm" and hour < 12:
        hour += 12
    if meridiem == "am" and hour == 12:
        hour = 0
    if not meridiem and hour < 8:
        hour += 12  # small bare hours are afternoon/evening
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def extract_time(message: str, now: datetime) -> str:
    """Return the first time mentioned in ``message`` as HH:MM.

    Falls back to the top of the next hour when nothing is found.
    """
    for pattern in _TIME_PATTERNS:
        for match in pattern.finditer(message):
            groups = match.groups()
            hour = int(groups[0])
            if pattern is _TIME_PATTERNS[0]:
                minute, meridiem = int(groups[1]), groups[2]
            elif pattern is _TIME_PATTERNS[1]:
                minute, meridiem = 0, groups[1]
            else:
                minute, meridiem = 0, None
            converted = _to_24h(hour, minute, meridiem)
            if converted is not None:
                return format_hhmm(*converted)

    period = _PERIODS.search(message)
    if period:
        return _PERIOD_TIMES[period.group(1).lower()]

    return format_hhmm((now + timedelta(hours=1)).hour)


# ---------------------------------------------------------------------------
# Date extraction
# ---------------------------------------------------------------------------

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

MONTHS = {
    "january": 1, "jan": 1, "february": 2, "feb": 2, "march": 3, "mar": 3,
    "april": 4, "apr": 4, "may": 5, "june": 6, "jun": 6,
    "july": 7, "jul": 7, "august": 8, "aug": 8, "september": 9, "sep": 9,
    "october": 10, "oct": 10, "november": 11, "nov": 11, "december": 12, "dec": 12,
}

_ISO_DATE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_US_DATE_FULL = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_US_DATE_SHORT = re.compile(r"(\d{1,2})/(\d{1,2})")
_MONTH_DAY = {
    name: re.compile(rf"\b{name}\s+(\d{{1,2}})(?!\d)", re.IGNORECASE)
    for name in MONTHS
}


def _add_months(d: date, months: int) -> date:
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def extract_date(message: str, today: date) -> str:
    """Return the date mentioned in ``message`` as yyyy-mm-dd, or "".

    Relative words win over weekday names, which win over numeric dates,
    which win over month-name dates.
    """
    lowered = message.lower()

    if "today" in lowered:
        return today.isoformat()
    if "day after tomorrow" in lowered:
        return (today + timedelta(days=2)).isoformat()
    if "tomorrow" in lowered:
        return (today + timedelta(days=1)).isoformat()
    if "next week" in lowered:
        return (today + timedelta(days=7)).isoformat()
    if "next month" in lowered:
        return _add_months(today, 1).isoformat()

    for index, weekday in enumerate(WEEKDAYS):
        if weekday in lowered:
            days_ahead = (index - today.weekday()) % 7 or 7
            return (today + timedelta(days=days_ahead)).isoformat()

    match = _ISO_DATE.search(message)
    if match:
        found = _safe_date(int(match[1]), int(match[2]), int(match[3]))
        return found.isoformat() if found else ""

    match = _US_DATE_FULL.search(message)
    if match:
        found = _safe_date(int(match[3]), int(match[1]), int(match[2]))
        return found.isoformat() if found else ""

    match = _US_DATE_SHORT.search(message)
    if match:
        found = _safe_date(today.year, int(match[1]), int(match[2]))
        return found.isoformat() if found else ""

    for name, pattern in _MONTH_DAY.items():
        match = pattern.search(message)
        if match:
            found = _safe_date(today.year, MONTHS[name], int(match[1]))
            return found.isoformat() if found else ""

    return ""


# ---------------------------------------------------------------------------
# Title extraction
# ---------------------------------------------------------------------------

_STOP_WORDS = (
    "add", "create", "schedule", "remind", "me", "to", "please", "can you", "could you",
    "at", "on", "for", "the", "a", "an", "my", "as", "mark", "set", "make",
    "task", "event", "date", "day", "important", "special", "tomorrow", "today",
    "next week", "next month", *WEEKDAYS,
    "morning", "afternoon", "evening", "night", "this",
)
_STOP_WORD_PATTERNS = [re.compile(rf"\b{re.escape(w)}\b", re.IGNORECASE) for w in _STOP_WORDS]

_RESIDUE_PATTERNS = (
    re.compile(r"\d{1,2}[:.]\d{2}\s*(am|pm)?", re.IGNORECASE),
    re.compile(r"\d{1,2}\s*(am|pm)\b", re.IGNORECASE),
    re.compile(r"\d{4}-\d{2}-\d{2}"),
    re.compile(r"\d{1,2}/\d{1,2}(/\d{4})?"),
    re.compile(
        r"(january|february|march|april|may|june|july|august|september|october"
        r"|november|december)\s+\d{1,2}",
        re.IGNORECASE,
    ),
)

DEFAULT_TITLES = {
    "task": "New Task",
    "event": "New Event",
    "date": "Important Day",
}


def extract_title(message: str, kind: str) -> str:
    """Strip command words, times and dates; what remains is the title."""
    cleaned = message
    for pattern in _STOP_WORD_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    for pattern in _RESIDUE_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()

    if len(cleaned) < 2:
        return DEFAULT_TITLES[kind]
    return cleaned[0].upper() + cleaned[1:]


# ---------------------------------------------------------------------------
# Subjects and study durations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Subject:
    name: str
    emoji: str


# Subjects recognised when building a daily study timetable.
ROUTINE_SUBJECTS = (
    (re.compile(r"english"), Subject("English", "📚")),
    (re.compile(r"math|maths|mathematics"), Subject("Mathematics", "🔢")),
    (re.compile(r"science|physics|chemistry|biology"), Subject("Science", "🔬")),
    (re.compile(r"programming|coding|c\s+language|java|python"), Subject("Programming", "💻")),
    (re.compile(r"history"), Subject("History", "📜")),
    (re.compile(r"geography"), Subject("Geography", "🌍")),
)

# Finer-grained list used for exam sittings.
EXAM_SUBJECTS = (
    (re.compile(r"english"), Subject("English", "📚")),
    (re.compile(r"c programming|c-programming|programming|\bc\b.*program"), Subject("C Programming", "💻")),
    (re.compile(r"java"), Subject("Java", "☕")),
    (re.compile(r"python"), Subject("Python", "🐍")),
    (re.compile(r"math|maths|mathematics"), Subject("Mathematics", "🔢")),
    (re.compile(r"physics"), Subject("Physics", "⚛️")),
    (re.compile(r"chemistry"), Subject("Chemistry", "🧪")),
    (re.compile(r"biology"), Subject("Biology", "🧬")),
    (re.compile(r"history"), Subject("History", "📜")),
    (re.compile(r"geography"), Subject("Geography", "🌍")),
    (re.compile(r"economics"), Subject("Economics", "💰")),
    (re.compile(r"data structures|\bdsa?\b"), Subject("Data Structures", "🗂️")),
    (re.compile(r"database|dbms"), Subject("Database", "🗄️")),
    (re.compile(r"\bweb\b|html|css"), Subject("Web Development", "🌐")),
)


def detect_subjects(
    lowered: str,
    patterns: tuple[tuple[re.Pattern, Subject], ...],
) -> list[Subject]:
    """Subjects mentioned in ``lowered``, in pattern-list order, without repeats."""
    found: list[Subject] = []
    for pattern, subject in patterns:
        if pattern.search(lowered) and subject not in found:
            found.append(subject)
    return found


_DURATION = re.compile(r"(\d+)\s*(hour|hr|minute|min)", re.IGNORECASE)


def extract_duration_minutes(lowered: str, default: int = 60) -> int:
    """'2 hours' -> 120, '45 min' -> 45."""
    match = _DURATION.search(lowered)
    if not match:
        return default
    value = int(match[1])
    return value if match[2].lower().startswith("min") else value * 60


_CLOCK_TOKEN = re.compile(
    r"(\d{1,2})(?:[:.](\d{2}))?\s*(am|pm)\b|(\d{1,2})[:.](\d{2})",
    re.IGNORECASE,
)


def find_clock_times(text: str) -> list[tuple[int, int, str | None]]:
    """Every explicit clock time in ``text``: 'H:MM', 'H.MM' or 'H[:MM] am/pm'.

    Returns raw (hour, minute, meridiem) tuples; callers decide how to read
    bare hours.
    """
    tokens: list[tuple[int, int, str | None]] = []
    for match in _CLOCK_TOKEN.finditer(text):
        if match[3]:
            tokens.append((int(match[1]), int(match[2] or 0), match[3].lower()))
        else:
            tokens.append((int(match[4]), int(match[5]), None))
    return tokens
