"""Tests for studyos.core.interpreter — intent order and store mutations."""

from datetime import date

import pytest

from studyos.core.interpreter import (
    EXAM_ADVICE_TEXT,
    HELP_TEXT,
    MOTIVATION_TEXT,
    STUDY_TIPS_TEXT,
    Intent,
    classify,
)

TODAY = date(2026, 10, 19)
EXAM_MESSAGE = "Tomorrow I have English exam at 9:30 AM and Math at 2 PM"


# ---------------------------------------------------------------------------
# Classification order
# ---------------------------------------------------------------------------


class TestClassify:
    @pytest.mark.parametrize("message,intent", [
        ("Delete physics revision task", Intent.DELETE),
        ("Clear all events", Intent.DELETE),
        ("I finished physics revision", Intent.COMPLETE),
        ("Show my calendar", Intent.NAVIGATE),
        ("Make tomorrow my special day", Intent.MARK_DATE),
        (EXAM_MESSAGE, Intent.EXAM_PREP),
        ("Math exam on November 30 at 9 AM", Intent.ADD_EVENT),
        ("Add homework at 5 PM", Intent.ADD_TASK),
        ("My daily routine please", Intent.ROUTINE),
        ("Give me study tips", Intent.STUDY_TIPS),
        ("I'm so tired", Intent.MOTIVATION),
        ("Any preparation advice?", Intent.EXAM_ADVICE),
        ("hello", Intent.HELP),
    ])
    def test_intents(self, message, intent):
        assert classify(message, TODAY) == intent

    def test_delete_beats_complete(self):
        assert classify("remove the done task", TODAY) == Intent.DELETE

    def test_complete_skips_event_messages(self):
        assert classify("the event is done", TODAY) != Intent.COMPLETE

    def test_show_without_destination_falls_through(self):
        assert classify("show me something", TODAY) == Intent.HELP

    def test_add_task_catches_create_before_routine(self):
        assert classify("create a daily study plan", TODAY) == Intent.ADD_TASK

    def test_routine_ignores_exam_messages(self):
        assert classify("time table for my exam", TODAY) != Intent.ROUTINE

    def test_distant_exam_is_a_plain_event(self):
        assert classify("English exam next week at 10 am", TODAY) == Intent.ADD_EVENT

    @pytest.mark.parametrize("message", [
        "Help me prepare a study schedule for my exam",
        "How should I prepare for my test?",
    ])
    def test_exam_words_without_a_subject_are_events(self, message):
        # "exam"/"test" are event words, so later exam rules never see them.
        assert classify(message, TODAY) == Intent.ADD_EVENT


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


class TestAddTask:
    def test_homework_at_5pm(self, interpreter, task_store):
        result = interpreter.interpret("Add homework at 5 PM")
        tasks = task_store.load_all()
        assert len(tasks) == 1
        assert (tasks[0].title, tasks[0].time, tasks[0].priority) == ("Homework", "17:00", "medium")
        assert tasks[0].description == "Added via AI Assistant"
        assert result.action == "task_added"
        assert result.intent == Intent.ADD_TASK

    def test_default_time_is_next_hour(self, interpreter, task_store):
        interpreter.interpret("I need to call mom")
        assert task_store.load_all()[0].time == "11:00"

    def test_high_priority(self, interpreter, task_store):
        interpreter.interpret("I need to submit urgent report")
        assert task_store.load_all()[0].priority == "high"

    def test_low_priority(self, interpreter, task_store):
        interpreter.interpret("Maybe add reading at 8 pm")
        assert task_store.load_all()[0].priority == "low"


class TestDeleteAndComplete:
    def test_delete_matching_task(self, interpreter, task_store):
        task_store.add_task("Physics revision", "18:00")
        task_store.add_task("Gym", "19:00")
        result = interpreter.interpret("Delete physics revision task")
        assert [t.title for t in task_store.load_all()] == ["Gym"]
        assert result.action == "task_deleted"

    def test_delete_unknown_task_is_harmless(self, interpreter, task_store, storage):
        task_store.add_task("Gym", "19:00")
        before = storage.get_item("tasks")
        result = interpreter.interpret("Delete my chemistry task")
        assert result.action is None
        assert "couldn't find" in result.text
        assert storage.get_item("tasks") == before

    def test_clear_all_tasks(self, interpreter, task_store):
        task_store.add_task("Gym", "19:00")
        assert interpreter.interpret("Clear all tasks").action == "all_tasks_cleared"
        assert task_store.load_all() == []

    def test_clear_all_events(self, interpreter, event_store):
        event_store.add_event("Seminar", "2026-11-02", "10:00")
        assert interpreter.interpret("Clear all events").action == "all_events_cleared"
        assert event_store.load_all() == []

    def test_complete_matching_task(self, interpreter, task_store):
        task = task_store.add_task("Physics revision", "18:00")
        result = interpreter.interpret("I finished physics revision")
        assert task_store.get(task.id).completed is True
        assert result.action == "task_completed"

    def test_complete_unknown_task(self, interpreter):
        result = interpreter.interpret("I'm done with chemistry")
        assert result.action is None
        assert "Which task" in result.text


class TestNavigate:
    @pytest.mark.parametrize("message,view", [
        ("Show me goal timetable", "goaltimetable"),
        ("Open my tasks", "scheduler"),
        ("Show events", "events"),
        ("Show my calendar", "calendar"),
        ("View my progress", "analytics"),
        ("Go to profile", "profile"),
    ])
    def test_destinations(self, interpreter, message, view):
        result = interpreter.interpret(message)
        assert result.navigate_to == view
        assert result.action == f"navigate_{view}"
        assert result.navigate_delay == 1.0


class TestMarkDate:
    def test_mark_date(self, interpreter, date_store):
        result = interpreter.interpret("Mark December 25 as Christmas day")
        dates = date_store.load_all()
        assert [(d.date, d.title) for d in dates] == [("2026-12-25", "Christmas")]
        assert dates[0].description == "Marked via AI Assistant"
        assert result.action == "date_marked"
        assert "Friday, December 25, 2026" in result.text

    def test_default_title(self, interpreter, date_store):
        interpreter.interpret("Make tomorrow my special day")
        assert date_store.load_all()[0].title == "Important Day"

    def test_unresolved_date_changes_nothing(self, interpreter, storage):
        before = {k: storage.get_item(k) for k in storage.keys()}
        result = interpreter.interpret("Mark my special day")
        assert result.action is None
        assert {k: storage.get_item(k) for k in storage.keys()} == before


class TestAddEvent:
    def test_academic_event(self, interpreter, event_store):
        result = interpreter.interpret("Add seminar on November 30 at 9 AM")
        event = event_store.load_all()[0]
        assert (event.title, event.date, event.time, event.type) == (
            "Seminar", "2026-11-30", "09:00", "academic",
        )
        assert event.location == "To be confirmed"
        assert result.action == "event_added"

    def test_sports_event(self, interpreter, event_store):
        interpreter.interpret("Add football tournament on 11/14 at 4 pm")
        event = event_store.load_all()[0]
        assert event.type == "sports"
        assert event.title == "Football tournament"
        assert event.time == "16:00"

    def test_other_event(self, interpreter, event_store):
        interpreter.interpret("Add meeting with club on 2026-11-05")
        assert event_store.load_all()[0].type == "other"

    def test_unresolved_date_changes_nothing(self, interpreter, storage):
        result = interpreter.interpret("Add a workshop")
        assert result.action is None
        assert "When should it be" in result.text
        assert storage.keys() == []


class TestStudyPlans:
    def test_exam_scenario_creates_two_events(self, interpreter, event_store, task_store):
        result = interpreter.interpret(EXAM_MESSAGE)
        events = event_store.load_all()
        assert [(e.title, e.date, e.time, e.type) for e in events] == [
            ("English Exam", "2026-10-20", "09:30", "academic"),
            ("Mathematics Exam", "2026-10-20", "14:00", "academic"),
        ]
        assert len(task_store.load_all()) == 16
        assert result.action == "exam_schedule_created"

    def test_exam_on_a_weekday_uses_that_date(self, interpreter, event_store, task_store):
        interpreter.interpret("English exam on Tuesday at 9 AM")
        assert [(e.title, e.date, e.time) for e in event_store.load_all()] == [
            ("English Exam", "2026-10-20", "09:00"),
        ]
        titles = [t.title for t in task_store.load_all()]
        assert "📚 English - Core Concepts" in titles

    def test_exam_on_a_numeric_date_uses_that_date(self, interpreter, event_store, task_store):
        interpreter.interpret("Physics exam on 10/21 at 10:00")
        assert [(e.title, e.date, e.time) for e in event_store.load_all()] == [
            ("Physics Exam", "2026-10-21", "10:00"),
        ]
        assert not any("Core Concepts" in t.title for t in task_store.load_all())

    def test_default_routine(self, interpreter, task_store):
        result = interpreter.interpret("My daily routine please")
        assert result.action == "routine_created"
        assert len(task_store.load_all()) == 6

    def test_custom_routine(self, interpreter, task_store):
        result = interpreter.interpret("Study timetable for history and geography")
        assert result.action == "custom_timetable_created"
        assert [t.time for t in task_store.load_all()] == ["14:00", "15:30", "16:00"]

    def test_plans_append_to_existing_tasks(self, interpreter, task_store):
        task_store.add_task("Gym", "07:00")
        interpreter.interpret("My daily routine please")
        assert len(task_store.load_all()) == 7


class TestCannedReplies:
    @pytest.mark.parametrize("message,text", [
        ("Give me study tips", STUDY_TIPS_TEXT),
        ("I'm so tired", MOTIVATION_TEXT),
        ("Any preparation advice?", EXAM_ADVICE_TEXT),
        ("hello", HELP_TEXT),
    ])
    def test_no_mutation(self, interpreter, storage, message, text):
        result = interpreter.interpret(message)
        assert result.text == text
        assert result.action is None
        assert storage.keys() == []
