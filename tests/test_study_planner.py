"""Tests for studyos.core.study_planner — routine and exam timetables."""

from datetime import date, datetime

from studyos.core.study_planner import (
    EXAM_CLARIFICATION,
    build_custom_routine,
    build_default_routine,
    build_exam_plan,
    exam_date,
    parse_exam_sittings,
)

MORNING = datetime(2026, 10, 19, 10, 20)
EXAM_MESSAGE = "tomorrow i have english exam at 9:30 am and math at 2 pm"


def _titles_at(plan):
    return [(t.title, t.time) for t in plan.tasks]


class TestDefaultRoutine:
    def test_six_fixed_blocks(self):
        plan = build_default_routine()
        assert [(t.title, t.time, t.priority) for t in plan.tasks] == [
            ("Morning Study Session", "09:00", "high"),
            ("Attend Classes", "11:00", "high"),
            ("Lunch Break", "13:00", "low"),
            ("Afternoon Study", "15:00", "medium"),
            ("Exercise/Break", "17:00", "low"),
            ("Evening Revision", "19:00", "medium"),
        ]
        assert "Daily Study Routine Created" in plan.message

    def test_returns_fresh_copies(self):
        build_default_routine().tasks[0].title = "changed"
        assert build_default_routine().tasks[0].title == "Morning Study Session"


class TestCustomRoutine:
    def test_subjects_paired_with_times_and_breaks(self):
        plan = build_custom_routine(
            "study timetable english at 4:30 and maths at 6 pm for 2 hours", MORNING,
        )
        assert _titles_at(plan) == [
            ("📚 English Study", "16:30"),
            ("☕ Short Break", "18:30"),
            ("🔢 Mathematics Study", "18:00"),
        ]
        assert plan.tasks[0].priority == "high"
        assert plan.tasks[1].priority == "low"

    def test_subjects_only_start_afternoon(self):
        plan = build_custom_routine("study timetable for history and geography", MORNING)
        assert _titles_at(plan) == [
            ("📜 History Study", "14:00"),
            ("☕ Short Break", "15:30"),
            ("🌍 Geography Study", "16:00"),
        ]

    def test_subjects_only_late_in_day(self):
        plan = build_custom_routine("routine for english", datetime(2026, 10, 19, 16, 10))
        assert _titles_at(plan) == [("📚 English Study", "17:00")]

    def test_times_only(self):
        plan = build_custom_routine("time table 9:00 am and 11:00 am", MORNING)
        assert _titles_at(plan) == [
            ("📚 Study Session 1", "09:00"),
            ("📚 Study Session 2", "11:00"),
        ]

    def test_duplicate_times_collapse(self):
        plan = build_custom_routine("time table 5 pm, 17:00", MORNING)
        assert len(plan.tasks) == 1

    def test_nothing_detected(self):
        plan = build_custom_routine("daily routine please", MORNING)
        assert plan.tasks == []


class TestExamSittings:
    def test_exam_date_keywords(self):
        today = date(2026, 10, 19)
        assert exam_date("exam day after tomorrow", today) == date(2026, 10, 21)
        assert exam_date("exam the next day", today) == date(2026, 10, 21)
        assert exam_date("exam tomorrow", today) == date(2026, 10, 20)
        assert exam_date("exam soon", today) == today

    def test_exam_date_prefers_explicit_dates(self):
        today = date(2026, 10, 19)
        assert exam_date("english exam on tuesday", today) == date(2026, 10, 20)
        assert exam_date("physics exam on 10/21", today) == date(2026, 10, 21)
        assert exam_date("math exam 2026-10-20", today) == date(2026, 10, 20)

    def test_pairs_subjects_and_times(self):
        sittings = parse_exam_sittings(EXAM_MESSAGE, date(2026, 10, 19))
        assert [(s.subject, s.time, s.date) for s in sittings] == [
            ("English", "09:30", "2026-10-20"),
            ("Mathematics", "14:00", "2026-10-20"),
        ]

    def test_sorted_by_time(self):
        sittings = parse_exam_sittings("english at 3 pm, physics at 9 am", date(2026, 10, 19))
        assert [s.subject for s in sittings] == ["Physics", "English"]

    def test_missing_time_falls_back(self):
        sittings = parse_exam_sittings("physics and chemistry exam", date(2026, 10, 19))
        assert [s.time for s in sittings] == ["09:00", "09:00"]

    def test_times_without_subjects(self):
        sittings = parse_exam_sittings("exams at 10:00 and 13:00", date(2026, 10, 19))
        assert [s.subject for s in sittings] == ["Subject 1", "Subject 2"]


class TestExamPlan:
    def test_tomorrow_before_evening(self):
        plan = build_exam_plan(EXAM_MESSAGE, MORNING)
        assert _titles_at(plan) == [
            ("📚 English - Core Concepts", "18:00"),
            ("☕ Quick Break - Refresh", "18:30"),
            ("📖 English - Practice & Revision", "19:00"),
            ("📚 Mathematics - Core Concepts", "20:00"),
            ("☕ Quick Break - Refresh", "20:30"),
            ("📖 Mathematics - Practice & Revision", "21:00"),
            ("🍽️ Dinner Break", "21:00"),
            ("📝 Quick Revision - All Subjects", "22:30"),
            ("😴 Sleep Time - Rest Well!", "23:30"),
            ("⏰ Wake Up & Fresh Start", "07:00"),
            ("📚 English - Final Revision", "08:00"),
            ("🎒 Get Ready & Pack", "08:00"),
            ("📝 ENGLISH EXAM", "09:30"),
            ("☕ Break + Mathematics Revision", "10:00"),
            ("📝 MATHEMATICS EXAM", "14:00"),
            ("🎉 All Exams Done! Celebrate!", "15:00"),
        ]

    def test_every_subject_gets_evening_sessions(self):
        plan = build_exam_plan(
            "tomorrow english at 9 am, physics at 11 am, chemistry at 1 pm, history at 3 pm",
            MORNING,
        )
        titles = _titles_at(plan)
        for subject, core, practice in [
            ("English", "18:00", "18:30"),
            ("Physics", "19:00", "19:30"),
            ("Chemistry", "20:00", "20:30"),
            ("History", "21:00", "21:30"),
        ]:
            assert (f"📚 {subject} - Core Concepts", core) in titles
            assert (f"📖 {subject} - Practice & Revision", practice) in titles

    def test_crowded_evening_still_ends_before_revision(self):
        plan = build_exam_plan(
            "tomorrow english, physics, chemistry, history, biology and geography exams",
            MORNING,
        )
        practice = [t.time for t in plan.tasks if "Practice & Revision" in t.title]
        assert len(practice) == 6
        assert max(practice) < "22:30"

    def test_one_event_per_exam(self):
        plan = build_exam_plan(EXAM_MESSAGE, MORNING)
        assert [(e.title, e.date, e.time, e.type, e.location) for e in plan.events] == [
            ("English Exam", "2026-10-20", "09:30", "academic", "Exam Hall"),
            ("Mathematics Exam", "2026-10-20", "14:00", "academic", "Exam Hall"),
        ]

    def test_tomorrow_in_the_evening(self):
        plan = build_exam_plan(EXAM_MESSAGE, datetime(2026, 10, 19, 19, 30))
        titles = _titles_at(plan)
        assert titles[:3] == [
            ("📚 English - Quick Revision", "20:00"),
            ("📚 Mathematics - Quick Revision", "21:00"),
            ("😴 Sleep Time - Rest Well!", "23:30"),
        ]

    def test_tomorrow_late_night_only_sleep(self):
        plan = build_exam_plan(EXAM_MESSAGE, datetime(2026, 10, 19, 22, 30))
        assert plan.tasks[0].title == "😴 Sleep Time - Rest Well!"
        assert "quite late" in plan.message

    def test_exam_today_has_no_evening_block(self):
        plan = build_exam_plan("physics exam at 3 pm", MORNING)
        assert _titles_at(plan) == [
            ("⏰ Wake Up & Fresh Start", "13:00"),
            ("📚 Physics - Final Revision", "14:00"),
            ("🎒 Get Ready & Pack", "14:00"),
            ("📝 PHYSICS EXAM", "15:00"),
            ("🎉 All Exams Done! Celebrate!", "16:00"),
        ]

    def test_no_break_for_back_to_back_exams(self):
        plan = build_exam_plan("physics at 9 am and chemistry at 10 am", MORNING)
        assert not any(t.title.startswith("☕ Break +") for t in plan.tasks)

    def test_nothing_detected_asks_for_details(self):
        plan = build_exam_plan("help me prepare for exams", MORNING)
        assert plan.tasks == []
        assert plan.events == []
        assert plan.message == EXAM_CLARIFICATION
