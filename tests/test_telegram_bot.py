"""Tests for studyos.bot.telegram_bot — Telegram bot handlers.

Tests command handlers, the /addtask conversation, view rendering and
authorization. Telegram itself is mocked; storage is a temp SQLite file.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram.ext import ConversationHandler

from studyos.bot.telegram_bot import (
    TASK_DESCRIPTION,
    TASK_PRIORITY,
    TASK_TIME,
    TASK_TITLE,
    _navigate_job,
    _plain,
    render_calendar,
    render_view,
)
from studyos.core.scheduler import Notification, NotificationDispatcher, NotificationPermission
from studyos.data.models import ImportantDate
from studyos.data.stores import EventStore, ImportantDateStore, TaskStore


def _make_update(text="", user_id=12345):
    """Create a mock Update with a text message from an authorized user."""
    update = MagicMock()
    update.message.text = text
    update.effective_user.id = user_id
    update.effective_chat.id = user_id
    update.message.reply_text = AsyncMock()
    return update


def _make_context(storage, args=None):
    context = MagicMock()
    context.args = args or []
    context.user_data = {}
    context.bot_data = {
        "storage": storage,
        "dispatcher": NotificationDispatcher(recipients=[]),
    }
    context.bot.send_message = AsyncMock()
    return context


def _reply(update) -> str:
    return update.message.reply_text.call_args.args[0]


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


class TestAuthorizedOnly:
    @pytest.mark.asyncio
    async def test_unknown_user_is_ignored(self, storage):
        from studyos.bot.telegram_bot import cmd_tasks

        update = _make_update(user_id=999)
        await cmd_tasks(update, _make_context(storage))
        update.message.reply_text.assert_not_called()

    @pytest.mark.asyncio
    async def test_known_user_gets_reply(self, storage):
        from studyos.bot.telegram_bot import cmd_tasks

        update = _make_update()
        await cmd_tasks(update, _make_context(storage))
        assert "No tasks scheduled" in _reply(update)


# ---------------------------------------------------------------------------
# Free text
# ---------------------------------------------------------------------------


class TestHandleText:
    @pytest.mark.asyncio
    async def test_adds_task_and_replies(self, storage):
        from studyos.bot.telegram_bot import handle_text

        update = _make_update("Add homework at 5 PM")
        context = _make_context(storage)
        await handle_text(update, context)
        assert [t.title for t in TaskStore(storage).load_all()] == ["Homework"]
        assert 'added "Homework"' in _reply(update)
        context.job_queue.run_once.assert_not_called()

    @pytest.mark.asyncio
    async def test_navigation_is_deferred(self, storage):
        from studyos.bot.telegram_bot import handle_text

        update = _make_update("Show my calendar")
        context = _make_context(storage)
        await handle_text(update, context)
        assert "Opening your calendar" in _reply(update)
        context.job_queue.run_once.assert_called_once()
        call = context.job_queue.run_once.call_args
        assert call.args[0] is _navigate_job
        assert call.kwargs["when"] == 1.0
        assert call.kwargs["chat_id"] == 12345
        assert call.kwargs["data"] == "calendar"

    @pytest.mark.asyncio
    async def test_navigate_job_sends_view(self, storage):
        context = _make_context(storage)
        context.job.chat_id = 12345
        context.job.data = "scheduler"
        await _navigate_job(context)
        kwargs = context.bot.send_message.call_args.kwargs
        assert kwargs["chat_id"] == 12345
        assert "No tasks scheduled" in kwargs["text"]

    @pytest.mark.asyncio
    async def test_poller_follows_application_lifecycle(self, storage):
        from studyos.bot.telegram_bot import _post_init, _post_shutdown

        app = MagicMock()
        poller = MagicMock()
        app.bot_data = {"dispatcher": NotificationDispatcher(recipients=[]), "poller": poller}
        await _post_init(app)
        poller.start.assert_called_once()
        await _post_shutdown(app)
        poller.stop.assert_called_once()

    def test_plain_strips_bold(self):
        assert _plain("**Hi** there") == "Hi there"


# ---------------------------------------------------------------------------
# /addtask conversation
# ---------------------------------------------------------------------------


class TestAddtaskConversation:
    @pytest.mark.asyncio
    async def test_full_flow(self, storage):
        from studyos.bot.telegram_bot import (
            addtask_description,
            addtask_priority,
            addtask_time,
            addtask_title,
            cmd_addtask,
        )

        context = _make_context(storage)
        assert await cmd_addtask(_make_update("/addtask"), context) == TASK_TITLE
        assert await addtask_title(_make_update("Physics assignment"), context) == TASK_DESCRIPTION
        assert await addtask_description(_make_update("-"), context) == TASK_TIME
        assert await addtask_time(_make_update("17:30"), context) == TASK_PRIORITY
        assert await addtask_priority(_make_update("High"), context) == ConversationHandler.END

        task = TaskStore(storage).load_all()[0]
        assert (task.title, task.time, task.priority, task.description) == (
            "Physics assignment", "17:30", "high", "",
        )
        assert "task_title" not in context.user_data

    @pytest.mark.asyncio
    async def test_bad_time_asks_again(self, storage):
        from studyos.bot.telegram_bot import addtask_time

        context = _make_context(storage)
        assert await addtask_time(_make_update("5pm"), context) == TASK_TIME
        assert "task_time" not in context.user_data

    @pytest.mark.asyncio
    async def test_bad_priority_asks_again(self, storage):
        from studyos.bot.telegram_bot import addtask_priority

        context = _make_context(storage)
        assert await addtask_priority(_make_update("urgent"), context) == TASK_PRIORITY

    @pytest.mark.asyncio
    async def test_cancel_clears_data(self, storage):
        from studyos.bot.telegram_bot import addtask_cancel

        context = _make_context(storage)
        context.user_data["task_title"] = "X"
        assert await addtask_cancel(_make_update("/cancel"), context) == ConversationHandler.END
        assert context.user_data == {}


# ---------------------------------------------------------------------------
# Task, event and account commands
# ---------------------------------------------------------------------------


class TestTaskCommands:
    @pytest.mark.asyncio
    async def test_done_by_number(self, storage):
        from studyos.bot.telegram_bot import cmd_done

        store = TaskStore(storage)
        store.add_task("Low", "08:00", "low")
        store.add_task("High", "20:00", "high")
        update = _make_update()
        await cmd_done(update, _make_context(storage, ["1"]))
        assert {t.title: t.completed for t in store.load_all()} == {"Low": False, "High": True}

    @pytest.mark.asyncio
    async def test_done_bad_number(self, storage):
        from studyos.bot.telegram_bot import cmd_done

        update = _make_update()
        await cmd_done(update, _make_context(storage, ["7"]))
        assert _reply(update).startswith("Usage")

    @pytest.mark.asyncio
    async def test_deleteevent(self, storage):
        from studyos.bot.telegram_bot import cmd_deleteevent

        EventStore(storage).add_event("Seminar", "2026-11-02", "10:00")
        await cmd_deleteevent(_make_update(), _make_context(storage, ["1"]))
        assert EventStore(storage).load_all() == []


class TestAccountCommands:
    @pytest.mark.asyncio
    async def test_register_then_whoami(self, storage):
        from studyos.bot.telegram_bot import cmd_register, cmd_whoami

        update = _make_update()
        await cmd_register(update, _make_context(storage, ["a@x.com", "secret1!", "secret1!"]))
        assert "Logged in as a@x.com" in _reply(update)

        update = _make_update()
        await cmd_whoami(update, _make_context(storage))
        assert _reply(update) == "Logged in as a@x.com"

    @pytest.mark.asyncio
    async def test_register_error_is_reported(self, storage):
        from studyos.bot.telegram_bot import cmd_register

        update = _make_update()
        await cmd_register(update, _make_context(storage, ["a@x.com", "abc", "abc"]))
        assert _reply(update).startswith("Invalid password!")

    @pytest.mark.asyncio
    async def test_bad_login(self, storage):
        from studyos.bot.telegram_bot import cmd_login

        update = _make_update()
        await cmd_login(update, _make_context(storage, ["a@x.com", "nope"]))
        assert _reply(update) == "Invalid email or password"


class TestProfileCommands:
    @pytest.mark.asyncio
    async def test_setprofile(self, storage):
        from studyos.bot.telegram_bot import cmd_setprofile

        update = _make_update()
        args = ['name="Alex', 'Doe"', "birthday=2004-05-17", "course=CS"]
        await cmd_setprofile(update, _make_context(storage, args))
        assert "Profile saved" in _reply(update)
        assert "Alex Doe" in _reply(update)

    @pytest.mark.asyncio
    async def test_setprofile_unknown_field(self, storage):
        from studyos.bot.telegram_bot import cmd_setprofile

        update = _make_update()
        await cmd_setprofile(update, _make_context(storage, ["shoe=42"]))
        assert _reply(update).startswith("Usage")


# ---------------------------------------------------------------------------
# Goals & notifications
# ---------------------------------------------------------------------------


class TestGoalCommands:
    @pytest.mark.asyncio
    async def test_goal_tick_claim(self, storage):
        from studyos.bot.telegram_bot import cmd_claim, cmd_goal, cmd_tick

        update = _make_update()
        await cmd_goal(update, _make_context(storage, ["Pass", "finals", "|", "Graduate"]))
        assert "Morning Review Session" in _reply(update)

        update = _make_update()
        await cmd_tick(update, _make_context(storage, ["1"]))
        assert "/claim 1" in _reply(update)

        update = _make_update()
        await cmd_claim(update, _make_context(storage, ["1"]))
        assert "You now have 1 stars" in _reply(update)

        update = _make_update()
        await cmd_claim(update, _make_context(storage, ["1"]))
        assert "No star to claim" in _reply(update)

    @pytest.mark.asyncio
    async def test_goal_needs_both_parts(self, storage):
        from studyos.bot.telegram_bot import cmd_goal

        update = _make_update()
        await cmd_goal(update, _make_context(storage, ["Pass", "finals"]))
        assert "both short-term and long-term" in _reply(update)


class TestNotificationCommands:
    @pytest.mark.asyncio
    async def test_notify_on_off(self, storage):
        from studyos.bot.telegram_bot import cmd_notify

        context = _make_context(storage, ["on"])
        await cmd_notify(_make_update(), context)
        assert context.bot_data["dispatcher"].permission is NotificationPermission.GRANTED
        context.args = ["off"]
        await cmd_notify(_make_update(), context)
        assert context.bot_data["dispatcher"].permission is NotificationPermission.DENIED

    @pytest.mark.asyncio
    async def test_inbox_drains(self, storage):
        from studyos.bot.telegram_bot import cmd_inbox

        context = _make_context(storage)
        await context.bot_data["dispatcher"].dispatch(
            Notification(title="🔔 Time to Start: Gym", body="It's time for: Gym", task_id="1")
        )
        update = _make_update()
        await cmd_inbox(update, context)
        assert "Time to Start: Gym" in _reply(update)

        update = _make_update()
        await cmd_inbox(update, context)
        assert "No new reminders" in _reply(update)


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


class TestViews:
    def test_calendar_shows_marked_dates_and_events(self, storage):
        ImportantDateStore(storage).add(ImportantDate(date="2026-12-25", title="Christmas"))
        EventStore(storage).add_event("Carol night", "2026-12-25", "19:00")
        text = render_calendar(storage, date(2026, 12, 25))
        assert "⭐ Christmas" in text
        assert "19:00  Carol night" in text

    @pytest.mark.parametrize("view,expected", [
        ("scheduler", "No tasks scheduled"),
        ("events", "No events yet"),
        ("analytics", "Tasks: 0 total"),
        ("profile", "No profile yet"),
        ("goaltimetable", "No goals yet"),
        ("chatbot", "study assistant"),
    ])
    def test_empty_views(self, storage, view, expected):
        assert expected in render_view(view, storage)
