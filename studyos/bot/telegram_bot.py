"""
StudyOS Assistant — Telegram Bot.

Telegram is the user interface. Commands map onto the core services; any
other text goes to the chat command interpreter. Views (scheduler,
calendar, events...) are rendered as chat messages.

Unauthorized Telegram users are silently ignored. The StudyOS login
(/register, /login) only selects whose data is shown.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from functools import wraps
from typing import Any, Callable, Coroutine

from telegram import ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)

from studyos.config import settings
from studyos.core.accounts import AccountService
from studyos.core.errors import StudyOSError
from studyos.core.extractors import extract_date, format_12h, format_long_date
from studyos.core.goal_timetable import GoalTracker
from studyos.core.interpreter import WELCOME_TEXT, CommandInterpreter
from studyos.core.profile import ProfileService, age, birthday_status
from studyos.core.scheduler import (
    NotificationDispatcher,
    NotificationPermission,
    NotificationScheduler,
    ReminderPoller,
)
from studyos.data.db import LocalStorage
from studyos.data.models import UserProfile
from studyos.data.stores import EventStore, ImportantDateStore, TaskStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Security: silent-ignore decorator
# ---------------------------------------------------------------------------


def authorized_only(
    func: Callable[..., Coroutine[Any, Any, Any]],
) -> Callable[..., Coroutine[Any, Any, Any]]:
    """Decorator that silently ignores messages from unauthorized users."""

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Any:
        user = update.effective_user
        if user is None or user.id not in settings.ALLOWED_USER_IDS:
            uid = user.id if user else "unknown"
            logger.warning("Unauthorized access attempt from user_id=%s", uid)
            return None
        return await func(update, context)

    return wrapper


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _storage(context: ContextTypes.DEFAULT_TYPE) -> LocalStorage:
    return context.bot_data["storage"]


def _plain(text: str) -> str:
    """Chat replies are sent as plain text; drop markdown emphasis."""
    return text.replace("**", "")


def _index_arg(context: ContextTypes.DEFAULT_TYPE, items: list) -> Any | None:
    """The item picked by a 1-based number in the first command argument."""
    if not context.args:
        return None
    try:
        index = int(context.args[0])
    except ValueError:
        return None
    if 1 <= index <= len(items):
        return items[index - 1]
    return None


async def _reply_error(update: Update, command: str, exc: Exception) -> None:
    if isinstance(exc, StudyOSError):
        await update.message.reply_text(str(exc))
        return
    logger.error("%s error: %s", command, exc)
    await update.message.reply_text("Something went wrong. Please try again.")


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


def render_scheduler(storage: LocalStorage) -> str:
    tasks = TaskStore(storage).sorted_tasks()
    if not tasks:
        return "📅 No tasks scheduled. Use /addtask or just tell me what to add."
    lines = ["📅 Your schedule:\n"]
    for n, task in enumerate(tasks, start=1):
        mark = "✅" if task.completed else "⬜"
        lines.append(f"{n}. {mark} {format_12h(task.time)}  {task.title} [{task.priority}]")
    return "\n".join(lines)


def render_events(storage: LocalStorage) -> str:
    events = EventStore(storage).sorted_events()
    if not events:
        return "🎓 No events yet. Try: 'Add seminar next Monday at 10 AM'"
    lines = ["🎓 Your events:\n"]
    for n, event in enumerate(events, start=1):
        when = f"{event.date} {event.time}".strip()
        place = f" @ {event.location}" if event.location else ""
        lines.append(f"{n}. {event.title} ({event.type}) — {when}{place}")
    return "\n".join(lines)


def render_calendar(storage: LocalStorage, day: date) -> str:
    iso = day.isoformat()
    events = [e for e in EventStore(storage).sorted_events() if e.date == iso]
    marked = ImportantDateStore(storage).on_date(iso)
    lines = [f"🗓️ {format_long_date(iso)}\n"]
    for item in marked:
        lines.append(f"⭐ {item.title}")
    for event in events:
        lines.append(f"• {event.time or '--:--'}  {event.title}")
    if not marked and not events:
        lines.append("Nothing planned for this day.")
    return "\n".join(lines)


def render_analytics(storage: LocalStorage) -> str:
    tasks = TaskStore(storage).load_all()
    done = sum(1 for t in tasks if t.completed)
    rate = round(done * 100 / len(tasks)) if tasks else 0
    by_priority = {p: sum(1 for t in tasks if t.priority == p) for p in ("high", "medium", "low")}
    today = date.today().isoformat()
    upcoming = sum(1 for e in EventStore(storage).load_all() if e.date >= today)
    stars = GoalTracker(storage).progress().stars_earned
    return (
        "📊 Your analytics:\n\n"
        f"Tasks: {len(tasks)} total, {done} completed ({rate}%)\n"
        f"Priority: {by_priority['high']} high, {by_priority['medium']} medium, {by_priority['low']} low\n"
        f"Upcoming events: {upcoming}\n"
        f"Stars earned: ⭐ {stars}"
    )


def render_profile(storage: LocalStorage) -> str:
    profile = ProfileService(storage).load()
    if not profile.name:
        return (
            "👤 No profile yet.\n"
            "Set one with: /setprofile name=Alex birthday=2004-05-17 college=MIT course=CS year=2"
        )
    today = date.today()
    lines = [
        f"👤 {profile.name}",
        f"Email: {profile.email or '-'}",
        f"College: {profile.college or '-'}",
        f"Course: {profile.course or '-'}  Year: {profile.year or '-'}",
    ]
    status = birthday_status(profile, today)
    if status is not None:
        years = age(profile, today)
        lines.append(f"Birthday: {profile.birthday} (age {years})")
        if status.is_birthday:
            lines.append("🎂 It's your birthday today!")
        else:
            lines.append(f"🎂 {status.days_until} days until your birthday")
    return "\n".join(lines)


def render_goal_timetable(storage: LocalStorage) -> str:
    tracker = GoalTracker(storage)
    goal = tracker.goal()
    if goal is None:
        return "🎯 No goals yet. Set them with: /goal <short-term goal> | <long-term goal>"
    lines = [
        f"🎯 Short-term: {goal.short_term}",
        f"🏁 Long-term: {goal.long_term}",
        "",
    ]
    for n, entry in enumerate(tracker.timetable(), start=1):
        mark = "✅" if entry.completed else "⬜"
        star = " ⭐" if entry.star_claimed else ""
        lines.append(f"{n}. {mark} {entry.time} ({entry.duration}) {entry.title}{star}")
    lines += [
        "",
        f"Progress: {tracker.progress_percentage()}% — {tracker.motivational_message()}",
        f"Stars: {tracker.progress().stars_earned} — {tracker.star_milestone_message()}",
    ]
    return "\n".join(lines)


def render_view(view: str, storage: LocalStorage) -> str:
    if view == "scheduler":
        return render_scheduler(storage)
    if view == "events":
        return render_events(storage)
    if view == "calendar":
        return render_calendar(storage, date.today())
    if view == "analytics":
        return render_analytics(storage)
    if view == "profile":
        return render_profile(storage)
    if view == "goaltimetable":
        return render_goal_timetable(storage)
    return _plain(WELCOME_TEXT)


# ---------------------------------------------------------------------------
# Basic commands
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — welcome message (and a birthday greeting when due)."""
    await update.message.reply_text(_plain(WELCOME_TEXT))
    wish = ProfileService(_storage(context)).birthday_wish()
    if wish:
        await update.message.reply_text(wish)


@authorized_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — list available commands."""
    await update.message.reply_text(
        "Available commands:\n"
        "/register <email> <password> <password> — Create an account\n"
        "/login <email> <password> — Log in\n"
        "/logout — Log out (your data is kept)\n"
        "/whoami — Show the logged-in account\n"
        "/tasks — Show your schedule\n"
        "/addtask — Add a task step by step\n"
        "/done <n> — Mark task n as completed\n"
        "/deletetask <n> — Delete task n\n"
        "/cleartasks — Delete all tasks\n"
        "/events — List events\n"
        "/deleteevent <n> — Delete event n\n"
        "/calendar [date] — Events and marked dates for a day\n"
        "/profile — Show your profile\n"
        "/setprofile key=value ... — Update your profile\n"
        "/goal <short-term> | <long-term> — Set goals and build a timetable\n"
        "/timetable — Show the goal timetable\n"
        "/tick <n> — Toggle timetable entry n\n"
        "/claim <n> — Claim the star for entry n\n"
        "/stars — Star count\n"
        "/inbox — Recent reminders\n"
        "/notify on|off — Push reminders to Telegram\n\n"
        "Or just write to me: 'Add homework at 5 PM', 'Show my calendar'..."
    )


# ---------------------------------------------------------------------------
# Account commands
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_register(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /register <email> <password> <confirm>."""
    args = context.args or []
    if len(args) != 3:
        await update.message.reply_text("Usage: /register <email> <password> <confirm password>")
        return
    try:
        email = AccountService(_storage(context)).register(*args)
    except Exception as exc:
        await _reply_error(update, "/register", exc)
        return
    await update.message.reply_text(f"✅ Account created. Logged in as {email}.")


@authorized_only
async def cmd_login(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /login <email> <password>."""
    args = context.args or []
    if len(args) != 2:
        await update.message.reply_text("Usage: /login <email> <password>")
        return
    storage = _storage(context)
    try:
        email = AccountService(storage).login(*args)
    except Exception as exc:
        await _reply_error(update, "/login", exc)
        return
    await update.message.reply_text(f"👋 Welcome back, {email}!")
    wish = ProfileService(storage).birthday_wish()
    if wish:
        await update.message.reply_text(wish)


@authorized_only
async def cmd_logout(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    AccountService(_storage(context)).logout()
    await update.message.reply_text("Logged out. Your data is kept for next time.")


@authorized_only
async def cmd_whoami(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = AccountService(_storage(context)).current_user()
    await update.message.reply_text(f"Logged in as {user}" if user else "Not logged in (shared data).")


# ---------------------------------------------------------------------------
# Task commands
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_tasks(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(render_scheduler(_storage(context)))


@authorized_only
async def cmd_done(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /done <n> — mark the n-th task of /tasks as completed."""
    store = TaskStore(_storage(context))
    task = _index_arg(context, store.sorted_tasks())
    if task is None:
        await update.message.reply_text("Usage: /done <n>\nUse /tasks to see the numbers.")
        return
    store.set_completed(task.id)
    await update.message.reply_text(f"✅ Completed: {task.title}")


@authorized_only
async def cmd_deletetask(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    store = TaskStore(_storage(context))
    task = _index_arg(context, store.sorted_tasks())
    if task is None:
        await update.message.reply_text("Usage: /deletetask <n>\nUse /tasks to see the numbers.")
        return
    store.remove(task.id)
    await update.message.reply_text(f"🗑️ Deleted: {task.title}")


@authorized_only
async def cmd_cleartasks(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    TaskStore(_storage(context)).clear()
    await update.message.reply_text("✅ All tasks cleared.")


# ConversationHandler states for /addtask
(
    TASK_TITLE,
    TASK_DESCRIPTION,
    TASK_TIME,
    TASK_PRIORITY,
) = range(4)


@authorized_only
async def cmd_addtask(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle /addtask — start task creation conversation."""
    await update.message.reply_text("What's the task? (e.g., 'Physics assignment')")
    return TASK_TITLE


async def addtask_title(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    title = update.message.text.strip()
    if not title:
        await update.message.reply_text("Please enter a title.")
        return TASK_TITLE
    context.user_data["task_title"] = title
    await update.message.reply_text("Add a short description, or send '-' to skip.")
    return TASK_DESCRIPTION


async def addtask_description(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    text = update.message.text.strip()
    context.user_data["task_description"] = "" if text == "-" else text
    await update.message.reply_text("What time? (HH:MM, 24h, e.g. 17:30)")
    return TASK_TIME


async def addtask_time(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    text = update.message.text.strip()
    try:
        parsed = datetime.strptime(text, "%H:%M")
    except ValueError:
        await update.message.reply_text("Please use HH:MM, e.g. 09:00 or 17:30.")
        return TASK_TIME
    context.user_data["task_time"] = parsed.strftime("%H:%M")
    keyboard = ReplyKeyboardMarkup(
        [["high", "medium", "low"]],
        one_time_keyboard=True,
        resize_keyboard=True,
    )
    await update.message.reply_text("Priority?", reply_markup=keyboard)
    return TASK_PRIORITY


async def addtask_priority(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    priority = update.message.text.strip().lower()
    if priority not in ("high", "medium", "low"):
        await update.message.reply_text("Please choose high, medium or low.")
        return TASK_PRIORITY

    data = context.user_data
    try:
        task = TaskStore(_storage(context)).add_task(
            title=data.get("task_title", ""),
            time=data.get("task_time", ""),
            priority=priority,
            description=data.get("task_description", ""),
        )
    except Exception as exc:
        await _reply_error(update, "/addtask", exc)
        _clear_task_data(context)
        return ConversationHandler.END

    _clear_task_data(context)
    await update.message.reply_text(
        f"✅ Task added: {task.title} at {format_12h(task.time)} ({task.priority})\n"
        "You'll get a reminder 5 minutes before and at start time.",
        reply_markup=ReplyKeyboardRemove(),
    )
    return ConversationHandler.END


async def addtask_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    _clear_task_data(context)
    await update.message.reply_text("Task creation cancelled.", reply_markup=ReplyKeyboardRemove())
    return ConversationHandler.END


def _clear_task_data(context: ContextTypes.DEFAULT_TYPE) -> None:
    for key in ("task_title", "task_description", "task_time"):
        context.user_data.pop(key, None)


# ---------------------------------------------------------------------------
# Events & calendar
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_events(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(render_events(_storage(context)))


@authorized_only
async def cmd_deleteevent(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    store = EventStore(_storage(context))
    event = _index_arg(context, store.sorted_events())
    if event is None:
        await update.message.reply_text("Usage: /deleteevent <n>\nUse /events to see the numbers.")
        return
    store.remove(event.id)
    await update.message.reply_text(f"🗑️ Deleted event: {event.title}")


@authorized_only
async def cmd_calendar(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /calendar [date] — accepts 'tomorrow', 'friday', '2026-12-25'..."""
    today = date.today()
    day = today
    if context.args:
        resolved = extract_date(" ".join(context.args), today)
        if not resolved:
            await update.message.reply_text("Couldn't read that date. Try /calendar 2026-12-25 or /calendar tomorrow")
            return
        day = date.fromisoformat(resolved)
    await update.message.reply_text(render_calendar(_storage(context), day))


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

_PROFILE_PAIR = re.compile(r'(\w+)=("[^"]*"|\S+)')
_PROFILE_FIELDS = ("name", "email", "birthday", "college", "course", "year")


@authorized_only
async def cmd_profile(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(render_profile(_storage(context)))


@authorized_only
async def cmd_setprofile(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /setprofile name="Alex Doe" birthday=2004-05-17 ..."""
    text = " ".join(context.args or [])
    updates = {key.lower(): value.strip('"') for key, value in _PROFILE_PAIR.findall(text)}
    unknown = sorted(set(updates) - set(_PROFILE_FIELDS))
    if not updates or unknown:
        await update.message.reply_text(
            "Usage: /setprofile name=Alex birthday=2004-05-17 college=MIT course=CS year=2\n"
            f"Fields: {', '.join(_PROFILE_FIELDS)}"
        )
        return

    service = ProfileService(_storage(context))
    profile = UserProfile(**{**service.load().model_dump(), **updates})
    try:
        service.save(profile)
    except Exception as exc:
        await _reply_error(update, "/setprofile", exc)
        return
    await update.message.reply_text("✅ Profile saved.\n\n" + render_profile(_storage(context)))


# ---------------------------------------------------------------------------
# Goals & stars
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_goal(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /goal <short-term> | <long-term>."""
    text = " ".join(context.args or [])
    short_term, _, long_term = text.partition("|")
    storage = _storage(context)
    try:
        GoalTracker(storage).save_goal(short_term, long_term)
    except Exception as exc:
        await _reply_error(update, "/goal", exc)
        return
    await update.message.reply_text(
        "🎯 Goals saved! Your timetable is ready:\n\n" + render_goal_timetable(storage)
    )


@authorized_only
async def cmd_timetable(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(render_goal_timetable(_storage(context)))


@authorized_only
async def cmd_tick(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /tick <n> — toggle completion of timetable entry n."""
    tracker = GoalTracker(_storage(context))
    entry = _index_arg(context, tracker.timetable())
    if entry is None:
        await update.message.reply_text("Usage: /tick <n>\nUse /timetable to see the numbers.")
        return
    try:
        entry = tracker.toggle_complete(entry.id)
    except Exception as exc:
        await _reply_error(update, "/tick", exc)
        return

    if not entry.completed:
        await update.message.reply_text(f"↩️ {entry.title} marked as not done.")
        return
    msg = f"🎉 Task Completed: {entry.title}"
    if not entry.star_claimed:
        msg += f"\nClaim your star with /claim {context.args[0]} ⭐"
    if tracker.progress_percentage() == 100 and tracker.trigger_reward():
        msg += "\n🏆 Every entry done! Bonus star awarded!"
    await update.message.reply_text(msg)


@authorized_only
async def cmd_claim(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    tracker = GoalTracker(_storage(context))
    entry = _index_arg(context, tracker.timetable())
    if entry is None:
        await update.message.reply_text("Usage: /claim <n>\nUse /timetable to see the numbers.")
        return
    if not tracker.claim_star(entry.id):
        await update.message.reply_text("No star to claim here. Complete the entry first (/tick).")
        return
    stars = tracker.progress().stars_earned
    await update.message.reply_text(f"⭐ Star Claimed Successfully! You now have {stars} stars!")


@authorized_only
async def cmd_stars(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    tracker = GoalTracker(_storage(context))
    stars = tracker.progress().stars_earned
    await update.message.reply_text(f"⭐ {stars} stars\n{tracker.star_milestone_message()}")


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_inbox(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    dispatcher: NotificationDispatcher = context.bot_data["dispatcher"]
    items = dispatcher.drain_inbox()
    if not items:
        await update.message.reply_text("🔕 No new reminders.")
        return
    lines = [f"{n.created_at:%H:%M}  {n.title}\n        {n.body}" for n in items]
    await update.message.reply_text("🔔 Reminders:\n\n" + "\n".join(lines))


@authorized_only
async def cmd_notify(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    dispatcher: NotificationDispatcher = context.bot_data["dispatcher"]
    choice = (context.args or [""])[0].lower()
    if choice == "on":
        dispatcher.set_permission(NotificationPermission.GRANTED)
        await update.message.reply_text("🔔 Reminders will be pushed to this chat.")
    elif choice == "off":
        dispatcher.set_permission(NotificationPermission.DENIED)
        await update.message.reply_text("🔕 Push reminders off. They stay in /inbox.")
    else:
        await update.message.reply_text(
            f"Usage: /notify on|off (currently {dispatcher.permission.value})"
        )


# ---------------------------------------------------------------------------
# Free text -> command interpreter
# ---------------------------------------------------------------------------


async def _navigate_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Send the view a chat message pointed at; runs from the job queue."""
    job = context.job
    await context.bot.send_message(chat_id=job.chat_id, text=render_view(job.data, _storage(context)))


@authorized_only
async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text messages — run the command interpreter."""
    storage = _storage(context)
    interpreter = CommandInterpreter(
        TaskStore(storage), EventStore(storage), ImportantDateStore(storage),
    )
    try:
        result = interpreter.interpret(update.message.text)
    except Exception as exc:
        logger.error("Interpreter error: %s", exc)
        await update.message.reply_text("Sorry, something went wrong. Please try again.")
        return

    if result.action:
        logger.info("Chat action: %s", result.action)
    await update.message.reply_text(_plain(result.text))

    if result.navigate_to:
        context.job_queue.run_once(
            _navigate_job,
            when=result.navigate_delay,
            chat_id=update.effective_chat.id,
            data=result.navigate_to,
            name=f"navigate_{result.navigate_to}",
        )


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------


async def _post_init(app: Application) -> None:
    app.bot_data["dispatcher"].request_permission()
    app.bot_data["poller"].start()


async def _post_shutdown(app: Application) -> None:
    app.bot_data["poller"].stop()


def build_app(storage: LocalStorage | None = None) -> Application:
    """Build and configure the Telegram Application with all handlers.

    The reminder poller is started in post_init and stopped in
    post_shutdown, so it lives exactly as long as the application.
    """
    from studyos.adapters.telegram_notifier import TelegramNotifier

    app = (
        ApplicationBuilder()
        .token(settings.TELEGRAM_BOT_TOKEN)
        .post_init(_post_init)
        .post_shutdown(_post_shutdown)
        .build()
    )

    storage = storage or LocalStorage()
    dispatcher = NotificationDispatcher(port=TelegramNotifier(app.bot))
    scheduler = NotificationScheduler(TaskStore(storage), dispatcher)
    app.bot_data["storage"] = storage
    app.bot_data["dispatcher"] = dispatcher
    app.bot_data["poller"] = ReminderPoller(scheduler, app.job_queue)

    commands = {
        "start": cmd_start,
        "help": cmd_help,
        "register": cmd_register,
        "login": cmd_login,
        "logout": cmd_logout,
        "whoami": cmd_whoami,
        "tasks": cmd_tasks,
        "done": cmd_done,
        "deletetask": cmd_deletetask,
        "cleartasks": cmd_cleartasks,
        "events": cmd_events,
        "deleteevent": cmd_deleteevent,
        "calendar": cmd_calendar,
        "profile": cmd_profile,
        "setprofile": cmd_setprofile,
        "goal": cmd_goal,
        "timetable": cmd_timetable,
        "tick": cmd_tick,
        "claim": cmd_claim,
        "stars": cmd_stars,
        "inbox": cmd_inbox,
        "notify": cmd_notify,
    }
    for name, handler in commands.items():
        app.add_handler(CommandHandler(name, handler))

    # /addtask conversation handler
    _text = filters.TEXT & ~filters.COMMAND
    addtask_conv = ConversationHandler(
        entry_points=[CommandHandler("addtask", cmd_addtask)],
        states={
            TASK_TITLE: [MessageHandler(_text, addtask_title)],
            TASK_DESCRIPTION: [MessageHandler(_text, addtask_description)],
            TASK_TIME: [MessageHandler(_text, addtask_time)],
            TASK_PRIORITY: [MessageHandler(_text, addtask_priority)],
        },
        fallbacks=[CommandHandler("cancel", addtask_cancel)],
    )
    app.add_handler(addtask_conv)

    # Text messages (non-command)
    app.add_handler(MessageHandler(_text, handle_text))

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def main() -> None:
    """Entry point: build the app and start polling."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting StudyOS Assistant bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
