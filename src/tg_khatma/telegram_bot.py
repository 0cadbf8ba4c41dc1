from __future__ import annotations

import logging
from datetime import datetime, timedelta

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import Application, CallbackQueryHandler, CommandHandler, ContextTypes

from tg_khatma.config import Settings
from tg_khatma.db import Database
from tg_khatma.duration import DurationParseError, parse_duration_to_minutes
from tg_khatma.errors import GOAL_COMPLETED, GOAL_NOT_FOUND, INVALID_TRANSITION, EntryValidationError, GoalStateError
from tg_khatma.messages import achievements_message, logged_message, progress_message, stats_message
from tg_khatma.quran_reference import QuranReference, default_reference
from tg_khatma.service import (
    active_goal,
    compute_analytics,
    goal_view,
    log_reading,
    pause_khatma,
    reconcile_goals,
    resume_khatma,
    start_khatma,
)
from tg_khatma.time_utils import now_local

logger = logging.getLogger(__name__)

MAX_KHATMA_DAYS = 3650

HELP_TEXT = "\n".join(
    [
        "📖 Khatma tracker",
        "",
        "/khatma <days> [name] - start a khatma finishing in <days> days",
        "/read <pages> <duration> <from> <to> [notes] - log a reading",
        "    from/to are surah or surah:ayah, e.g. /read 4 25m 2:1 2:141",
        "/progress - current khatma progress",
        "/stats - reading analytics",
        "/achievements - unlocked badges",
        "/pause, /resume - pause or resume the current khatma",
    ]
)

GOAL_ERROR_TEXT = {
    GOAL_NOT_FOUND: "No khatma found. Start one with /khatma 30",
    GOAL_COMPLETED: "This khatma is already completed. Start a new one with /khatma <days>",
    INVALID_TRANSITION: "That khatma cannot change to this state right now.",
}


def build_keyboard() -> InlineKeyboardMarkup:
    rows = [
        [
            InlineKeyboardButton("Progress", callback_data="progress"),
            InlineKeyboardButton("Stats", callback_data="stats"),
            InlineKeyboardButton("Achievements", callback_data="achievements"),
        ],
    ]
    return InlineKeyboardMarkup(rows)


def _db(context: ContextTypes.DEFAULT_TYPE) -> Database:
    db = context.application.bot_data.get("db")
    assert isinstance(db, Database)
    return db


def _settings(context: ContextTypes.DEFAULT_TYPE) -> Settings:
    settings = context.application.bot_data.get("settings")
    assert isinstance(settings, Settings)
    return settings


def _reference(context: ContextTypes.DEFAULT_TYPE) -> QuranReference:
    reference = context.application.bot_data.get("reference")
    return reference if isinstance(reference, QuranReference) else default_reference()


def _user_now(update: Update, context: ContextTypes.DEFAULT_TYPE) -> tuple[int, datetime]:
    assert update.effective_user is not None
    return update.effective_user.id, now_local(_settings(context).tz)


def parse_verse_ref(raw: str, reference: QuranReference, end: bool = False) -> tuple[int, int]:
    """Parse ``2`` or ``2:255`` into (surah, ayah).

    A bare surah number means its first ayah, or its last one when *end* is set.
    """
    surah_raw, _, ayah_raw = raw.strip().partition(":")
    try:
        surah = int(surah_raw)
    except ValueError:
        raise EntryValidationError("surah", f"'{raw}' is not a surah number") from None
    if not ayah_raw:
        if end and 1 <= surah <= len(reference):
            return surah, reference.ayah_count(surah)
        return surah, 1
    try:
        return surah, int(ayah_raw)
    except ValueError:
        raise EntryValidationError("ayah", f"'{raw}' is not a surah:ayah reference") from None


def _current_goal_id(db: Database, user_id: int, now: datetime) -> str | None:
    reconcile_goals(db, user_id, now)
    goal = active_goal(db, user_id)
    return goal.id if goal else None


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.effective_message.reply_text(HELP_TEXT, reply_markup=build_keyboard())


async def cmd_khatma(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, now = _user_now(update, context)
    if not context.args:
        await update.effective_message.reply_text("Usage: /khatma <days> [name]")
        return
    try:
        days = int(context.args[0])
    except ValueError:
        await update.effective_message.reply_text("Days must be a whole number, e.g. /khatma 30")
        return
    if not 0 < days <= MAX_KHATMA_DAYS:
        await update.effective_message.reply_text(f"Days must be between 1 and {MAX_KHATMA_DAYS}")
        return

    name = " ".join(context.args[1:]).strip() or f"Khatma {now.date().isoformat()}"
    db = _db(context)
    try:
        goal = start_khatma(db, user_id, name, now.date(), now.date() + timedelta(days=days), now)
    except EntryValidationError as exc:
        await update.effective_message.reply_text(f"Invalid {exc.field}: {exc.reason}")
        return

    view = goal_view(db, user_id, goal.id, now.date())
    await update.effective_message.reply_text(
        f"Started '{goal.name}': {goal.daily_target} pages/day until {goal.target_date.isoformat()}.\n\n"
        f"{progress_message(view)}",
        reply_markup=build_keyboard(),
    )


async def cmd_read(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, now = _user_now(update, context)
    if len(context.args) < 4:
        await update.effective_message.reply_text("Usage: /read <pages> <duration> <from> <to> [notes]")
        return

    db = _db(context)
    reference = _reference(context)
    try:
        pages = int(context.args[0])
    except ValueError:
        await update.effective_message.reply_text("Pages must be a whole number")
        return
    try:
        minutes = parse_duration_to_minutes(context.args[1])
    except DurationParseError as exc:
        await update.effective_message.reply_text(str(exc))
        return

    try:
        surah_from, ayah_from = parse_verse_ref(context.args[2], reference)
        surah_to, ayah_to = parse_verse_ref(context.args[3], reference, end=True)
        outcome = log_reading(
            db,
            user_id,
            surah_from=surah_from,
            ayah_from=ayah_from,
            surah_to=surah_to,
            ayah_to=ayah_to,
            pages_read=pages,
            duration_minutes=minutes,
            now=now,
            notes=" ".join(context.args[4:]),
            goal_id=_current_goal_id(db, user_id, now),
            reference=reference,
        )
    except EntryValidationError as exc:
        await update.effective_message.reply_text(f"Invalid {exc.field}: {exc.reason}")
        return
    except GoalStateError as exc:
        await update.effective_message.reply_text(GOAL_ERROR_TEXT.get(exc.kind, str(exc)))
        return

    await update.effective_message.reply_text(logged_message(outcome, reference), reply_markup=build_keyboard())


async def _send_progress(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, now = _user_now(update, context)
    db = _db(context)
    goal_id = _current_goal_id(db, user_id, now)
    if goal_id is None:
        await update.effective_message.reply_text(GOAL_ERROR_TEXT[GOAL_NOT_FOUND])
        return
    view = goal_view(db, user_id, goal_id, now.date())
    await update.effective_message.reply_text(progress_message(view), reply_markup=build_keyboard())


async def _send_stats(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, now = _user_now(update, context)
    view = compute_analytics(_db(context), user_id, now.date())
    await update.effective_message.reply_text(stats_message(view, _reference(context)), reply_markup=build_keyboard())


async def _send_achievements(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, now = _user_now(update, context)
    db = _db(context)
    goal_id = _current_goal_id(db, user_id, now)
    if goal_id is None:
        goals = db.list_goals(user_id)
        goal_id = goals[0].id if goals else None
    unlocked = goal_view(db, user_id, goal_id, now.date()).unlocked if goal_id else []
    await update.effective_message.reply_text(achievements_message(unlocked))


async def cmd_progress(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _send_progress(update, context)


async def cmd_stats(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _send_stats(update, context)


async def cmd_achievements(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _send_achievements(update, context)


async def _change_state(update: Update, context: ContextTypes.DEFAULT_TYPE, pause: bool) -> None:
    user_id, now = _user_now(update, context)
    db = _db(context)
    goal_id = _current_goal_id(db, user_id, now)
    if goal_id is None:
        await update.effective_message.reply_text(GOAL_ERROR_TEXT[GOAL_NOT_FOUND])
        return
    try:
        goal = pause_khatma(db, user_id, goal_id) if pause else resume_khatma(db, user_id, goal_id)
    except GoalStateError as exc:
        await update.effective_message.reply_text(GOAL_ERROR_TEXT.get(exc.kind, str(exc)))
        return
    verb = "paused" if pause else "resumed"
    await update.effective_message.reply_text(f"'{goal.name}' {verb}.")


async def cmd_pause(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _change_state(update, context, pause=True)


async def cmd_resume(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _change_state(update, context, pause=False)


async def handle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    assert query is not None
    await query.answer()

    data = query.data or ""
    if data == "progress":
        await _send_progress(update, context)
    elif data == "stats":
        await _send_stats(update, context)
    elif data == "achievements":
        await _send_achievements(update, context)


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Handler failed for update %s", update, exc_info=context.error)


def build_application(settings: Settings, db: Database, reference: QuranReference | None = None) -> Application:
    app = Application.builder().token(settings.telegram_bot_token).build()
    app.bot_data["db"] = db
    app.bot_data["settings"] = settings
    app.bot_data["reference"] = reference or default_reference()

    app.add_handler(CommandHandler("start", cmd_help))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("khatma", cmd_khatma))
    app.add_handler(CommandHandler("read", cmd_read))
    app.add_handler(CommandHandler("progress", cmd_progress))
    app.add_handler(CommandHandler("stats", cmd_stats))
    app.add_handler(CommandHandler("achievements", cmd_achievements))
    app.add_handler(CommandHandler("pause", cmd_pause))
    app.add_handler(CommandHandler("resume", cmd_resume))
    app.add_handler(CallbackQueryHandler(handle_callback))
    app.add_error_handler(handle_error)

    return app
