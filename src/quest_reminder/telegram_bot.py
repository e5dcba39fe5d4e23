from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

from quest_reminder.bug_report import submit_bug_report
from quest_reminder.config import Settings
from quest_reminder.db import Database, Quest
from quest_reminder.entitlements import allowed_options
from quest_reminder.errors import BugReportError, ValidationError
from quest_reminder.i18n import normalize_language_code, t
from quest_reminder.lifecycle import QuestTracker
from quest_reminder.messages import home_message, list_message, short_ref
from quest_reminder.quest_parser import draft_from_quest, parse_quest_args, split_notes
from quest_reminder.reminders import ReminderPlanner
from quest_reminder.store import QuestStore
from quest_reminder.time_utils import now_local

logger = logging.getLogger(__name__)


def _db(context: ContextTypes.DEFAULT_TYPE) -> Database:
    db = context.application.bot_data.get("db")
    assert isinstance(db, Database)
    return db


def _settings(context: ContextTypes.DEFAULT_TYPE) -> Settings:
    settings = context.application.bot_data.get("settings")
    assert isinstance(settings, Settings)
    return settings


def _tracker(context: ContextTypes.DEFAULT_TYPE) -> QuestTracker:
    tracker = context.application.bot_data.get("tracker")
    assert isinstance(tracker, QuestTracker)
    return tracker


def _touch(update: Update, context: ContextTypes.DEFAULT_TYPE) -> tuple[datetime, str] | None:
    """Bind the owner chat and run the resume hook; None for foreign chats."""
    assert update.effective_chat is not None
    chat_id = update.effective_chat.id
    db = _db(context)
    settings = _settings(context)
    owner = settings.owner_chat_id or db.get_owner_chat_id()
    if owner is not None and owner != chat_id:
        logger.info("ignoring chat_id=%s, bound to another chat", chat_id)
        return None
    if owner is None:
        db.set_setting("owner_chat_id", chat_id)
        logger.info("bound owner chat_id=%s", chat_id)

    now = now_local(settings.tz)
    _tracker(context).resume(now)
    return now, db.get_language()


def _resolve(context: ContextTypes.DEFAULT_TYPE, include_deleted: bool = False) -> Quest | None:
    if not context.args:
        return None
    return _tracker(context).store.find(context.args[0], include_deleted=include_deleted)


def _usage(context: ContextTypes.DEFAULT_TYPE, key: str, lang: str, current: Quest | None = None) -> str:
    gate = _settings(context).entitlement_gate
    every = allowed_options("recurrence", gate, current.recurrence if current else None)
    icons = allowed_options("icon", gate, current.icon if current else None)
    hint = t("options_hint", lang, every="|".join(every), icons="|".join(icons))
    return f"{t(key, lang)}\n{hint}"


async def _reply(update: Update, text: str) -> None:
    assert update.effective_message is not None
    await update.effective_message.reply_text(text)


async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    touched = _touch(update, context)
    if touched is None:
        await _reply(update, t("not_owner"))
        return
    _, lang = touched
    await _reply(update, t("start", lang))


async def cmd_quests(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    touched = _touch(update, context)
    if touched is None:
        return
    now, lang = touched
    await _reply(update, home_message(_tracker(context), now, lang))


async def cmd_add(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    touched = _touch(update, context)
    if touched is None:
        return
    now, lang = touched
    try:
        draft = parse_quest_args(list(context.args or []), _settings(context).tz)
        quest = _tracker(context).add_quest(draft, now)
    except ValidationError as exc:
        await _reply(update, f"{exc}\n{_usage(context, 'add_usage', lang)}")
        return
    await _reply(update, t("quest_added", lang, title=quest.title, ref=short_ref(quest)))


async def cmd_edit(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    touched = _touch(update, context)
    if touched is None:
        return
    now, lang = touched
    quest = _resolve(context)
    if quest is None:
        await _reply(update, _usage(context, "edit_usage", lang))
        return
    tracker = _tracker(context)
    try:
        draft = parse_quest_args(list(context.args[1:]), _settings(context).tz, base=draft_from_quest(quest))
        updated = tracker.edit_quest(quest.id, draft, now)
    except ValidationError as exc:
        await _reply(update, f"{exc}\n{_usage(context, 'edit_usage', lang, quest)}")
        return
    if updated is None:
        await _reply(update, t("quest_not_found", lang, ref=context.args[0]))
        return
    await _reply(update, t("quest_updated", lang, title=updated.title))


async def cmd_done(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    touched = _touch(update, context)
    if touched is None:
        return
    now, lang = touched
    quest = _resolve(context)
    if quest is None:
        await _reply(update, t("ref_usage", lang, command="done"))
        return

    outcome = _tracker(context).toggle_quest(quest.id, now)
    if outcome is None:
        await _reply(update, t("quest_not_found", lang, ref=context.args[0]))
        return

    completed = outcome.rescheduled or outcome.quest.completed
    lines = [t("quest_done" if completed else "quest_undone", lang, title=outcome.quest.title)]
    if outcome.rescheduled and outcome.quest.scheduled_date is not None:
        lines.append(t("quest_rescheduled", lang, date=outcome.quest.scheduled_date.date().isoformat()))
    if outcome.celebrate:
        key = "weekly_complete" if outcome.quest.quest_type == "weekly" else "daily_complete"
        lines.append("")
        lines.append("✨ " + t(key, lang, streak=outcome.streak.current_streak))
    await _reply(update, "\n".join(lines))


async def _ref_command(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    command: str,
    message_key: str,
    action_name: str,
    include_deleted: bool = False,
) -> None:
    touched = _touch(update, context)
    if touched is None:
        return
    _, lang = touched
    quest = _resolve(context, include_deleted=include_deleted)
    if quest is None:
        await _reply(update, t("ref_usage", lang, command=command))
        return
    tracker = _tracker(context)
    getattr(tracker, action_name)(quest.id)
    await _reply(update, t(message_key, lang, title=quest.title))


async def cmd_delete(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _ref_command(update, context, "delete", "quest_deleted", "delete_quest")


async def cmd_restore(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _ref_command(update, context, "restore", "quest_restored", "restore_quest", include_deleted=True)


async def cmd_purge(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _ref_command(update, context, "purge", "quest_purged", "purge_quest", include_deleted=True)


async def cmd_unarchive(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _ref_command(update, context, "unarchive", "quest_restored", "restore_archived")


async def cmd_archive(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    touched = _touch(update, context)
    if touched is None:
        return
    _, lang = touched
    quests = _tracker(context).store.archived()
    await _reply(update, list_message(t("archive_title", lang), t("archive_empty", lang), quests))


async def cmd_trash(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    touched = _touch(update, context)
    if touched is None:
        return
    _, lang = touched
    quests = _tracker(context).store.trash()
    await _reply(update, list_message(t("trash_title", lang), t("trash_empty", lang), quests))


async def cmd_bug(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    touched = _touch(update, context)
    if touched is None:
        return
    _, lang = touched
    title, description = split_notes(" ".join(context.args or []))
    if not title or not description:
        await _reply(update, t("bug_usage", lang))
        return

    try:
        await asyncio.to_thread(submit_bug_report, title, description, _settings(context), lang)
    except BugReportError as exc:
        logger.warning("bug report failed: %s", exc)
        await _reply(update, f"{exc}\n\n{t('bug_report_retry', lang, title=title, description=description)}")
        return
    await _reply(update, t("bug_report_success", lang))


async def cmd_lang(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    touched = _touch(update, context)
    if touched is None:
        return
    _, lang = touched
    if not context.args:
        await _reply(update, t("lang_show", lang, code=lang))
        return
    code = normalize_language_code(context.args[0], default=lang)
    _db(context).set_setting("language_code", code)
    await _reply(update, t("lang_set", code, code=code))


def build_tracker(db: Database, settings: Settings) -> QuestTracker:
    store = QuestStore(db)
    store.subscribe(ReminderPlanner(db, settings.tz, settings.reminder_hour))
    return QuestTracker(store, gate=settings.entitlement_gate)


def build_application(settings: Settings, db: Database) -> Application:
    app = Application.builder().token(settings.telegram_bot_token).build()
    app.bot_data["db"] = db
    app.bot_data["settings"] = settings
    app.bot_data["tracker"] = build_tracker(db, settings)

    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("quests", cmd_quests))
    app.add_handler(CommandHandler("add", cmd_add))
    app.add_handler(CommandHandler("edit", cmd_edit))
    app.add_handler(CommandHandler("done", cmd_done))
    app.add_handler(CommandHandler("delete", cmd_delete))
    app.add_handler(CommandHandler("trash", cmd_trash))
    app.add_handler(CommandHandler("restore", cmd_restore))
    app.add_handler(CommandHandler("purge", cmd_purge))
    app.add_handler(CommandHandler("archive", cmd_archive))
    app.add_handler(CommandHandler("unarchive", cmd_unarchive))
    app.add_handler(CommandHandler("bug", cmd_bug))
    app.add_handler(CommandHandler("lang", cmd_lang))

    return app
