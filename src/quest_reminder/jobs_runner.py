from __future__ import annotations

import asyncio
import logging

from telegram import Bot
from telegram.error import TelegramError

from quest_reminder.config import Settings
from quest_reminder.db import Database
from quest_reminder.reminders import due_reminders
from quest_reminder.time_utils import now_local

logger = logging.getLogger(__name__)

JOB_NAMES = ("reminders",)


async def run_reminders(db: Database, settings: Settings) -> int:
    chat_id = settings.owner_chat_id or db.get_owner_chat_id()
    if chat_id is None:
        logger.info("no owner chat registered, skipping reminders")
        return 0

    now = now_local(settings.tz)
    pending = [r for r in due_reminders(db.list_pending_reminders(), now) if not db.was_event_sent(r.id)]
    if not pending:
        return 0

    sent = 0
    async with Bot(token=settings.telegram_bot_token) as bot:
        for reminder in pending:
            try:
                await bot.send_message(chat_id=chat_id, text=f"⏰ {reminder.title}\n{reminder.body}")
            except TelegramError:
                logger.exception("reminder send failed id=%s", reminder.id)
                continue
            db.mark_event_sent(reminder.id, now)
            sent += 1
    logger.info("sent reminders count=%s", sent)
    return sent


def run_job(job_name: str, db: Database, settings: Settings) -> None:
    if job_name == "reminders":
        asyncio.run(run_reminders(db, settings))
    else:
        raise SystemExit(f"Unknown job '{job_name}'. Expected one of: {', '.join(JOB_NAMES)}")
