from __future__ import annotations

import asyncio
import logging

from quest_reminder.config import load_settings
from quest_reminder.db import Database
from quest_reminder.logging_setup import setup_logging
from quest_reminder.telegram_bot import build_application

logger = logging.getLogger(__name__)


def run_bot() -> None:
    setup_logging()
    settings = load_settings()
    db = Database(settings.database_path)
    logger.info(
        "starting quest bot db=%s tz=%s reminder_hour=%s paywall_locked=%s",
        settings.database_path,
        settings.tz,
        settings.reminder_hour,
        settings.entitlement_gate.locked,
    )

    # Python 3.14 does not auto-create a default event loop in main thread.
    try:
        asyncio.get_event_loop()
    except RuntimeError:
        asyncio.set_event_loop(asyncio.new_event_loop())

    application = build_application(settings, db)
    application.run_polling()
