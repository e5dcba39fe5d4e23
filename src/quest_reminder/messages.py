from __future__ import annotations

from datetime import datetime

from quest_reminder.db_models import Quest
from quest_reminder.i18n import t
from quest_reminder.lifecycle import QuestTracker, scheduled_day
from quest_reminder.time_utils import start_of_day

ICON_EMOJI = {
    "flame": "🔥",
    "star": "⭐",
    "bolt": "⚡",
    "book": "📖",
    "dumbbell": "🏋️",
    "heart": "❤️",
    "leaf": "🌿",
    "trophy": "🏆",
}

REF_LENGTH = 8


def short_ref(quest: Quest) -> str:
    return quest.id[:REF_LENGTH]


def progress_bar(ratio: float, width: int = 10) -> str:
    filled = max(0, min(width, round(ratio * width)))
    return "█" * filled + "░" * (width - filled)


def quest_line(quest: Quest, now: datetime | None = None) -> str:
    mark = "✅" if quest.completed else ICON_EMOJI.get(quest.icon, "🔥")
    line = f"{mark} {quest.title} [{short_ref(quest)}]"
    if now is not None and scheduled_day(quest, now) < start_of_day(now):
        line += f" ({scheduled_day(quest, now).date().isoformat()})"
    if quest.recurrence != "none":
        line += f" ↻{quest.recurrence}"
    if quest.notes:
        line += f"\n    {quest.notes}"
    return line


def home_message(tracker: QuestTracker, now: datetime, lang: str = "en") -> str:
    daily = tracker.streak("daily").current_streak
    weekly = tracker.streak("weekly").current_streak
    lines = [
        f"🔥 {t('daily_streak', lang)}: {daily}   ⚡ {t('weekly_streak', lang)}: {weekly}",
    ]
    any_due = False
    for quest_type in ("daily", "weekly"):
        quests = tracker.home_quests(quest_type, now)
        if not quests:
            continue
        any_due = True
        ratio = tracker.progress(quest_type, now)
        lines.append("")
        lines.append(f"{t(quest_type + '_quests', lang)} {progress_bar(ratio)}")
        lines.extend(quest_line(q, now) for q in quests)
    if not any_due:
        lines.append("")
        lines.append(t("no_quests", lang))
    return "\n".join(lines)


def list_message(title: str, empty: str, quests: list[Quest]) -> str:
    if not quests:
        return empty
    return "\n".join([title, *(quest_line(q) for q in quests)])
