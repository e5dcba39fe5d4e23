from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from zoneinfo import ZoneInfo

from quest_reminder.db_models import ICONS, QUEST_TYPES, RECURRENCES, Quest
from quest_reminder.errors import ValidationError
from quest_reminder.lifecycle import QuestDraft

OPTION_PREFIXES = ("every:", "icon:", "on:")


def split_notes(text: str) -> tuple[str, str | None]:
    title, sep, notes = text.partition("|")
    return title.strip(), notes.strip() if sep else None


def draft_from_quest(quest: Quest) -> QuestDraft:
    return QuestDraft(
        title=quest.title,
        quest_type=quest.quest_type,
        notes=quest.notes,
        scheduled_date=quest.scheduled_date,
        recurrence=quest.recurrence,
        icon=quest.icon,
    )


def _parse_date(raw: str, tz: str) -> datetime:
    try:
        day = date.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError(f"Invalid date '{raw}', expected YYYY-MM-DD") from exc
    return datetime(day.year, day.month, day.day, tzinfo=ZoneInfo(tz))


def parse_quest_args(args: list[str], tz: str, base: QuestDraft | None = None) -> QuestDraft:
    """Parse `<type> [every:none|daily|weekly] [icon:name] [on:YYYY-MM-DD] <title> [| notes]`.

    With ``base`` (editing) the type is optional and anything not given keeps
    the base value.
    """
    tokens = list(args)
    if tokens and tokens[0].lower() in QUEST_TYPES:
        quest_type = tokens.pop(0).lower()
    elif base is not None:
        quest_type = base.quest_type
    else:
        raise ValidationError(f"Quest type must be one of: {', '.join(QUEST_TYPES)}")

    draft = base or QuestDraft(title="")
    draft = replace(draft, quest_type=quest_type)
    while tokens and tokens[0].lower().startswith(OPTION_PREFIXES):
        key, _, value = tokens.pop(0).partition(":")
        key = key.lower()
        value = value.lower()
        if key == "every":
            if value not in RECURRENCES:
                raise ValidationError(f"Recurrence must be one of: {', '.join(RECURRENCES)}")
            draft = replace(draft, recurrence=value)
        elif key == "icon":
            if value not in ICONS:
                raise ValidationError(f"Icon must be one of: {', '.join(ICONS)}")
            draft = replace(draft, icon=value)
        else:
            draft = replace(draft, scheduled_date=_parse_date(value, tz))

    title, notes = split_notes(" ".join(tokens))
    if title:
        draft = replace(draft, title=title)
    if notes is not None:
        draft = replace(draft, notes=notes)
    if not draft.title.strip():
        raise ValidationError("Quest title must not be empty.")
    return draft
