from __future__ import annotations

import logging
import platform
from typing import Any

import httpx

from quest_reminder.config import Settings
from quest_reminder.errors import BugReportError
from quest_reminder.i18n import t

logger = logging.getLogger(__name__)

FROM_NAME = "QuestReminder user"


def build_payload(title: str, description: str, settings: Settings, lang: str) -> dict[str, Any]:
    return {
        "access_key": settings.bug_report_access_key or "",
        "from_name": FROM_NAME,
        "subject": f"QuestReminder Bug: {title}",
        "message": description,
        "title": title,
        "app_version": settings.app_version,
        "locale": lang,
        "device": platform.platform(terse=True),
    }


def submit_bug_report(title: str, description: str, settings: Settings, lang: str = "en") -> None:
    """POST a bug report; raises BugReportError with a user-facing message on any failure."""
    clean_title = title.strip()
    clean_description = description.strip()
    if not clean_title or not clean_description:
        raise BugReportError(t("bug_report_error_empty", lang))
    if not settings.bug_report_access_key:
        raise BugReportError(t("bug_report_error_missing_access_key", lang))

    payload = build_payload(clean_title, clean_description, settings, lang)
    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    try:
        with httpx.Client(timeout=30) as client:
            resp = client.post(settings.bug_report_endpoint, headers=headers, json=payload)
    except httpx.HTTPError as exc:
        logger.warning("bug report transport error: %s", exc)
        raise BugReportError(t("bug_report_error_submit", lang)) from exc

    if not 200 <= resp.status_code < 300:
        logger.warning("bug report rejected status=%s", resp.status_code)
        raise BugReportError(t("bug_report_error_submit", lang))

    try:
        data = resp.json()
    except ValueError:
        return
    if isinstance(data, dict) and data.get("success") is not True:
        details = str(data.get("message") or "").strip() or None
        raise BugReportError(details or t("bug_report_error_submit", lang), details=details)
