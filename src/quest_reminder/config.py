from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from quest_reminder.entitlements import EntitlementGate

DEFAULT_BUG_REPORT_ENDPOINT = "https://api.web3forms.com/submit"


@dataclass(frozen=True)
class Settings:
    telegram_bot_token: str
    database_path: Path
    tz: str
    owner_chat_id: int | None
    reminder_hour: int
    paywall_enabled: bool
    premium_unlocked: bool
    bug_report_endpoint: str
    bug_report_access_key: str | None
    app_version: str

    @property
    def entitlement_gate(self) -> EntitlementGate:
        return EntitlementGate(paywall_enabled=self.paywall_enabled, premium_unlocked=self.premium_unlocked)


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        raw = line.strip()
        if not raw or raw.startswith("#") or "=" not in raw:
            continue
        key, value = raw.split("=", maxsplit=1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_int(value: str | None, default: int | None) -> int | None:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def load_settings(require_token: bool = True) -> Settings:
    _load_env_file(Path(".env"))

    token = os.getenv("TELEGRAM_BOT_TOKEN", "")
    if require_token and not token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is required")

    reminder_hour = _parse_int(os.getenv("REMINDER_HOUR"), 9)
    if reminder_hour is None or not 0 <= reminder_hour <= 23:
        reminder_hour = 9

    return Settings(
        telegram_bot_token=token,
        database_path=Path(os.getenv("DATABASE_PATH", "./data/quests.db")),
        tz=os.getenv("TZ", "Europe/Lisbon"),
        owner_chat_id=_parse_int(os.getenv("OWNER_CHAT_ID"), None),
        reminder_hour=reminder_hour,
        paywall_enabled=_parse_bool(os.getenv("PAYWALL_ENABLED"), default=False),
        premium_unlocked=_parse_bool(os.getenv("PREMIUM_UNLOCKED"), default=True),
        bug_report_endpoint=os.getenv("BUG_REPORT_ENDPOINT", DEFAULT_BUG_REPORT_ENDPOINT),
        bug_report_access_key=os.getenv("BUG_REPORT_ACCESS_KEY") or None,
        app_version=os.getenv("APP_VERSION", "unknown"),
    )
