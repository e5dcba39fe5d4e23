from __future__ import annotations

from dataclasses import dataclass

from quest_reminder.db_models import DEFAULT_ICON, ICONS, RECURRENCES

FALLBACK_RECURRENCE = "daily"
FALLBACK_ICON = DEFAULT_ICON

PREMIUM_VALUES: dict[str, frozenset[str]] = {
    "recurrence": frozenset({"weekly"}),
    "icon": frozenset({"bolt", "dumbbell", "heart", "leaf", "trophy"}),
}

_ALL_VALUES: dict[str, tuple[str, ...]] = {
    "recurrence": RECURRENCES,
    "icon": ICONS,
}


@dataclass(frozen=True)
class EntitlementGate:
    paywall_enabled: bool = False
    premium_unlocked: bool = True

    @property
    def locked(self) -> bool:
        return self.paywall_enabled and not self.premium_unlocked


def requires_premium(field: str, value: str) -> bool:
    return value in PREMIUM_VALUES.get(field, frozenset())


def apply_gate(recurrence: str, icon: str, gate: EntitlementGate) -> tuple[str, str]:
    if not gate.locked:
        return recurrence, icon
    final_recurrence = FALLBACK_RECURRENCE if requires_premium("recurrence", recurrence) else recurrence
    final_icon = FALLBACK_ICON if requires_premium("icon", icon) else icon
    return final_recurrence, final_icon


def allowed_options(field: str, gate: EntitlementGate, current: str | None = None) -> list[str]:
    values = list(_ALL_VALUES.get(field, ()))
    if not gate.paywall_enabled:
        return values
    options = [v for v in values if not (requires_premium(field, v) and not gate.premium_unlocked)]
    if current is not None and current not in options:
        options.append(current)
    return options
