from __future__ import annotations

from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from quest_reminder.db import Database, Quest, StreakState
from quest_reminder.entitlements import EntitlementGate
from quest_reminder.errors import ValidationError
from quest_reminder.lifecycle import QuestDraft, QuestTracker, is_due_for_home
from quest_reminder.store import QuestStore


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Europe/Lisbon"))


def _tracker(tmp_path: Path, gate: EntitlementGate | None = None) -> QuestTracker:
    db = Database(tmp_path / "quests.db")
    return QuestTracker(QuestStore(db), gate=gate)


def _seed_streak(tracker: QuestTracker, state: StreakState, now: datetime) -> QuestTracker:
    states = tracker.streaks
    states[state.period] = state
    tracker.db.save_streak_states(states, now)
    return QuestTracker(QuestStore(tracker.db), gate=tracker.gate)


def _assert_soft_delete_invariant(quests: list[Quest]) -> None:
    for q in quests:
        if q.deleted:
            assert not q.archived
            assert not q.completed
            assert q.completed_at is None


def test_toggle_complete_then_incomplete_restores_streak(tmp_path: Path) -> None:
    today = _dt(2026, 2, 10, 9)
    tracker = _tracker(tmp_path)
    tracker = _seed_streak(tracker, StreakState(period="daily", current_streak=5, last_completion=_dt(2026, 2, 9, 0)), today)
    quest = tracker.add_quest(QuestDraft(title="Read 10 pages"), today)

    done = tracker.toggle_quest(quest.id, _dt(2026, 2, 10, 18))
    assert done is not None
    assert done.celebrate is True
    assert done.streak.current_streak == 6
    assert tracker.streak("daily").last_completion == _dt(2026, 2, 10, 0)

    undone = tracker.toggle_quest(quest.id, _dt(2026, 2, 10, 18, 5))
    assert undone is not None
    assert undone.celebrate is False
    assert tracker.streak("daily").current_streak == 5
    assert tracker.streak("daily").last_completion == _dt(2026, 2, 9, 0)

    reloaded = Database(tmp_path / "quests.db").load_streak_states()["daily"]
    assert reloaded.current_streak == 5
    assert reloaded.last_completion == _dt(2026, 2, 9, 0)
    assert reloaded.rollback_period_key is None


def test_second_uncomplete_does_not_touch_streak(tmp_path: Path) -> None:
    today = _dt(2026, 2, 10, 9)
    tracker = _tracker(tmp_path)
    tracker = _seed_streak(tracker, StreakState(period="daily", current_streak=2, last_completion=_dt(2026, 2, 9, 0)), today)
    a = tracker.add_quest(QuestDraft(title="A"), today)
    b = tracker.add_quest(QuestDraft(title="B"), today)

    tracker.toggle_quest(a.id, today)
    tracker.toggle_quest(b.id, today)
    assert tracker.streak("daily").current_streak == 3

    tracker.toggle_quest(a.id, today)
    after_first = tracker.streak("daily")
    assert after_first.current_streak == 2

    tracker.toggle_quest(b.id, today)
    assert tracker.streak("daily") == after_first


def test_streak_resets_after_gap(tmp_path: Path) -> None:
    today = _dt(2026, 2, 10, 9)
    tracker = _tracker(tmp_path)
    tracker = _seed_streak(tracker, StreakState(period="daily", current_streak=5, last_completion=_dt(2026, 2, 7, 0)), today)
    quest = tracker.add_quest(QuestDraft(title="Stretch"), today)

    outcome = tracker.toggle_quest(quest.id, today)
    assert outcome is not None
    assert outcome.streak.current_streak == 1


def test_partial_completion_does_not_count(tmp_path: Path) -> None:
    today = _dt(2026, 2, 10, 9)
    tracker = _tracker(tmp_path)
    a = tracker.add_quest(QuestDraft(title="A"), today)
    tracker.add_quest(QuestDraft(title="B"), today)

    outcome = tracker.toggle_quest(a.id, today)
    assert outcome is not None
    assert outcome.celebrate is False
    assert tracker.streak("daily").current_streak == 0
    assert tracker.progress("daily", today) == 0.5


def test_empty_due_set_never_counts(tmp_path: Path) -> None:
    today = _dt(2026, 2, 10, 9)
    tracker = _tracker(tmp_path)
    future = tracker.add_quest(QuestDraft(title="Later", scheduled_date=_dt(2026, 2, 13)), today)

    assert tracker.due_quests("daily", today) == []
    assert tracker.is_fully_completed("daily", today) is False

    outcome = tracker.toggle_quest(future.id, today)
    assert outcome is not None
    assert outcome.celebrate is False
    assert tracker.streak("daily").current_streak == 0


def test_due_filter_hides_future_quests(tmp_path: Path) -> None:
    today = _dt(2026, 2, 10, 9)
    tracker = _tracker(tmp_path)
    overdue = tracker.add_quest(QuestDraft(title="Overdue", scheduled_date=_dt(2026, 2, 7)), today)
    future = tracker.add_quest(QuestDraft(title="Future", scheduled_date=_dt(2026, 2, 13)), today)

    assert [q.id for q in tracker.due_quests("daily", today)] == [overdue.id]
    assert is_due_for_home(future, _dt(2026, 2, 13, 0, 1))
    assert {q.id for q in tracker.due_quests("daily", _dt(2026, 2, 13))} == {overdue.id, future.id}


def test_weekly_quests_drive_weekly_streak(tmp_path: Path) -> None:
    monday = _dt(2026, 2, 9, 9)
    tracker = _tracker(tmp_path)
    quest = tracker.add_quest(QuestDraft(title="Long run", quest_type="weekly"), monday)

    outcome = tracker.toggle_quest(quest.id, _dt(2026, 2, 12))
    assert outcome is not None
    assert outcome.celebrate is True
    assert tracker.streak("weekly").current_streak == 1
    assert tracker.streak("weekly").last_completion == _dt(2026, 2, 9, 0)
    assert tracker.streak("daily").current_streak == 0


class TestRecurrence:
    def test_daily_recurrence_moves_to_next_day(self, tmp_path: Path) -> None:
        today = _dt(2026, 2, 10, 9)
        tracker = _tracker(tmp_path)
        quest = tracker.add_quest(QuestDraft(title="Water plants", recurrence="daily"), today)

        outcome = tracker.toggle_quest(quest.id, today)
        assert outcome is not None
        assert outcome.rescheduled is True
        assert outcome.celebrate is True

        stored = tracker.store.quests
        assert len(stored) == 1
        assert stored[0].scheduled_date == _dt(2026, 2, 11, 0)
        assert stored[0].completed is False
        assert stored[0].completed_at is None
        assert tracker.due_quests("daily", today) == []

    def test_weekly_recurrence_moves_seven_days(self, tmp_path: Path) -> None:
        today = _dt(2026, 2, 10, 9)
        tracker = _tracker(tmp_path)
        quest = tracker.add_quest(QuestDraft(title="Review budget", recurrence="weekly"), today)

        outcome = tracker.toggle_quest(quest.id, today)
        assert outcome is not None
        assert outcome.quest.scheduled_date == _dt(2026, 2, 17, 0)

    def test_overdue_recurrence_steps_from_today(self, tmp_path: Path) -> None:
        today = _dt(2026, 2, 10, 9)
        tracker = _tracker(tmp_path)
        quest = tracker.add_quest(QuestDraft(title="Old", recurrence="daily", scheduled_date=_dt(2026, 2, 6)), today)

        outcome = tracker.toggle_quest(quest.id, today)
        assert outcome is not None
        assert outcome.quest.scheduled_date == _dt(2026, 2, 11, 0)

    def test_future_recurrence_steps_from_schedule(self, tmp_path: Path) -> None:
        today = _dt(2026, 2, 10, 9)
        tracker = _tracker(tmp_path)
        quest = tracker.add_quest(QuestDraft(title="Ahead", recurrence="daily", scheduled_date=_dt(2026, 2, 13)), today)

        outcome = tracker.toggle_quest(quest.id, today)
        assert outcome is not None
        assert outcome.quest.scheduled_date == _dt(2026, 2, 14, 0)


class TestArchiveSweep:
    def test_daily_completion_archived_next_day(self, tmp_path: Path) -> None:
        tracker = _tracker(tmp_path)
        quest = tracker.add_quest(QuestDraft(title="Journal"), _dt(2026, 2, 9, 8))
        tracker.toggle_quest(quest.id, _dt(2026, 2, 9, 20))

        outcome = tracker.resume(_dt(2026, 2, 10, 8))
        assert [q.id for q in outcome.archived] == [quest.id]
        assert tracker.store.get(quest.id).archived is True
        assert tracker.due_quests("daily", _dt(2026, 2, 10, 8)) == []

    def test_same_day_completion_stays_visible(self, tmp_path: Path) -> None:
        tracker = _tracker(tmp_path)
        quest = tracker.add_quest(QuestDraft(title="Journal"), _dt(2026, 2, 10, 6))
        tracker.toggle_quest(quest.id, _dt(2026, 2, 10, 7))

        outcome = tracker.resume(_dt(2026, 2, 10, 22))
        assert outcome.archived == []
        assert tracker.store.get(quest.id).archived is False

    def test_weekly_completion_archived_next_iso_week(self, tmp_path: Path) -> None:
        tracker = _tracker(tmp_path)
        quest = tracker.add_quest(QuestDraft(title="Groceries", quest_type="weekly"), _dt(2026, 2, 9, 8))
        tracker.toggle_quest(quest.id, _dt(2026, 2, 9, 9))

        assert tracker.resume(_dt(2026, 2, 15, 23)).archived == []
        assert [q.id for q in tracker.resume(_dt(2026, 2, 16, 8)).archived] == [quest.id]

    def test_restore_archived_clears_completion(self, tmp_path: Path) -> None:
        tracker = _tracker(tmp_path)
        quest = tracker.add_quest(QuestDraft(title="Journal"), _dt(2026, 2, 9, 8))
        tracker.toggle_quest(quest.id, _dt(2026, 2, 9, 20))
        tracker.resume(_dt(2026, 2, 10, 8))

        restored = tracker.restore_archived(quest.id)
        assert restored is not None
        assert restored.archived is False
        assert restored.completed is False
        assert tracker.restore_archived(quest.id) is None


def test_resume_decays_stale_streaks(tmp_path: Path) -> None:
    now = _dt(2026, 2, 12, 8)
    tracker = _tracker(tmp_path)
    tracker = _seed_streak(tracker, StreakState(period="daily", current_streak=4, last_completion=_dt(2026, 2, 9, 0)), now)

    outcome = tracker.resume(now)
    assert outcome.streaks["daily"].current_streak == 0
    assert Database(tmp_path / "quests.db").load_streak_states()["daily"].last_completion is None


def test_soft_delete_invariant_through_lifecycle(tmp_path: Path) -> None:
    tracker = _tracker(tmp_path)
    quest = tracker.add_quest(QuestDraft(title="Journal"), _dt(2026, 2, 9, 8))
    tracker.toggle_quest(quest.id, _dt(2026, 2, 9, 20))
    tracker.resume(_dt(2026, 2, 10, 8))

    tracker.delete_quest(quest.id)
    _assert_soft_delete_invariant(tracker.store.quests)
    deleted = tracker.store.get(quest.id)
    assert deleted.deleted is True
    assert deleted.archived is False
    assert tracker.store.trash() == [deleted]

    streak_before = tracker.streak("daily")
    assert tracker.toggle_quest(quest.id, _dt(2026, 2, 10, 10)) is None
    _assert_soft_delete_invariant(tracker.store.quests)
    assert tracker.store.get(quest.id).completed is False
    assert tracker.streak("daily") == streak_before
    assert tracker.edit_quest(quest.id, QuestDraft(title="Journal again"), _dt(2026, 2, 10, 10)) is None

    tracker.restore_quest(quest.id)
    _assert_soft_delete_invariant(tracker.store.quests)
    assert tracker.store.get(quest.id).deleted is False

    tracker.delete_quest(quest.id)
    tracker.purge_quest(quest.id)
    assert tracker.store.quests == []


class TestEditing:
    def test_type_change_resets_completion(self, tmp_path: Path) -> None:
        now = _dt(2026, 2, 10, 9)
        tracker = _tracker(tmp_path)
        quest = tracker.add_quest(QuestDraft(title="Plan"), now)
        tracker.add_quest(QuestDraft(title="Other"), now)
        tracker.toggle_quest(quest.id, now)

        updated = tracker.edit_quest(quest.id, QuestDraft(title="Plan week", quest_type="weekly"), now)
        assert updated is not None
        assert updated.quest_type == "weekly"
        assert updated.completed is False
        assert updated.completed_at is None

    def test_same_type_edit_keeps_completion(self, tmp_path: Path) -> None:
        now = _dt(2026, 2, 10, 9)
        tracker = _tracker(tmp_path)
        quest = tracker.add_quest(QuestDraft(title="Plan"), now)
        tracker.add_quest(QuestDraft(title="Other"), now)
        tracker.toggle_quest(quest.id, now)

        updated = tracker.edit_quest(quest.id, QuestDraft(title="Plan day", notes=" morning "), now)
        assert updated is not None
        assert updated.completed is True
        assert updated.notes == "morning"

    def test_edit_unknown_returns_none(self, tmp_path: Path) -> None:
        tracker = _tracker(tmp_path)
        assert tracker.edit_quest("missing", QuestDraft(title="x"), _dt(2026, 2, 10)) is None

    def test_empty_title_rejected(self, tmp_path: Path) -> None:
        tracker = _tracker(tmp_path)
        with pytest.raises(ValidationError):
            tracker.add_quest(QuestDraft(title="   "), _dt(2026, 2, 10))
        assert tracker.store.quests == []

    def test_unknown_icon_rejected(self, tmp_path: Path) -> None:
        tracker = _tracker(tmp_path)
        with pytest.raises(ValidationError):
            tracker.add_quest(QuestDraft(title="x", icon="unicorn"), _dt(2026, 2, 10))

    def test_scheduled_date_normalized_to_start_of_day(self, tmp_path: Path) -> None:
        tracker = _tracker(tmp_path)
        quest = tracker.add_quest(QuestDraft(title="x", scheduled_date=_dt(2026, 2, 12, 17, 45)), _dt(2026, 2, 10))
        assert quest.scheduled_date == _dt(2026, 2, 12, 0)


class TestEntitlementGate:
    def test_locked_gate_downgrades_premium_values(self, tmp_path: Path) -> None:
        tracker = _tracker(tmp_path, gate=EntitlementGate(paywall_enabled=True, premium_unlocked=False))
        quest = tracker.add_quest(QuestDraft(title="x", recurrence="weekly", icon="trophy"), _dt(2026, 2, 10))
        assert quest.recurrence == "daily"
        assert quest.icon == "flame"

    def test_unlocked_gate_keeps_values(self, tmp_path: Path) -> None:
        tracker = _tracker(tmp_path, gate=EntitlementGate(paywall_enabled=True, premium_unlocked=True))
        quest = tracker.add_quest(QuestDraft(title="x", recurrence="weekly", icon="trophy"), _dt(2026, 2, 10))
        assert quest.recurrence == "weekly"
        assert quest.icon == "trophy"
