"""Tests for daywindow.data.models: Task and DailyTracking dataclasses."""

import json

import pytest

from daywindow.data.models import (
    CompletionState,
    DailyTracking,
    ExplicitTime,
    Pillar,
    SymbolicTime,
    Task,
    TimeWindow,
    WindowType,
)


def test_task_defaults():
    task = Task(id="t", title="Breathe")
    assert task.state is CompletionState.PENDING
    assert task.scheduled_time is None
    assert task.pillar is Pillar.OTHER
    assert task.skipped_reason is None
    assert task.completed_at is None
    assert task.is_pending


def test_negative_duration_rejected():
    with pytest.raises(ValueError):
        Task(id="t", title="x", duration_minutes=-1)


def test_task_dict_is_json_serializable():
    task = Task(
        id="t", title="Walk", pillar=Pillar.MOVEMENT,
        scheduled_time=ExplicitTime(7, 5), duration_minutes=20,
    )
    d = json.loads(json.dumps(task.to_dict()))
    assert d["scheduled_time"] == "07:05"
    assert d["pillar"] == "movement"
    assert d["state"] == "pending"


def test_task_from_dict_symbolic():
    task = Task.from_dict({"id": "t", "title": "Tea", "scheduled_time": "evening"})
    assert task.scheduled_time == SymbolicTime(WindowType.EVENING)


def test_task_from_dict_restores_state():
    original = Task(
        id="t", title="Skip me", state=CompletionState.SKIPPED, skipped_reason="sick",
    )
    assert Task.from_dict(original.to_dict()) == original


def test_task_from_dict_restores_optimization():
    original = Task(
        id="t", title="Box breathing (5 min)", duration_minutes=5,
        original_title="Meditation", original_duration=20,
        optimization_reason="Shortened for a full calendar",
    )
    assert Task.from_dict(original.to_dict()) == original


class TestPillar:
    @pytest.mark.parametrize("raw, expected", [
        ("sleep", Pillar.SLEEP),
        ("Nutrition", Pillar.NUTRITION),
        ("exercise", Pillar.MOVEMENT),
        ("unknown", Pillar.OTHER),
        (None, Pillar.OTHER),
    ])
    def test_from_raw(self, raw, expected):
        assert Pillar.from_raw(raw) is expected


class TestTimeWindow:
    def test_plain_range(self):
        w = TimeWindow(WindowType.DAY, 11, 17, "Day")
        assert w.contains_hour(11) and w.contains_hour(16)
        assert not w.contains_hour(17)

    def test_wrapping_range(self):
        w = TimeWindow(WindowType.NIGHT, 22, 5, "Night")
        assert w.contains_hour(22) and w.contains_hour(0) and w.contains_hour(4)
        assert not w.contains_hour(5) and not w.contains_hour(21)


class TestDailyTracking:
    def _tracking(self, states):
        return DailyTracking(
            user_id="u",
            tracking_date="2026-03-02",
            tasks=[Task(id=str(i), title="x", state=s) for i, s in enumerate(states)],
        )

    def test_summary_counts(self):
        tracking = self._tracking([
            CompletionState.COMPLETED, CompletionState.SKIPPED, CompletionState.PENDING,
        ])
        assert tracking.tasks_total == 3
        assert tracking.tasks_completed == 1
        assert tracking.completion_percentage == 33

    def test_empty_percentage(self):
        assert self._tracking([]).completion_percentage == 0

    def test_find_task(self):
        tracking = self._tracking([CompletionState.PENDING])
        assert tracking.find_task("0").id == "0"
        assert tracking.find_task("missing") is None

    def test_round_trip(self):
        tracking = self._tracking([CompletionState.COMPLETED, CompletionState.PENDING])
        assert DailyTracking.from_dict(tracking.to_dict()) == tracking
