"""Tests for daywindow.core.circadian: pure light-window logic."""

from datetime import datetime, time

from daywindow.core.circadian import (
    get_circadian_recommendations,
    get_circadian_windows,
    get_current_phase,
    parse_wake_time,
    should_activate_melatonin_guard,
)

DAY = datetime(2026, 3, 2)


def _at(hour, minute=0):
    return DAY.replace(hour=hour, minute=minute)


class TestParseWakeTime:
    def test_hhmm(self):
        assert parse_wake_time("06:45", DAY.date()) == _at(6, 45)

    def test_datetime_passthrough(self):
        assert parse_wake_time(_at(5, 30)) == _at(5, 30)

    def test_malformed_uses_default(self):
        # DEFAULT_WAKE_TIME is 07:00 in conftest
        assert parse_wake_time("soon", DAY.date()) == _at(7, 0)

    def test_none_uses_default(self):
        assert parse_wake_time(None, DAY.date()) == _at(7, 0)


class TestCircadianWindows:
    def test_offsets_from_wake(self):
        w = get_circadian_windows("07:00", DAY.date())
        assert w.morning_light_start == _at(7, 30)
        assert w.morning_light_end == _at(8, 30)
        assert w.midday_start == _at(11, 0)
        assert w.midday_end == _at(13, 0)
        assert w.bedtime == _at(23, 0)
        assert w.blue_light_cutoff == _at(20, 30)

    def test_bedtime_past_midnight(self):
        w = get_circadian_windows("09:00", DAY.date())
        assert w.bedtime == datetime(2026, 3, 3, 1, 0)
        assert w.blue_light_cutoff == _at(22, 30)


class TestRecommendations:
    def test_three_recommendations_in_order(self):
        recs = get_circadian_recommendations("07:00", _at(12, 0))
        assert [r.window.type for r in recs] == ["morning", "evening", "midday"]

    def test_morning_active(self):
        morning, evening, midday = get_circadian_recommendations("07:00", _at(8, 0))
        assert morning.is_active is True
        assert morning.priority == "high"
        assert evening.is_active is False
        assert evening.priority == "medium"
        assert midday.is_active is False

    def test_evening_active_is_critical(self):
        _, evening, _ = get_circadian_recommendations("07:00", _at(21, 0))
        assert evening.is_active is True
        assert evening.priority == "critical"
        assert evening.duration_minutes is None

    def test_accepts_time_of_day(self):
        _, _, midday = get_circadian_recommendations("07:00", time(12, 0))
        assert midday.is_active is True


class TestCurrentPhase:
    def test_morning_light(self):
        phase = get_current_phase("07:00", _at(8, 0))
        assert phase.phase == "morning_light"
        assert phase.minutes_remaining == 30

    def test_midday_boost(self):
        phase = get_current_phase("07:00", _at(12, 15))
        assert phase.phase == "midday_boost"
        assert phase.minutes_remaining == 45

    def test_baseline(self):
        phase = get_current_phase("07:00", _at(15, 0))
        assert phase.phase == "baseline"
        assert phase.recommendation is None

    def test_melatonin_guard(self):
        assert should_activate_melatonin_guard("07:00", _at(22, 0)) is True
        assert should_activate_melatonin_guard("07:00", _at(10, 0)) is False
