"""Tests for daywindow.core.day_scheduler: focus filtering and ordering."""

from datetime import time

from daywindow.core.day_scheduler import (
    ViewMode,
    build_day_view,
    filter_for_focus,
    group_by_window,
    order_for_display,
)
from daywindow.core.task_source import parse_scheduled_time
from daywindow.core.time_windows import WINDOWS, current_window
from daywindow.data.models import CompletionState, Task, WindowType


def _task(task_id, scheduled=None, state=CompletionState.PENDING):
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        scheduled_time=parse_scheduled_time(scheduled),
        state=state,
    )


def _ids(tasks):
    return [t.id for t in tasks]


# ---------------------------------------------------------------------------
# filter_for_focus
# ---------------------------------------------------------------------------


class TestFilterForFocus:
    def test_anytime_task_in_every_window(self):
        anytime = _task("a")
        for window in WINDOWS:
            assert filter_for_focus([anytime], window) == [anytime]

    def test_excludes_other_windows(self):
        tasks = [_task("m", "07:00"), _task("e", "19:00")]
        morning = current_window(time(8, 0))
        assert _ids(filter_for_focus(tasks, morning)) == ["m"]

    def test_preserves_input_order(self):
        tasks = [_task("b", "09:00"), _task("x"), _task("a", "06:00")]
        morning = current_window(time(6, 0))
        assert _ids(filter_for_focus(tasks, morning)) == ["b", "x", "a"]

    def test_symbolic_tag_matches_window(self):
        tasks = [_task("s", "evening"), _task("d", "day")]
        evening = current_window(time(18, 0))
        assert _ids(filter_for_focus(tasks, evening)) == ["s"]

    def test_malformed_time_treated_as_anytime(self):
        bad = _task("bad", "not-a-time")
        for window in WINDOWS:
            assert filter_for_focus([bad], window) == [bad]

    def test_empty_list(self):
        assert filter_for_focus([], WINDOWS[0]) == []


# ---------------------------------------------------------------------------
# order_for_display
# ---------------------------------------------------------------------------


class TestOrderForDisplay:
    def test_untimed_pending_keep_input_order(self):
        assert _ids(order_for_display([_task("A"), _task("B")])) == ["A", "B"]

    def test_pending_before_completed(self):
        p = _task("P")
        c = _task("C", state=CompletionState.COMPLETED)
        assert _ids(order_for_display([p, c])) == ["P", "C"]
        assert _ids(order_for_display([c, p])) == ["P", "C"]

    def test_skipped_sorts_with_completed(self):
        s = _task("S", "06:00", state=CompletionState.SKIPPED)
        p = _task("P", "23:00")
        assert _ids(order_for_display([s, p])) == ["P", "S"]

    def test_timed_before_untimed(self):
        tasks = [_task("none"), _task("late", "20:00"), _task("early", "07:30")]
        assert _ids(order_for_display(tasks)) == ["early", "late", "none"]

    def test_single_digit_hour_sorts_numerically(self):
        tasks = [_task("ten", "10:00"), _task("seven", "7:30")]
        assert _ids(order_for_display(tasks)) == ["seven", "ten"]

    def test_symbolic_sorts_as_untimed(self):
        tasks = [_task("sym", "morning"), _task("timed", "12:00")]
        assert _ids(order_for_display(tasks)) == ["timed", "sym"]

    def test_equal_times_keep_input_order(self):
        tasks = [_task("x", "08:00"), _task("y", "08:00")]
        assert _ids(order_for_display(tasks)) == ["x", "y"]

    def test_does_not_mutate_input(self):
        tasks = [_task("b", "09:00"), _task("a", "08:00")]
        order_for_display(tasks)
        assert _ids(tasks) == ["b", "a"]


# ---------------------------------------------------------------------------
# Example scenario
# ---------------------------------------------------------------------------


class TestMorningScenario:
    def setup_method(self):
        self.tasks = [_task("1", "07:30"), _task("2"), _task("3", "20:00")]

    def test_current_window_is_morning(self):
        assert current_window(time(8, 0)).type is WindowType.MORNING

    def test_focus_list(self):
        view = build_day_view(self.tasks, time(8, 0), ViewMode.FOCUS)
        assert _ids(view.tasks) == ["1", "2"]

    def test_full_list_order(self):
        assert _ids(order_for_display(self.tasks)) == ["1", "3", "2"]


# ---------------------------------------------------------------------------
# group_by_window / build_day_view
# ---------------------------------------------------------------------------


class TestGroupByWindow:
    def test_groups_in_day_order(self):
        tasks = [_task("n", "23:00"), _task("m", "06:00"), _task("a")]
        groups = group_by_window(tasks)
        assert list(groups) == [
            WindowType.MORNING, WindowType.DAY, WindowType.EVENING,
            WindowType.NIGHT, WindowType.ANYTIME,
        ]
        assert _ids(groups[WindowType.NIGHT]) == ["n"]
        assert _ids(groups[WindowType.MORNING]) == ["m"]
        assert _ids(groups[WindowType.ANYTIME]) == ["a"]
        assert groups[WindowType.DAY] == []


class TestBuildDayView:
    def test_all_mode_includes_everything(self):
        tasks = [_task("e", "19:00"), _task("m", "06:00")]
        view = build_day_view(tasks, time(8, 0), ViewMode.ALL)
        assert _ids(view.tasks) == ["m", "e"]
        assert view.view_mode is ViewMode.ALL

    def test_window_metadata(self):
        view = build_day_view([], time(16, 30))
        assert view.current_window.type is WindowType.DAY
        assert view.next_window.type is WindowType.EVENING
        assert view.minutes_remaining == 30

    def test_empty_focus_is_valid(self):
        view = build_day_view([_task("m", "06:00")], time(13, 0))
        assert view.is_empty
        assert view.pending_count == 0

    def test_pending_count(self):
        tasks = [
            _task("a"),
            _task("b", state=CompletionState.COMPLETED),
            _task("c", "07:00"),
        ]
        view = build_day_view(tasks, time(7, 0))
        assert view.pending_count == 2
        assert _ids(view.tasks) == ["c", "a", "b"]
