"""Tests for the conflict-detection service."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import assume, given, strategies as st
from hypothesis.strategies import composite

from planner.domain.models import CalendarEvent, TimeInterval
from planner.services.clock import format_clock_time
from planner.services.conflicts import DEFAULT_BUFFER_MINUTES, find_conflicts


def _target(start_hour: int = 10, end_hour: int = 11) -> TimeInterval:
    return TimeInterval(
        start=datetime(2024, 1, 1, start_hour, 0),
        end=datetime(2024, 1, 1, end_hour, 0),
    )


def _make_event(
    start: str, end: str, title: str = "Existing", event_id: str | None = None
) -> CalendarEvent:
    return CalendarEvent(title=title, start_time=start, end_time=end, event_id=event_id)


def test_no_overlap():
    """Events well outside the buffer should not be returned as conflicts."""
    existing = [
        _make_event("7:00 AM", "8:30 AM"),
        _make_event("12:30 PM", "1:30 PM"),
    ]
    result = find_conflicts(_target(), existing)
    assert result.has_conflict is False
    assert result.conflicting_events == []


def test_identical_interval_conflicts():
    existing = [_make_event("10:00 AM", "11:00 AM", title="Standup")]
    result = find_conflicts(_target(), existing)
    assert result.has_conflict is True
    assert [e.title for e in result.conflicting_events] == ["Standup"]


def test_event_inside_buffer_conflicts():
    """Lunch at 10:45-11:15 overlaps the buffered 9:30-11:30 slot."""
    existing = [_make_event("10:45 AM", "11:15 AM", title="Lunch")]
    result = find_conflicts(_target(), existing)
    assert result.has_conflict is True
    assert [e.title for e in result.conflicting_events] == ["Lunch"]


def test_event_just_past_buffer_does_not_conflict():
    """Walk at 11:35 starts after the buffered end of 11:30."""
    existing = [_make_event("11:35 AM", "12:00 PM", title="Walk")]
    result = find_conflicts(_target(), existing)
    assert result.has_conflict is False


def test_exact_buffer_boundary_no_conflict():
    """An event ending exactly at the buffered start is a boundary touch."""
    existing = [_make_event("8:30 AM", "9:30 AM")]
    result = find_conflicts(_target(), existing)
    assert result.has_conflict is False


def test_one_second_past_boundary_conflicts():
    target = TimeInterval(
        start=datetime(2024, 1, 1, 10, 0) - timedelta(seconds=1),
        end=datetime(2024, 1, 1, 11, 0),
    )
    existing = [_make_event("8:30 AM", "9:30 AM")]
    result = find_conflicts(target, existing)
    assert result.has_conflict is True


def test_custom_buffer():
    existing = [_make_event("11:05 AM", "11:30 AM")]
    assert find_conflicts(_target(), existing, buffer_minutes=0).has_conflict is False
    assert find_conflicts(_target(), existing, buffer_minutes=10).has_conflict is True


def test_conflicts_keep_scan_order():
    existing = [
        _make_event("10:30 AM", "11:00 AM", title="B"),
        _make_event("6:00 AM", "7:00 AM", title="Early"),
        _make_event("9:00 AM", "9:45 AM", title="A"),
    ]
    result = find_conflicts(_target(), existing)
    assert [e.title for e in result.conflicting_events] == ["B", "A"]


def test_exclude_title_skips_every_match():
    existing = [
        _make_event("10:00 AM", "11:00 AM", title="Gym"),
        _make_event("10:30 AM", "11:30 AM", title="Gym"),
        _make_event("10:15 AM", "10:45 AM", title="gym"),
    ]
    result = find_conflicts(_target(), existing, exclude_title="Gym")
    assert [e.title for e in result.conflicting_events] == ["gym"]


def test_exclude_event_id_only_skips_that_event():
    existing = [
        _make_event("10:00 AM", "11:00 AM", title="Gym", event_id="evt-1"),
        _make_event("10:30 AM", "11:30 AM", title="Gym", event_id="evt-2"),
    ]
    result = find_conflicts(_target(), existing, exclude_event_id="evt-1")
    assert [e.event_id for e in result.conflicting_events] == ["evt-2"]


@pytest.mark.parametrize("events", [None, []])
def test_empty_or_missing_list_is_not_a_conflict(events):
    result = find_conflicts(_target(), events)
    assert result.has_conflict is False
    assert result.skipped == []


def test_malformed_time_is_skipped_not_fatal():
    existing = [
        _make_event("ten o'clock", "11:00 AM", title="Broken", event_id="bad"),
        _make_event("10:15 AM", "10:45 AM", title="Fine"),
    ]
    result = find_conflicts(_target(), existing)
    assert [e.title for e in result.conflicting_events] == ["Fine"]
    assert len(result.skipped) == 1
    assert result.skipped[0].event_id == "bad"
    assert result.skipped[0].raw == "ten o'clock"


def test_event_running_past_midnight():
    target = TimeInterval(
        start=datetime(2024, 1, 1, 23, 0), end=datetime(2024, 1, 1, 23, 45)
    )
    existing = [_make_event("11:30 PM", "12:30 AM", title="Late show")]
    result = find_conflicts(target, existing)
    assert result.has_conflict is True


def test_interval_rejects_end_before_start():
    with pytest.raises(ValueError):
        TimeInterval(start=datetime(2024, 1, 1, 11), end=datetime(2024, 1, 1, 10))


def test_interval_rejects_mixed_timezone_awareness():
    with pytest.raises(ValueError, match="both be timezone-aware or both naive"):
        TimeInterval(
            start=datetime(2024, 1, 1, 10, tzinfo=timezone.utc),
            end=datetime(2024, 1, 1, 11),
        )


def test_missing_event_time_is_skipped():
    existing = [
        CalendarEvent(title="All day", start_time=None, end_time=None, event_id="allday"),
        _make_event("10:45 AM", "11:15 AM", title="Lunch"),
    ]
    result = find_conflicts(_target(), existing)
    assert [e.title for e in result.conflicting_events] == ["Lunch"]
    assert [s.event_id for s in result.skipped] == ["allday"]


def test_negative_buffer_is_rejected():
    with pytest.raises(ValueError, match="buffer_minutes must be non-negative"):
        find_conflicts(_target(), [], buffer_minutes=-600)


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

_DAY = datetime(2024, 1, 1)


def _clock(minutes: int) -> str:
    return format_clock_time(_DAY + timedelta(minutes=minutes))


@composite
def separated_slots(draw):
    """An event and a target slot more than the buffer apart, both within one day."""
    first_start = draw(st.integers(min_value=0, max_value=22 * 60))
    first_length = draw(st.integers(min_value=1, max_value=60))
    gap = draw(st.integers(min_value=DEFAULT_BUFFER_MINUTES + 1, max_value=180))
    second_length = draw(st.integers(min_value=1, max_value=60))
    second_start = first_start + first_length + gap
    assume(second_start + second_length < 24 * 60)

    first = (first_start, first_length)
    second = (second_start, second_length)
    if draw(st.booleans()):
        return first, second
    return second, first


@given(separated_slots())
def test_slots_separated_beyond_buffer_never_conflict(slots):
    (event_start, event_length), (target_start, target_length) = slots
    target = TimeInterval(
        start=_DAY + timedelta(minutes=target_start),
        end=_DAY + timedelta(minutes=target_start + target_length),
    )
    event = _make_event(_clock(event_start), _clock(event_start + event_length))
    assert find_conflicts(target, [event]).has_conflict is False


@given(
    start=st.integers(min_value=0, max_value=23 * 60),
    length=st.integers(min_value=1, max_value=59),
    buffer_minutes=st.integers(min_value=0, max_value=120),
)
def test_identical_interval_always_conflicts(start, length, buffer_minutes):
    target = TimeInterval(
        start=_DAY + timedelta(minutes=start),
        end=_DAY + timedelta(minutes=start + length),
    )
    event = _make_event(_clock(start), _clock(start + length), title="Same")
    result = find_conflicts(target, [event], buffer_minutes=buffer_minutes)
    assert result.has_conflict is True
    assert result.conflicting_events == [event]


@given(titles=st.lists(st.sampled_from(["Gym", "Lunch", "Call"]), max_size=8))
def test_excluded_title_never_reported(titles):
    existing = [_make_event("10:00 AM", "11:00 AM", title=title) for title in titles]
    result = find_conflicts(_target(), existing, exclude_title="Gym")
    assert all(e.title != "Gym" for e in result.conflicting_events)
    assert len(result.conflicting_events) == sum(t != "Gym" for t in titles)
