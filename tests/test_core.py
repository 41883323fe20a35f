"""Tests for slot computation."""
from datetime import timedelta

import pytest

from barberbook.core import (
    BookedInterval,
    booking_window,
    compile_preset,
    compute_available_slots,
    overlaps,
    parse_business_hours,
    schedule_for,
)
from barberbook.schemas import BusinessHoursPreset
from conftest import MONDAY, SUNDAY, WEEKDAY_HOURS, at

HOURS = parse_business_hours(WEEKDAY_HOURS)
ALL_DAY = ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00"]


def slots(day=MONDAY, booked=(), duration=60, now=None, chair_id=1, hours=HOURS):
    now = now if now is not None else at(day, "08:00")
    return compute_available_slots(day, chair_id, hours, list(booked), duration, now)


class TestOverlap:
    def test_half_open(self):
        assert overlaps(1, 3, 2, 4)
        assert overlaps(2, 4, 1, 3)
        assert overlaps(1, 5, 2, 3)
        assert not overlaps(1, 2, 2, 3)  # touching
        assert not overlaps(3, 4, 1, 3)


class TestComputeAvailableSlots:
    def test_full_day_before_opening(self):
        """09:00-17:00, 60 minute slots, nothing booked, now=08:00."""
        assert slots() == ALL_DAY

    def test_booked_hour_is_removed(self):
        booked = [BookedInterval(at(MONDAY, "12:00"), at(MONDAY, "13:00"), chair_id=1)]
        result = slots(booked=booked)
        assert "12:00" not in result
        assert result == [s for s in ALL_DAY if s != "12:00"]

    def test_past_slots_skipped_but_later_ones_kept(self):
        result = slots(now=at(MONDAY, "11:30"))
        assert "11:00" not in result
        assert result == ["12:00", "13:00", "14:00", "15:00", "16:00"]

    def test_slot_starting_exactly_now_is_past(self):
        assert "11:00" not in slots(now=at(MONDAY, "11:00"))

    def test_closed_day_is_empty(self):
        booked = [BookedInterval(at(SUNDAY, "11:00"), at(SUNDAY, "12:00"), chair_id=1)]
        assert slots(day=SUNDAY, now=at(SUNDAY, "00:00")) == []
        assert slots(day=SUNDAY, booked=booked, duration=15, now=at(SUNDAY, "00:00")) == []

    def test_missing_weekday_is_closed(self):
        hours = {k: v for k, v in HOURS.items() if k != "monday"}
        assert slots(hours=hours) == []
        assert schedule_for(MONDAY, hours) is None

    def test_partial_last_segment_dropped(self):
        # 09:00-17:00 with 45 minute slots: 16:30 would end at 17:15
        result = slots(duration=45)
        assert result[-1] == "15:45"
        assert len(result) == 10

    def test_overlap_not_start_equality(self):
        # A 30 minute booking off the grid still blocks the slot it overlaps
        booked = [BookedInterval(at(MONDAY, "10:20"), at(MONDAY, "10:50"), chair_id=1)]
        result = slots(booked=booked)
        assert "10:00" not in result
        assert "11:00" in result

    def test_booking_ending_at_slot_start_does_not_block(self):
        booked = [BookedInterval(at(MONDAY, "09:00"), at(MONDAY, "10:00"), chair_id=1)]
        result = slots(booked=booked)
        assert "09:00" not in result
        assert "10:00" in result

    def test_other_chairs_ignored(self):
        booked = [BookedInterval(at(MONDAY, "12:00"), at(MONDAY, "13:00"), chair_id=2)]
        assert slots(booked=booked, chair_id=1) == ALL_DAY
        assert "12:00" not in slots(booked=booked, chair_id=2)

    def test_untagged_intervals_apply(self):
        booked = [BookedInterval(at(MONDAY, "12:00"), at(MONDAY, "13:00"))]
        assert "12:00" not in slots(booked=booked)

    def test_future_day_ignores_today_clock(self):
        now = at(MONDAY - timedelta(days=1), "23:59")
        assert slots(now=now) == ALL_DAY

    def test_clock_only_filters_today(self):
        # Earlier dates are rejected at commit time, not here
        assert slots(now=at(MONDAY + timedelta(days=1), "08:00")) == ALL_DAY

    def test_closed_day_ignores_duration(self):
        assert slots(day=SUNDAY, duration=0, now=at(SUNDAY, "00:00")) == []
        assert slots(day=SUNDAY, duration=-15, now=at(SUNDAY, "00:00")) == []

    def test_chronological_and_repeatable(self):
        booked = [
            BookedInterval(at(MONDAY, "14:00"), at(MONDAY, "14:45"), chair_id=1),
            BookedInterval(at(MONDAY, "09:30"), at(MONDAY, "10:15"), chair_id=1),
        ]
        first = slots(booked=booked, duration=30, now=at(MONDAY, "09:10"))
        second = slots(booked=booked, duration=30, now=at(MONDAY, "09:10"))
        assert first == second
        assert first == sorted(first)
        assert len(set(first)) == len(first)

    def test_no_returned_slot_overlaps_a_booking(self):
        booked = [
            BookedInterval(at(MONDAY, "09:50"), at(MONDAY, "11:05"), chair_id=1),
            BookedInterval(at(MONDAY, "15:00"), at(MONDAY, "15:15"), chair_id=1),
        ]
        for start in slots(booked=booked, duration=45):
            slot_start = at(MONDAY, start)
            slot_end = slot_start + timedelta(minutes=45)
            for b in booked:
                assert not overlaps(slot_start, slot_end, b.start, b.end)

    def test_inputs_not_mutated(self):
        booked = [BookedInterval(at(MONDAY, "12:00"), at(MONDAY, "13:00"), chair_id=1)]
        snapshot = list(booked)
        slots(booked=booked)
        assert booked == snapshot

    def test_rejects_non_positive_duration(self):
        with pytest.raises(ValueError):
            slots(duration=0)


class TestBusinessHours:
    def test_invalid_open_window_rejected(self):
        with pytest.raises(ValueError):
            parse_business_hours({"monday": {"open": "17:00", "close": "09:00", "isOpen": True}})

    @pytest.mark.parametrize("value", ["09:00\n", " 09:00", "9:00", "09:00:00", "24:00"])
    def test_malformed_time_rejected(self, value):
        with pytest.raises(ValueError):
            parse_business_hours({"monday": {"open": value, "close": "17:00", "isOpen": True}})

    def test_closed_day_ignores_times(self):
        hours = parse_business_hours({"monday": {"open": "", "close": "", "isOpen": False}})
        assert schedule_for(MONDAY, hours) is None

    def test_daily_preset(self):
        preset = BusinessHoursPreset.model_validate(
            {"type": "daily", "details": {"start": "10:00", "end": "20:00"}}
        )
        hours = compile_preset(preset)
        assert len(hours) == 7
        assert all(day.is_open and day.open == "10:00" and day.close == "20:00" for day in hours.values())

    def test_weekend_preset(self):
        preset = BusinessHoursPreset.model_validate(
            {"type": "weekend", "details": {"start": "10:00", "end": "16:00"}}
        )
        hours = compile_preset(preset)
        assert schedule_for(MONDAY, hours) is None
        assert schedule_for(SUNDAY, hours).open == "10:00"

    def test_custom_preset_needs_days(self):
        with pytest.raises(ValueError):
            compile_preset(BusinessHoursPreset.model_validate({"type": "custom"}))

    def test_booking_window(self):
        assert booking_window(MONDAY, 4) == [MONDAY + timedelta(days=i) for i in range(4)]
