# barberbook/core.py
"""Slot arithmetic shared by the availability endpoint and the committer.

Everything here is pure: no clock reads, no I/O. ``now`` is always passed in.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Hashable, Iterable, List, Mapping, Optional

from barberbook.schemas import (
    WEEKDAYS,
    BusinessHoursPreset,
    DaySchedule,
    PresetKind,
)


@dataclass(frozen=True)
class BookedInterval:
    start: datetime
    end: datetime
    chair_id: Optional[Hashable] = None


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    # half-open [start, end): touching intervals don't overlap
    return a_start < b_end and a_end > b_start


def parse_business_hours(raw: Optional[Mapping]) -> dict:
    """Validate a stored weekday map into ``DaySchedule`` values.

    Unknown keys are dropped, missing weekdays stay missing (closed).
    """
    hours = {}
    for day, value in (raw or {}).items():
        key = str(day).lower()
        if key not in WEEKDAYS:
            continue
        hours[key] = value if isinstance(value, DaySchedule) else DaySchedule.model_validate(value)
    return hours


def dump_business_hours(hours: Mapping[str, DaySchedule]) -> dict:
    return {day: schedule.model_dump(by_alias=True) for day, schedule in hours.items()}


def compile_preset(preset: BusinessHoursPreset) -> dict:
    """Turn a daily/weekend/custom preset into the per-weekday map."""
    if preset.type == PresetKind.custom:
        if not preset.days:
            raise ValueError("custom hours need a per-weekday map in 'days'")
        return parse_business_hours(preset.days)

    if preset.details is None:
        raise ValueError("preset hours need 'details' with start and end")
    if preset.type == PresetKind.daily:
        open_days = set(WEEKDAYS)
    else:
        open_days = {"saturday", "sunday"}

    hours = {}
    for day in WEEKDAYS:
        hours[day] = DaySchedule(
            open=preset.details.start,
            close=preset.details.end,
            is_open=day in open_days,
        )
    return hours


def schedule_for(day: date, business_hours: Mapping[str, DaySchedule]) -> Optional[DaySchedule]:
    """The schedule for ``day``'s weekday, or None if the shop is closed."""
    schedule = business_hours.get(WEEKDAYS[day.weekday()])
    if schedule is None or not schedule.is_open:
        return None
    return schedule


def opening_window(day: date, schedule: DaySchedule):
    work_start = datetime.combine(day, time.fromisoformat(schedule.open))
    work_end = datetime.combine(day, time.fromisoformat(schedule.close))
    return work_start, work_end


def compute_available_slots(
    day: date,
    chair_id: Hashable,
    business_hours: Mapping[str, DaySchedule],
    booked_intervals: Iterable[BookedInterval],
    duration_minutes: int,
    now: datetime,
) -> List[str]:
    """
    Bookable start times ("HH:MM") for one chair on one date.

    Args:
        day: calendar date to compute slots for
        chair_id: chair the slots are for; tagged intervals for other chairs are ignored
        business_hours: weekday name -> DaySchedule
        booked_intervals: existing booked intervals
        duration_minutes: slot length, also the grid step
        now: current instant; on today's date, slots starting at or before it are dropped

    Returns:
        Start times in chronological order. Empty on a closed day.
    """
    schedule = schedule_for(day, business_hours)
    if schedule is None:
        return []
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")

    work_start, work_end = opening_window(day, schedule)
    slot_delta = timedelta(minutes=duration_minutes)
    is_today = day == now.date()

    # Only intervals touching the opening window can matter
    busy = [
        b for b in booked_intervals
        if (b.chair_id is None or b.chair_id == chair_id)
        and overlaps(work_start, work_end, b.start, b.end)
    ]

    available = []
    current = work_start
    while current + slot_delta <= work_end:
        slot_start = current
        slot_end = current + slot_delta
        current += slot_delta

        if is_today and slot_start <= now:
            continue
        if any(overlaps(slot_start, slot_end, b.start, b.end) for b in busy):
            continue

        available.append(slot_start.strftime("%H:%M"))

    return available


def booking_window(today: date, days: int) -> List[date]:
    """The dates a customer can book: today and the following days."""
    return [today + timedelta(days=i) for i in range(days)]


def to_wall_clock(moment: datetime) -> datetime:
    """Naive local wall-clock time; aware datetimes are converted first."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)
