"""Candidate appointment start times.

Slots are computed from a fixed daily window, not from the doctor's saved
availability, and nothing here checks existing bookings.
"""

from datetime import date, datetime, time, timedelta

from doctrizer.config import settings


def generate_time_slots(
    day: date,
    now: datetime | None = None,
    start_hour: int | None = None,
    end_hour: int | None = None,
    slot_minutes: int | None = None,
) -> list[str]:
    """
    Build the ordered "HH:MM" slots for ``day``.

    The window runs from ``start_hour:00`` up to, but excluding,
    ``end_hour:00``. When ``day`` is today, only slots strictly after
    ``now`` are kept.

    Args:
        day: Date being booked
        now: Current local time, defaults to ``datetime.now()``
        start_hour: First hour of the window
        end_hour: Hour the window closes
        slot_minutes: Slot granularity in minutes

    Returns:
        Slot strings in chronological order
    """
    now = now or datetime.now()
    start_hour = settings.slot_day_start_hour if start_hour is None else start_hour
    end_hour = settings.slot_day_end_hour if end_hour is None else end_hour
    slot_minutes = slot_minutes or settings.slot_duration_minutes

    is_today = day == now.date()
    slots: list[str] = []

    for offset in range(start_hour * 60, end_hour * 60, slot_minutes):
        hour, minute = divmod(offset, 60)
        if is_today and datetime.combine(day, time(hour, minute)) <= now:
            continue
        slots.append(f"{hour:02d}:{minute:02d}")

    return slots


def booking_dates(today: date | None = None, days: int | None = None) -> list[date]:
    """Dates a patient may pick: today and the following ``days - 1`` days."""
    today = today or date.today()
    days = days or settings.booking_horizon_days
    return [today + timedelta(days=i) for i in range(days)]


def parse_slot(value: str) -> time:
    """Parse an "HH:MM" slot string."""
    try:
        hour, minute = value.split(":")
        return time(int(hour), int(minute))
    except ValueError as e:
        raise ValueError(f"Invalid time slot: {value!r}") from e


def day_of_week(day: date) -> int:
    """Weekday index used by availability rows: 0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7
