"""Display helpers for dates and times shown in appointment lists."""

from datetime import date, time, timedelta


def format_date_label(value: date, today: date | None = None) -> str:
    """Return "Today", "Tomorrow" or e.g. "Monday, Jan 05, 2026"."""
    today = today or date.today()
    if value == today:
        return "Today"
    if value == today + timedelta(days=1):
        return "Tomorrow"
    return value.strftime("%A, %b %d, %Y")


def format_time_label(value: time) -> str:
    """Format a time of day as "9:30 AM"."""
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_experience(years: int | None) -> str:
    if not years:
        return "New practitioner"
    return f"{years} year" if years == 1 else f"{years} years"
