"""Shared builders for service tests that run without a database."""

from datetime import UTC, date, datetime, time
from unittest.mock import MagicMock
from uuid import uuid4


def db_result(rows: list[dict] | None = None) -> MagicMock:
    """Fake ``Result`` whose mappings() yield ``rows``."""
    rows = rows or []
    result = MagicMock()
    result.mappings.return_value.all.return_value = rows
    result.mappings.return_value.first.return_value = rows[0] if rows else None
    if rows:
        result.mappings.return_value.one.return_value = rows[0]
    result.first.return_value = rows[0] if rows else None
    return result


def appointment_row(**overrides) -> dict:
    now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    row = {
        "id": uuid4(),
        "patient_id": uuid4(),
        "doctor_id": uuid4(),
        "appointment_date": date(2026, 1, 5),
        "appointment_time": time(9, 30),
        "type": "in-person",
        "status": "pending",
        "location": None,
        "notes": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


def doctor_row(**overrides) -> dict:
    now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    row = {
        "id": uuid4(),
        "user_id": uuid4(),
        "specialty": "Cardiology",
        "bio": None,
        "location": "Springfield",
        "years_experience": 10,
        "consultation_fee": None,
        "avatar_url": None,
        "offers_video_consult": True,
        "rating": None,
        "review_count": 0,
        "created_at": now,
        "updated_at": now,
        "display_name": "Dr. Ada Heart",
        "email": "ada@example.com",
        "phone": None,
    }
    row.update(overrides)
    return row
