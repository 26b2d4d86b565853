"""Tests for Redis-backed booking sessions."""

from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
import redis

from doctrizer.core.exceptions import AppException, DoctorNotFoundException, NotFoundException
from doctrizer.core.redis_client import CacheManager
from doctrizer.core.wizard import BookingStep, WizardStateError
from doctrizer.schemas.appointments import AppointmentResponse, AppointmentType
from doctrizer.schemas.bookings import BookingConfirm
from doctrizer.services.booking_service import BookingService
from tests.helpers import appointment_row, db_result, doctor_row


@pytest.fixture
def doctor() -> dict:
    return doctor_row()


@pytest.fixture
def db(doctor) -> AsyncMock:
    session = AsyncMock()
    session.execute.return_value = db_result([doctor])
    return session


@pytest.fixture
def service(cache_manager) -> BookingService:
    return BookingService(cache_manager)


@pytest.mark.asyncio
async def test_start_opens_type_step(service, db, doctor, fake_redis):
    patient_id = uuid4()

    session = await service.start(db, patient_id, doctor["id"])

    assert session.step == BookingStep.TYPE
    assert session.doctor_id == doctor["id"]
    assert session.type_options == list(AppointmentType)
    assert f"booking:{session.session_id}" in fake_redis.store


@pytest.mark.asyncio
async def test_start_unknown_doctor(service):
    db = AsyncMock()
    db.execute.return_value = db_result([])

    with pytest.raises(DoctorNotFoundException):
        await service.start(db, uuid4(), uuid4())


@pytest.mark.asyncio
async def test_walk_through_steps(service, db, doctor):
    patient_id = uuid4()
    day = date.today() + timedelta(days=1)
    session = await service.start(db, patient_id, doctor["id"])

    session = service.select_type(session.session_id, patient_id, AppointmentType.PHONE)
    assert session.step == BookingStep.DATE
    assert session.date_options[0] == date.today()
    assert len(session.date_options) == 14

    session = service.select_date(session.session_id, patient_id, day)
    assert session.step == BookingStep.TIME
    assert session.selected_date == day
    assert session.time_options[0] == "09:00"

    session = service.select_time(session.session_id, patient_id, "10:00")
    assert session.step == BookingStep.CONFIRM
    assert session.selected_time == "10:00"
    assert session.type == AppointmentType.PHONE

    session = service.go_back(session.session_id, patient_id, BookingStep.DATE)
    assert session.step == BookingStep.DATE
    assert session.selected_time is None


@pytest.mark.asyncio
async def test_invalid_selection_keeps_state(service, db, doctor):
    patient_id = uuid4()
    session = await service.start(db, patient_id, doctor["id"])

    with pytest.raises(WizardStateError):
        service.select_time(session.session_id, patient_id, "10:00")

    assert service.get(session.session_id, patient_id).step == BookingStep.TYPE


@pytest.mark.asyncio
async def test_other_patient_cannot_see_session(service, db, doctor):
    session = await service.start(db, uuid4(), doctor["id"])

    with pytest.raises(NotFoundException):
        service.get(session.session_id, uuid4())


def test_unknown_session(service):
    with pytest.raises(NotFoundException):
        service.get("missing", uuid4())


@pytest.mark.asyncio
async def test_confirm_books_and_drops_session(service, db, doctor, fake_redis):
    patient_id = uuid4()
    day = date.today() + timedelta(days=2)
    session = await service.start(db, patient_id, doctor["id"])
    service.select_type(session.session_id, patient_id, AppointmentType.VIDEO)
    service.select_date(session.session_id, patient_id, day)
    service.select_time(session.session_id, patient_id, "14:30")

    booked = AppointmentResponse.model_validate(
        appointment_row(patient_id=patient_id, doctor_id=doctor["id"], appointment_date=day)
    )
    with patch("doctrizer.services.booking_service.AppointmentService") as service_cls:
        service_cls.return_value.book_from_intent = AsyncMock(return_value=booked)

        result = await service.confirm(
            db, session.session_id, patient_id, BookingConfirm(notes="Bring results")
        )

    assert result == booked
    intent = service_cls.return_value.book_from_intent.call_args.args[1]
    assert intent.appointment_date == day
    assert intent.type == AppointmentType.VIDEO
    assert service_cls.return_value.book_from_intent.call_args.kwargs["notes"] == "Bring results"
    assert f"booking:{session.session_id}" not in fake_redis.store


@pytest.mark.asyncio
async def test_failed_confirm_keeps_session(service, db, doctor, fake_redis):
    patient_id = uuid4()
    session = await service.start(db, patient_id, doctor["id"])
    service.select_type(session.session_id, patient_id, AppointmentType.VIDEO)
    service.select_date(session.session_id, patient_id, date.today() + timedelta(days=1))
    service.select_time(session.session_id, patient_id, "09:00")

    with patch("doctrizer.services.booking_service.AppointmentService") as service_cls:
        service_cls.return_value.book_from_intent = AsyncMock(side_effect=RuntimeError("db down"))

        with pytest.raises(RuntimeError):
            await service.confirm(db, session.session_id, patient_id, BookingConfirm())

    assert f"booking:{session.session_id}" in fake_redis.store


@pytest.mark.asyncio
async def test_close_removes_session(service, db, doctor, fake_redis):
    patient_id = uuid4()
    session = await service.start(db, patient_id, doctor["id"])

    service.close(session.session_id, patient_id)

    assert f"booking:{session.session_id}" not in fake_redis.store


@pytest.mark.asyncio
async def test_redis_outage_is_reported(db, doctor):
    mock_redis = MagicMock()
    mock_redis.get.return_value = None
    mock_redis.setex.side_effect = redis.ConnectionError("down")
    service = BookingService(CacheManager(redis_client=mock_redis))

    with pytest.raises(AppException) as exc_info:
        await service.start(db, uuid4(), doctor["id"])
    assert exc_info.value.status_code == 503


@pytest.mark.parametrize(
    "action",
    [
        lambda service, patient_id: service.get("abc", patient_id),
        lambda service, patient_id: service.select_type("abc", patient_id, AppointmentType.VIDEO),
        lambda service, patient_id: service.go_back("abc", patient_id, BookingStep.TYPE),
        lambda service, patient_id: service.close("abc", patient_id),
    ],
)
def test_session_read_during_outage_is_503(action):
    mock_redis = MagicMock()
    mock_redis.get.side_effect = redis.ConnectionError("down")
    service = BookingService(CacheManager(redis_client=mock_redis))

    with pytest.raises(AppException) as exc_info:
        action(service, uuid4())
    assert exc_info.value.status_code == 503
    assert not isinstance(exc_info.value, NotFoundException)


@pytest.mark.asyncio
async def test_confirm_during_outage_is_503(db):
    mock_redis = MagicMock()
    mock_redis.get.side_effect = redis.ConnectionError("down")
    service = BookingService(CacheManager(redis_client=mock_redis))

    with pytest.raises(AppException) as exc_info:
        await service.confirm(db, "abc", uuid4(), BookingConfirm())
    assert exc_info.value.status_code == 503
