"""Tests for the booking wizard state machine."""

from datetime import date, datetime, time
from uuid import uuid4

import pytest

from doctrizer.core.wizard import BookingStep, BookingWizard, WizardStateError
from doctrizer.schemas.appointments import AppointmentType

TODAY = date(2026, 1, 5)
NOW = datetime(2026, 1, 5, 8, 0)


@pytest.fixture
def wizard() -> BookingWizard:
    return BookingWizard(uuid4())


def walk_to_confirm(wizard: BookingWizard, day: date = date(2026, 1, 7), slot: str = "10:30"):
    wizard.select_type(AppointmentType.VIDEO)
    wizard.select_date(day, today=TODAY)
    wizard.select_time(slot, now=NOW)


def test_starts_on_type_step(wizard):
    assert wizard.step == BookingStep.TYPE
    assert wizard.appointment_type == AppointmentType.IN_PERSON
    assert wizard.selected_date is None
    assert wizard.selected_time is None


def test_happy_path_produces_intent(wizard):
    walk_to_confirm(wizard)

    assert wizard.step == BookingStep.CONFIRM
    intent = wizard.confirm()
    assert intent.doctor_id == wizard.doctor_id
    assert intent.appointment_date == date(2026, 1, 7)
    assert intent.appointment_time == time(10, 30)
    assert intent.type == AppointmentType.VIDEO


def test_cannot_skip_ahead(wizard):
    with pytest.raises(WizardStateError):
        wizard.select_date(date(2026, 1, 7), today=TODAY)
    with pytest.raises(WizardStateError):
        wizard.select_time("10:00", now=NOW)
    assert wizard.step == BookingStep.TYPE


def test_confirm_requires_confirm_step(wizard):
    wizard.select_type(AppointmentType.PHONE)

    with pytest.raises(WizardStateError):
        wizard.confirm()


def test_date_outside_horizon_rejected(wizard):
    wizard.select_type(AppointmentType.IN_PERSON)

    with pytest.raises(WizardStateError):
        wizard.select_date(date(2026, 1, 4), today=TODAY)
    with pytest.raises(WizardStateError):
        wizard.select_date(date(2026, 1, 19), today=TODAY)
    assert wizard.step == BookingStep.DATE


def test_time_must_be_generated_slot(wizard):
    wizard.select_type(AppointmentType.IN_PERSON)
    wizard.select_date(date(2026, 1, 7), today=TODAY)

    for slot in ("08:30", "17:00", "10:15"):
        with pytest.raises(WizardStateError):
            wizard.select_time(slot, now=NOW)
    assert wizard.step == BookingStep.TIME


def test_elapsed_slot_today_rejected(wizard):
    wizard.select_type(AppointmentType.IN_PERSON)
    wizard.select_date(TODAY, today=TODAY)

    with pytest.raises(WizardStateError):
        wizard.select_time("09:00", now=datetime(2026, 1, 5, 9, 15))
    assert wizard.select_time("09:30", now=datetime(2026, 1, 5, 9, 15)) == BookingStep.CONFIRM


def test_back_to_date_clears_time(wizard):
    walk_to_confirm(wizard)

    wizard.go_back(BookingStep.DATE)

    assert wizard.step == BookingStep.DATE
    assert wizard.selected_date == date(2026, 1, 7)
    assert wizard.selected_time is None


def test_back_to_type_clears_date_and_time(wizard):
    walk_to_confirm(wizard)

    wizard.go_back(BookingStep.TYPE)

    assert wizard.step == BookingStep.TYPE
    assert wizard.appointment_type == AppointmentType.VIDEO
    assert wizard.selected_date is None
    assert wizard.selected_time is None


def test_back_to_time_keeps_selected_time(wizard):
    walk_to_confirm(wizard)

    wizard.go_back(BookingStep.TIME)

    assert wizard.step == BookingStep.TIME
    assert wizard.selected_time == "10:30"


@pytest.mark.parametrize("step", [BookingStep.CONFIRM, BookingStep.TIME])
def test_back_must_target_earlier_step(wizard, step):
    wizard.select_type(AppointmentType.IN_PERSON)
    wizard.select_date(date(2026, 1, 7), today=TODAY)

    with pytest.raises(WizardStateError):
        wizard.go_back(step)


def test_new_date_selection_rewinds_from_confirm(wizard):
    walk_to_confirm(wizard)

    wizard.select_date(date(2026, 1, 8), today=TODAY)

    assert wizard.step == BookingStep.TIME
    assert wizard.selected_date == date(2026, 1, 8)
    assert wizard.selected_time is None


def test_changing_type_from_date_step_keeps_flow_linear(wizard):
    wizard.select_type(AppointmentType.IN_PERSON)

    assert wizard.select_type(AppointmentType.PHONE) == BookingStep.DATE
    assert wizard.appointment_type == AppointmentType.PHONE


def test_available_slots_empty_without_date(wizard):
    assert wizard.available_slots(NOW) == []


def test_dict_round_trip_keeps_state(wizard):
    walk_to_confirm(wizard)

    restored = BookingWizard.from_dict(wizard.to_dict())

    assert restored.doctor_id == wizard.doctor_id
    assert restored.step == BookingStep.CONFIRM
    assert restored.appointment_type == AppointmentType.VIDEO
    assert restored.selected_date == date(2026, 1, 7)
    assert restored.selected_time == "10:30"


def test_step_positions_follow_flow():
    assert [s.position for s in BookingStep] == [0, 1, 2, 3]
