"""Tests for the doctor workspace endpoints."""

from datetime import date
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from httpx import AsyncClient

from doctrizer.core.exceptions import AppointmentNotFoundException
from doctrizer.schemas.appointments import (
    AppointmentResponse,
    AppointmentStatus,
    DoctorAppointmentListResponse,
    DoctorDashboardResponse,
    PatientSummary,
)
from tests.helpers import appointment_row, db_result, doctor_row

SERVICE = "doctrizer.api.v1.endpoints.doctor_workspace.AppointmentService"


@pytest.mark.asyncio
async def test_patient_is_kept_out(client: AsyncClient, login_as, patient_user: dict) -> None:
    login_as(patient_user)

    response = await client.get("/api/v1/doctor/appointments")

    assert response.status_code == 403
    assert response.json()["message"] == "This action requires a doctor account"


@pytest.mark.asyncio
async def test_list_appointments_by_status(
    client: AsyncClient, login_as, doctor_user: dict
) -> None:
    login_as(doctor_user)

    with patch(SERVICE) as service_cls:
        service_cls.return_value.list_doctor_appointments = AsyncMock(
            return_value=DoctorAppointmentListResponse(total=0, items=[])
        )
        response = await client.get("/api/v1/doctor/appointments", params={"status": "pending"})

    assert response.status_code == 200
    assert response.json() == {"total": 0, "items": []}
    call = service_cls.return_value.list_doctor_appointments.call_args
    assert call.args == (doctor_user["doctor_id"],)
    assert call.kwargs == {"status": AppointmentStatus.PENDING}


@pytest.mark.asyncio
@pytest.mark.parametrize(("action", "status"), [("approve", "confirmed"), ("reject", "cancelled")])
async def test_review_request(
    client: AsyncClient, login_as, doctor_user: dict, action: str, status: str
) -> None:
    login_as(doctor_user)
    appointment_id = uuid4()
    updated = AppointmentResponse.model_validate(
        appointment_row(id=appointment_id, doctor_id=doctor_user["doctor_id"], status=status)
    )

    with patch(SERVICE) as service_cls:
        method = AsyncMock(return_value=updated)
        setattr(service_cls.return_value, f"{action}_appointment", method)
        response = await client.patch(f"/api/v1/doctor/appointments/{appointment_id}/{action}")

    assert response.status_code == 200
    assert response.json()["status"] == status
    method.assert_awaited_once_with(appointment_id, doctor_user["doctor_id"])


@pytest.mark.asyncio
async def test_approve_someone_elses_appointment(
    client: AsyncClient, login_as, doctor_user: dict
) -> None:
    login_as(doctor_user)

    with patch(SERVICE) as service_cls:
        service_cls.return_value.approve_appointment = AsyncMock(
            side_effect=AppointmentNotFoundException()
        )
        response = await client.patch(f"/api/v1/doctor/appointments/{uuid4()}/approve")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_patients(client: AsyncClient, login_as, doctor_user: dict) -> None:
    login_as(doctor_user)
    summary = PatientSummary(
        user_id=uuid4(),
        display_name="Alice",
        email="alice@example.com",
        total_appointments=3,
        last_appointment=date(2026, 1, 3),
        upcoming_appointments=1,
    )

    with patch(SERVICE) as service_cls:
        service_cls.return_value.list_doctor_patients = AsyncMock(return_value=[summary])
        response = await client.get("/api/v1/doctor/patients")

    assert response.status_code == 200
    data = response.json()
    assert data[0]["display_name"] == "Alice"
    assert data[0]["last_appointment"] == "2026-01-03"


@pytest.mark.asyncio
async def test_patient_history(client: AsyncClient, login_as, doctor_user: dict) -> None:
    login_as(doctor_user)
    patient_id = uuid4()

    with patch(SERVICE) as service_cls:
        service_cls.return_value.patient_history = AsyncMock(
            return_value=DoctorAppointmentListResponse(total=0, items=[])
        )
        response = await client.get(f"/api/v1/doctor/patients/{patient_id}/appointments")

    assert response.status_code == 200
    service_cls.return_value.patient_history.assert_awaited_once_with(
        doctor_user["doctor_id"], patient_id
    )


@pytest.mark.asyncio
async def test_dashboard(client: AsyncClient, db_session, login_as, doctor_user: dict) -> None:
    login_as(doctor_user)
    doctor = doctor_row(id=doctor_user["doctor_id"], rating="4.80", review_count=20)
    db_session.execute.return_value = db_result([doctor])

    with patch(SERVICE) as service_cls:
        service_cls.return_value.doctor_dashboard = AsyncMock(
            return_value=DoctorDashboardResponse(
                today_appointments=[],
                pending_requests=3,
                total_patients=7,
                rating=doctor["rating"],
                review_count=20,
            )
        )
        response = await client.get("/api/v1/doctor/dashboard")

    assert response.status_code == 200
    data = response.json()
    assert data["pending_requests"] == 3
    assert data["total_patients"] == 7
    passed_doctor = service_cls.return_value.doctor_dashboard.call_args.args[0]
    assert passed_doctor["id"] == doctor_user["doctor_id"]
