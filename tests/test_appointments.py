"""Tests for patient appointment endpoints."""

from datetime import date
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from httpx import AsyncClient

from doctrizer.core.exceptions import AppointmentNotFoundException, DoctorNotFoundException
from doctrizer.schemas.appointments import (
    AppointmentResponse,
    AppointmentSummary,
    AppointmentView,
    PatientAppointmentListResponse,
)
from tests.helpers import appointment_row

SERVICE = "doctrizer.api.v1.endpoints.appointments.AppointmentService"


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Test health check endpoint."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_ping(client: AsyncClient) -> None:
    response = await client.get("/api/v1/ping")
    assert response.status_code == 200
    assert response.json() == {"message": "pong"}
    assert "X-Request-ID" in response.headers
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
async def test_requires_authentication(client: AsyncClient) -> None:
    response = await client.get("/api/v1/appointments/")
    assert response.status_code in (401, 403)
    assert response.json()["error"] == "HTTPException"


@pytest.mark.asyncio
async def test_create_appointment(client: AsyncClient, login_as, patient_user: dict) -> None:
    """Test booking an appointment directly."""
    login_as(patient_user)
    doctor_id = uuid4()
    created = AppointmentResponse.model_validate(
        appointment_row(patient_id=patient_user["user_id"], doctor_id=doctor_id)
    )

    with patch(SERVICE) as service_cls:
        service_cls.return_value.create_appointment = AsyncMock(return_value=created)
        response = await client.post(
            "/api/v1/appointments/",
            json={
                "doctor_id": str(doctor_id),
                "appointment_date": "2026-01-05",
                "appointment_time": "09:30",
                "type": "in-person",
            },
        )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["doctor_id"] == str(doctor_id)
    user_id, payload = service_cls.return_value.create_appointment.call_args.args
    assert user_id == patient_user["user_id"]
    assert payload.appointment_date == date(2026, 1, 5)


@pytest.mark.asyncio
async def test_create_appointment_unknown_doctor(
    client: AsyncClient, login_as, patient_user: dict
) -> None:
    login_as(patient_user)

    with patch(SERVICE) as service_cls:
        service_cls.return_value.create_appointment = AsyncMock(
            side_effect=DoctorNotFoundException()
        )
        response = await client.post(
            "/api/v1/appointments/",
            json={
                "doctor_id": str(uuid4()),
                "appointment_date": "2026-01-05",
                "appointment_time": "09:30",
            },
        )

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "DoctorNotFoundException"
    assert data["message"] == "Doctor not found"


@pytest.mark.asyncio
async def test_create_appointment_rejects_bad_type(
    client: AsyncClient, login_as, patient_user: dict
) -> None:
    login_as(patient_user)

    response = await client.post(
        "/api/v1/appointments/",
        json={
            "doctor_id": str(uuid4()),
            "appointment_date": "2026-01-05",
            "appointment_time": "09:30",
            "type": "carrier-pigeon",
        },
    )

    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_doctor_cannot_book(client: AsyncClient, login_as, doctor_user: dict) -> None:
    login_as(doctor_user)

    response = await client.get("/api/v1/appointments/")

    assert response.status_code == 403
    assert response.json()["message"] == "This action requires a patient account"


@pytest.mark.asyncio
async def test_list_appointments_view(client: AsyncClient, login_as, patient_user: dict) -> None:
    """Test listing one tab of appointments."""
    login_as(patient_user)
    listing = PatientAppointmentListResponse(view=AppointmentView.CANCELLED, total=0, items=[])

    with patch(SERVICE) as service_cls:
        service_cls.return_value.list_patient_appointments = AsyncMock(return_value=listing)
        response = await client.get("/api/v1/appointments/", params={"view": "cancelled"})

    assert response.status_code == 200
    assert response.json() == {"view": "cancelled", "total": 0, "items": []}
    args = service_cls.return_value.list_patient_appointments.call_args.args
    assert args == (patient_user["user_id"], AppointmentView.CANCELLED)


@pytest.mark.asyncio
async def test_appointment_summary(client: AsyncClient, login_as, patient_user: dict) -> None:
    login_as(patient_user)

    with patch(SERVICE) as service_cls:
        service_cls.return_value.summarize_patient_appointments = AsyncMock(
            return_value=AppointmentSummary(upcoming=2, past=5, cancelled=1)
        )
        response = await client.get("/api/v1/appointments/summary")

    assert response.status_code == 200
    assert response.json() == {"upcoming": 2, "past": 5, "cancelled": 1}


@pytest.mark.asyncio
async def test_get_appointment_not_found(
    client: AsyncClient, login_as, patient_user: dict
) -> None:
    login_as(patient_user)

    with patch(SERVICE) as service_cls:
        service_cls.return_value.get_patient_appointment = AsyncMock(
            side_effect=AppointmentNotFoundException()
        )
        response = await client.get(f"/api/v1/appointments/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["message"] == "Appointment not found"


@pytest.mark.asyncio
async def test_cancel_appointment(client: AsyncClient, login_as, patient_user: dict) -> None:
    login_as(patient_user)
    appointment_id = uuid4()
    cancelled = AppointmentResponse.model_validate(
        appointment_row(id=appointment_id, status="cancelled")
    )

    with patch(SERVICE) as service_cls:
        service_cls.return_value.cancel_appointment = AsyncMock(return_value=cancelled)
        response = await client.patch(f"/api/v1/appointments/{appointment_id}/cancel")

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    service_cls.return_value.cancel_appointment.assert_awaited_once_with(
        appointment_id, patient_user["user_id"]
    )
