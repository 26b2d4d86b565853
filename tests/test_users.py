"""Tests for profile endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from tests.helpers import db_result


@pytest.mark.asyncio
async def test_get_my_profile(client: AsyncClient, login_as, doctor_user: dict) -> None:
    login_as(doctor_user)

    response = await client.get("/api/v1/users/me")

    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "doctor"
    assert data["doctor_id"] == str(doctor_user["doctor_id"])


@pytest.mark.asyncio
async def test_update_my_profile(client: AsyncClient, login_as, patient_user: dict) -> None:
    login_as(patient_user)
    updated = {**patient_user, "display_name": "Patricia"}

    with patch(
        "doctrizer.api.v1.endpoints.users.UserService.update_profile",
        new_callable=AsyncMock,
        return_value=updated,
    ) as update_profile:
        response = await client.patch("/api/v1/users/me", json={"display_name": "Patricia"})

    assert response.status_code == 200
    assert response.json()["display_name"] == "Patricia"
    user_id, data = update_profile.call_args.args[1:]
    assert user_id == patient_user["user_id"]
    assert data.display_name == "Patricia"


@pytest.mark.asyncio
async def test_update_profile_invalidates_cache(
    client: AsyncClient, db_session, login_as, patient_user: dict, cache_manager
) -> None:
    login_as(patient_user)
    key = f"profile:{patient_user['user_id']}"
    cache_manager.set_json(key, {"stale": True})
    db_session.execute.side_effect = [
        db_result([{"id": patient_user["user_id"]}]),
        db_result([{**patient_user, "phone": "+15550111"}]),
    ]

    response = await client.patch("/api/v1/users/me", json={"phone": "+15550111"})

    assert response.status_code == 200
    assert response.json()["phone"] == "+15550111"
    assert cache_manager.get_json(key)["phone"] == "+15550111"


@pytest.mark.asyncio
async def test_update_profile_rejects_empty_name(
    client: AsyncClient, login_as, patient_user: dict
) -> None:
    login_as(patient_user)

    response = await client.patch("/api/v1/users/me", json={"display_name": ""})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_doctor_rename_drops_cached_doctor_detail(
    client: AsyncClient, db_session, login_as, doctor_user: dict, cache_manager
) -> None:
    login_as(doctor_user)
    doctor_key = f"doctor:{doctor_user['doctor_id']}"
    cache_manager.set_json(doctor_key, {"display_name": doctor_user["display_name"]})
    db_session.execute.side_effect = [
        db_result([{"id": doctor_user["user_id"]}]),
        db_result([{**doctor_user, "display_name": "Dr. Dana Renamed"}]),
    ]

    response = await client.patch("/api/v1/users/me", json={"display_name": "Dr. Dana Renamed"})

    assert response.status_code == 200
    assert response.json()["display_name"] == "Dr. Dana Renamed"
    assert cache_manager.get_json(doctor_key) is None


@pytest.mark.asyncio
async def test_patient_update_leaves_doctor_cache_alone(
    client: AsyncClient, db_session, login_as, patient_user: dict, cache_manager, fake_redis
) -> None:
    login_as(patient_user)
    db_session.execute.side_effect = [
        db_result([{"id": patient_user["user_id"]}]),
        db_result([{**patient_user, "display_name": "Patricia"}]),
    ]

    response = await client.patch("/api/v1/users/me", json={"display_name": "Patricia"})

    assert response.status_code == 200
    assert not any(key.startswith("doctor:") for key in fake_redis.store)
