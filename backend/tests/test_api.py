"""HTTP-level tests: authentication, error mapping and the main endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from httpx import AsyncClient

    from service_desk.models.vehicle import Vehicle

REQUESTS_URL = "/requests"

IT_BODY = {
    "type": "IT",
    "requester_name": "Employee",
    "title": "Need Power BI Pro",
    "category": "Software / License",
    "description": "Dashboard work for the Q2 review",
    "system_key": "POWER_BI",
}


def _booking_body(start: str, end: str, **overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": "CAR_BOOKING",
        "requester_name": "Employee",
        "start_at": start,
        "end_at": end,
        "reason": "Site inspection",
        "destination": "North Yard",
    }
    body.update(overrides)
    return body


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


async def test_missing_token_is_401(async_client: AsyncClient) -> None:
    response = await async_client.get(REQUESTS_URL)
    assert response.status_code == 401
    assert response.json()["detail"] == "Authentication required"


async def test_unknown_token_is_401(async_client: AsyncClient) -> None:
    response = await async_client.get(REQUESTS_URL, headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired session"


async def test_me(async_client: AsyncClient, tokens: dict[str, dict[str, str]]) -> None:
    response = await async_client.get("/auth/me", headers=tokens["fleet"])
    assert response.status_code == 200
    data = response.json()
    assert data["employee_id"] == 4
    assert data["role"] == "FLEET_ADMIN"


async def test_refresh_session(async_client: AsyncClient, tokens: dict[str, dict[str, str]]) -> None:
    response = await async_client.post("/auth/refresh", headers=tokens["employee"])
    assert response.status_code == 200
    assert response.json()["message"] == "Session refreshed"


async def test_logout_ends_session(async_client: AsyncClient, tokens: dict[str, dict[str, str]]) -> None:
    response = await async_client.post("/auth/logout", headers=tokens["employee"])
    assert response.status_code == 204

    response = await async_client.get("/auth/me", headers=tokens["employee"])
    assert response.status_code == 401
    response = await async_client.post("/auth/refresh", headers=tokens["employee"])
    assert response.status_code == 401
    assert response.json()["detail"] == "Session expired. Please log in again."


async def test_request_id_header(async_client: AsyncClient) -> None:
    response = await async_client.get("/workflows", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"

    generated = await async_client.get("/workflows")
    assert generated.headers["X-Request-ID"]


# ---------------------------------------------------------------------------
# Workflow catalog
# ---------------------------------------------------------------------------


async def test_list_workflows(async_client: AsyncClient) -> None:
    response = await async_client.get("/workflows")
    assert response.status_code == 200
    workflows = {w["type"]: w for w in response.json()}
    assert len(workflows) == 6
    assert workflows["CAR_BOOKING"]["initial_step"] == "AUTO_BOOKED"
    assert [s["id"] for s in workflows["IT"]["steps"]] == ["SUBMITTED", "TRIAGE", "IN_PROGRESS", "COMPLETED"]
    assert [s["id"] for s in workflows["IT"]["absorbing_steps"]] == ["REJECTED", "CANCELLED"]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


async def test_create_get_and_transition_it_request(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]]
) -> None:
    response = await async_client.post(REQUESTS_URL, json=IT_BODY, headers=tokens["employee"])
    assert response.status_code == 201
    created = response.json()
    assert created["assigned_role"] == "IT_BI_ADMIN"
    assert created["status"] == "PENDING"
    assert created["it_detail"]["system_name"] == "Power BI Pro"

    url = f"{REQUESTS_URL}/{created['id']}"
    response = await async_client.get(url, headers=tokens["bi"])
    assert response.status_code == 200

    response = await async_client.patch(f"{url}/status", json={"status": "APPROVED"}, headers=tokens["bi"])
    assert response.status_code == 200
    body = response.json()
    assert body["request"]["current_step"] == "TRIAGE"
    assert body["message"] == "Status updated successfully"

    response = await async_client.get(f"{url}/audit", headers=tokens["employee"])
    assert response.status_code == 200
    assert [e["action_type"] for e in response.json()["items"]] == ["CREATE", "STATUS_UPDATE"]


async def test_missing_fields_are_named(async_client: AsyncClient, tokens: dict[str, dict[str, str]]) -> None:
    body = {**IT_BODY, "title": "   "}
    body.pop("description")
    response = await async_client.post(REQUESTS_URL, json=body, headers=tokens["employee"])
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail.startswith("Missing required fields:")
    assert "title" in detail
    assert "description" in detail


async def test_unknown_request_type_rejected(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]]
) -> None:
    response = await async_client.post(
        REQUESTS_URL, json={**IT_BODY, "type": "PAYROLL"}, headers=tokens["employee"]
    )
    assert response.status_code == 422


async def test_transition_needs_step_or_status(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]]
) -> None:
    created = (await async_client.post(REQUESTS_URL, json=IT_BODY, headers=tokens["employee"])).json()
    response = await async_client.patch(
        f"{REQUESTS_URL}/{created['id']}/status", json={"note": "?"}, headers=tokens["it"]
    )
    assert response.status_code == 422
    assert "Either step or status is required" in response.json()["detail"]


async def test_skipping_steps_is_400(async_client: AsyncClient, tokens: dict[str, dict[str, str]]) -> None:
    created = (await async_client.post(REQUESTS_URL, json=IT_BODY, headers=tokens["employee"])).json()
    response = await async_client.patch(
        f"{REQUESTS_URL}/{created['id']}/status", json={"step": "COMPLETED"}, headers=tokens["it"]
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


async def test_policy_denial_is_403(async_client: AsyncClient, tokens: dict[str, dict[str, str]]) -> None:
    created = (await async_client.post(REQUESTS_URL, json=IT_BODY, headers=tokens["employee"])).json()
    response = await async_client.patch(
        f"{REQUESTS_URL}/{created['id']}/status", json={"status": "APPROVED"}, headers=tokens["employee"]
    )
    assert response.status_code == 403


async def test_unknown_request_is_404(async_client: AsyncClient, tokens: dict[str, dict[str, str]]) -> None:
    response = await async_client.get(f"{REQUESTS_URL}/777", headers=tokens["super"])
    assert response.status_code == 404
    assert response.json()["detail"] == "Request not found"


async def test_employee_cannot_submit_onboarding(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]]
) -> None:
    body = {
        "type": "ONBOARDING",
        "requester_name": "Employee",
        "employee_name": "New Hire",
        "position": "Analyst",
        "start_date": "2026-04-01",
        "email_needed": True,
    }
    response = await async_client.post(REQUESTS_URL, json=body, headers=tokens["employee"])
    assert response.status_code == 403

    response = await async_client.post(REQUESTS_URL, json=body, headers=tokens["hr"])
    assert response.status_code == 201
    created = response.json()
    assert created["metadata"]["children_created"] == 1
    assert created["children"][0]["type"] == "ONBOARDING_EMAIL"


async def test_list_requests_endpoint(async_client: AsyncClient, tokens: dict[str, dict[str, str]]) -> None:
    await async_client.post(REQUESTS_URL, json=IT_BODY, headers=tokens["employee"])
    await async_client.post(REQUESTS_URL, json=IT_BODY, headers=tokens["other"])

    response = await async_client.get(REQUESTS_URL, headers=tokens["employee"])
    assert response.status_code == 200
    assert response.json()["total"] == 1

    response = await async_client.get(REQUESTS_URL, params={"type": "IT"}, headers=tokens["it"])
    assert response.json()["total"] == 2


# ---------------------------------------------------------------------------
# Car bookings
# ---------------------------------------------------------------------------


async def test_booking_lifecycle_over_http(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]], vehicles: list[Vehicle]
) -> None:
    response = await async_client.post(
        REQUESTS_URL, json=_booking_body("2026-03-02T09:00:00", "2026-03-02T10:00:00"), headers=tokens["employee"]
    )
    assert response.status_code == 201
    booking = response.json()
    assert booking["status"] == "BOOKED"
    assert booking["booking"]["vehicle_id"] == vehicles[0].id

    response = await async_client.patch(
        f"{REQUESTS_URL}/{booking['id']}/status",
        json={"status": "CANCELLED"},
        headers=tokens["employee"],
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "A cancellation reason is required"

    response = await async_client.patch(
        f"{REQUESTS_URL}/{booking['id']}/status",
        json={"status": "CANCELLED", "note": "Trip called off"},
        headers=tokens["employee"],
    )
    assert response.status_code == 200
    assert response.json()["request"]["status"] == "CANCELLED"


async def test_booking_conflict_is_409(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]], vehicles: list[Vehicle]
) -> None:
    for _ in vehicles:
        response = await async_client.post(
            REQUESTS_URL,
            json=_booking_body("2026-03-02T09:00:00", "2026-03-02T10:00:00"),
            headers=tokens["employee"],
        )
        assert response.status_code == 201

    response = await async_client.post(
        REQUESTS_URL, json=_booking_body("2026-03-02T09:30:00", "2026-03-02T11:00:00"), headers=tokens["other"]
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "No vehicles available in this time range"


async def test_booking_end_before_start(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]], vehicles: list[Vehicle]
) -> None:
    response = await async_client.post(
        REQUESTS_URL, json=_booking_body("2026-03-02T10:00:00", "2026-03-02T09:00:00"), headers=tokens["employee"]
    )
    assert response.status_code == 422
    assert "end_at must be after start_at" in response.json()["detail"]


async def test_aware_times_are_stored_as_utc(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]], vehicles: list[Vehicle]
) -> None:
    response = await async_client.post(
        REQUESTS_URL,
        json=_booking_body("2026-03-02T11:00:00+02:00", "2026-03-02T12:00:00+02:00"),
        headers=tokens["employee"],
    )
    assert response.status_code == 201
    assert response.json()["booking"]["start_at"] == "2026-03-02T09:00:00"


async def test_available_slots(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]], vehicles: list[Vehicle]
) -> None:
    await async_client.post(
        REQUESTS_URL, json=_booking_body("2026-03-02T09:00:00", "2026-03-02T10:00:00"), headers=tokens["employee"]
    )
    response = await async_client.get(
        "/car-bookings/available-slots", params={"date": "2026-03-02"}, headers=tokens["employee"]
    )
    assert response.status_code == 200
    data = response.json()
    assert data["day"] == "2026-03-02"
    slots = {slot["start_at"]: slot for slot in data["slots"]}
    assert len(slots) == 32
    assert slots["2026-03-02T09:00:00"]["available_vehicles"] == 2
    assert slots["2026-03-02T10:00:00"]["available_vehicles"] == 3


async def test_available_slots_unknown_vehicle(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]], vehicles: list[Vehicle]
) -> None:
    response = await async_client.get(
        "/car-bookings/available-slots",
        params={"date": "2026-03-02", "vehicleId": 999},
        headers=tokens["employee"],
    )
    assert response.status_code == 404


async def test_override_and_schedule(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]], vehicles: list[Vehicle]
) -> None:
    booking = (
        await async_client.post(
            REQUESTS_URL,
            json=_booking_body("2026-03-02T09:00:00", "2026-03-02T10:00:00"),
            headers=tokens["employee"],
        )
    ).json()
    url = f"/car-bookings/{booking['id']}/override"

    response = await async_client.patch(url, json={"vehicle_id": vehicles[1].id}, headers=tokens["employee"])
    assert response.status_code == 403

    response = await async_client.patch(
        url, json={"vehicle_id": vehicles[1].id, "note": "Prado in service"}, headers=tokens["fleet"]
    )
    assert response.status_code == 200
    assert response.json()["booking"]["vehicle_id"] == vehicles[1].id

    response = await async_client.get("/fleet/schedule", headers=tokens["employee"])
    assert response.status_code == 403

    response = await async_client.get(
        "/fleet/schedule",
        params={"from": "2026-03-02T00:00:00", "to": "2026-03-03T00:00:00"},
        headers=tokens["fleet"],
    )
    assert response.status_code == 200
    items = response.json()["items"]
    assert [item["request_id"] for item in items] == [booking["id"]]
    assert items[0]["plate_number"] == vehicles[1].plate_number


# ---------------------------------------------------------------------------
# Vehicle registry
# ---------------------------------------------------------------------------


async def test_vehicle_registry(
    async_client: AsyncClient, tokens: dict[str, dict[str, str]], vehicles: list[Vehicle]
) -> None:
    body = {"name": "Ranger Blue", "plate_number": "M-3456", "category": "Pickup"}
    response = await async_client.post("/admin/vehicles", json=body, headers=tokens["employee"])
    assert response.status_code == 403

    response = await async_client.post("/admin/vehicles", json=body, headers=tokens["fleet"])
    assert response.status_code == 201
    vehicle_id = response.json()["id"]

    response = await async_client.patch(
        f"/admin/vehicles/{vehicle_id}", json={"name": "Ranger Navy"}, headers=tokens["fleet"]
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Ranger Navy"
    assert response.json()["plate_number"] == "M-3456"

    response = await async_client.patch(
        f"/admin/vehicles/{vehicle_id}/status", json={"status": "INACTIVE"}, headers=tokens["fleet"]
    )
    assert response.status_code == 200

    active = (await async_client.get("/vehicles", headers=tokens["employee"])).json()
    assert vehicle_id not in [v["id"] for v in active["items"]]
    assert active["total"] == len(vehicles)

    everything = (await async_client.get("/admin/vehicles", headers=tokens["fleet"])).json()
    assert everything["total"] == len(vehicles) + 1


async def test_update_unknown_vehicle(async_client: AsyncClient, tokens: dict[str, dict[str, str]]) -> None:
    response = await async_client.patch("/admin/vehicles/404", json={"name": "Ghost"}, headers=tokens["fleet"])
    assert response.status_code == 404
