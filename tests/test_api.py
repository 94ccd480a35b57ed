"""Tests des endpoints API / API endpoint tests."""

from datetime import date, timedelta

import pytest

from factories import auth_headers, new_route, new_user, new_vehicle
from fleetdesk.config import settings
from fleetdesk.models.route import RouteStatus
from fleetdesk.models.user import UserRole
from fleetdesk.models.vehicle import Vehicle
from fleetdesk.utils.auth import hash_password

YESTERDAY = date.today() - timedelta(days=1)


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/")
    assert response.status_code == 200


# ─── Authentification / Authentication ───


@pytest.mark.asyncio
async def test_requires_token(client):
    response = await client.get("/api/vehicles/")
    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_AUTH"


@pytest.mark.asyncio
async def test_driver_cannot_use_staff_endpoints(client, driver):
    response = await client.post(
        "/api/vehicles/", json={"license_plate": "9XY 0001", "name": "Van"}, headers=auth_headers(driver)
    )
    assert response.status_code == 403
    assert response.json()["error_code"] == "ERR_FORBIDDEN"


@pytest.mark.asyncio
async def test_login_by_email_and_by_driver_name(client, make):
    await make(new_user("Dispatcher", UserRole.DISPATCHER, email="boss@test.local",
                        hashed_password=hash_password("secret")))
    await make(new_user("Jan Novak", UserRole.DRIVER, hashed_password=hash_password("jan123")))

    staff = await client.post("/api/auth/login", json={"login": "Boss@Test.local", "password": "secret"})
    assert staff.status_code == 200
    token = staff.json()["access_token"]
    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["role"] == "DISPATCHER"

    driver = await client.post("/api/auth/login", json={"login": "Jan Novak", "password": "jan123"})
    assert driver.status_code == 200

    refreshed = await client.post("/api/auth/refresh", json={"refresh_token": driver.json()["refresh_token"]})
    assert refreshed.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password(client, make):
    await make(new_user("Jan Novak", UserRole.DRIVER, hashed_password=hash_password("jan123")))
    response = await client.post("/api/auth/login", json={"login": "Jan Novak", "password": "nope"})
    assert response.status_code == 401


# ─── Véhicules et entretien / Vehicles and maintenance ───


@pytest.mark.asyncio
async def test_create_vehicle_defaults_and_duplicate_plate(client, dispatcher):
    headers = auth_headers(dispatcher)
    payload = {"license_plate": "1AB 2345", "name": "Sprinter", "oil_limit_km": "abc"}
    response = await client.post("/api/vehicles/", json=payload, headers=headers)
    assert response.status_code == 201
    data = response.json()
    assert data["oil_limit_km"] == settings.DEFAULT_OIL_LIMIT_KM
    assert data["oil_km"] == 0

    duplicate = await client.post("/api/vehicles/", json=payload, headers=headers)
    assert duplicate.status_code == 409


@pytest.mark.asyncio
async def test_maintenance_actions(client, dispatcher, vehicle, fetch):
    headers = auth_headers(dispatcher)
    url = f"/api/vehicles/{vehicle.id}/maintenance"

    added = await client.post(url, json={"action": "add", "km": "250"}, headers=headers)
    assert added.status_code == 200
    assert added.json()["brakes_km"] == 250

    bad_km = await client.post(url, json={"action": "add", "km": "abc"}, headers=headers)
    assert bad_km.status_code == 400

    reset = await client.post(url, json={"action": "reset", "type": "oil"}, headers=headers)
    assert reset.json()["oil_km"] == 0
    assert reset.json()["adblue_km"] == 250

    dated = await client.post(url, json={"action": "setDate", "type": "fridex", "date": "2024-06-01"}, headers=headers)
    assert dated.json()["coolant_last_change"] == "2024-06-01"

    view = await client.get(url, headers=headers)
    assert view.status_code == 200
    body = view.json()
    assert len(body["counters"]) == 4
    assert len(body["dates"]) == 4
    assert "needs_attention" in body

    stored = await fetch(Vehicle, vehicle.id)
    assert stored.bearings_km == 250


# ─── Trajets et rapports / Routes and reports ───


@pytest.mark.asyncio
async def test_route_numeric_fields_are_coerced(client, dispatcher, driver, vehicle):
    response = await client.post("/api/routes/", json={
        "name": "Praha - Brno",
        "date": YESTERDAY.isoformat(),
        "driver_id": driver.id,
        "vehicle_id": vehicle.id,
        "planned_km": "250",
        "complaint_count": "abc",
        "fuel_cost": "12,5",
        "orders": [{"order_number": "OBJ-1", "price": "199"}],
    }, headers=auth_headers(dispatcher))
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PLANNED"
    assert data["planned_km"] == 250
    assert data["complaint_count"] == 0
    assert data["fuel_cost"] == 12.5
    assert data["orders"][0]["price"] == 199


@pytest.mark.asyncio
async def test_driver_sees_only_own_routes(client, make, driver):
    other = await make(new_user("Petr Svoboda", UserRole.DRIVER))
    mine = await make(new_route(YESTERDAY, name="Mine", driver_id=driver.id))
    theirs = await make(new_route(YESTERDAY, name="Theirs", driver_id=other.id))

    listed = await client.get("/api/routes/", headers=auth_headers(driver))
    assert [r["id"] for r in listed.json()] == [mine.id]

    forbidden = await client.get(f"/api/routes/{theirs.id}", headers=auth_headers(driver))
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_daily_report_flow(client, make, fetch, dispatcher, driver):
    vehicle = await make(new_vehicle(oil_km=1000))
    route = await make(new_route(YESTERDAY, driver_id=driver.id, vehicle_id=vehicle.id, planned_km=200))
    headers = auth_headers(driver)

    pending = await client.get("/api/routes/pending-count", headers=headers)
    assert pending.json() == {"count": 1}

    payload = {"route_id": route.id, "actual_km": "250", "fuel_cost": "41,5", "car_check": "NOK",
               "car_check_note": "Prasklé zrcátko"}
    created = await client.post("/api/daily-reports/", json=payload, headers=headers)
    assert created.status_code == 201
    assert created.json()["route"]["id"] == route.id

    duplicate = await client.post("/api/daily-reports/", json=payload, headers=headers)
    assert duplicate.status_code == 409

    stored = await fetch(Vehicle, vehicle.id)
    assert stored.oil_km == 1250

    detail = await client.get(f"/api/routes/{route.id}", headers=auth_headers(dispatcher))
    assert detail.json()["status"] == RouteStatus.COMPLETED.value
    assert detail.json()["daily_report"]["actual_km"] == 250

    nok = await client.get("/api/daily-reports/nok", headers=auth_headers(dispatcher))
    assert nok.json()["count"] == 1
    report_id = nok.json()["reports"][0]["id"]

    resolved = await client.patch(f"/api/daily-reports/{report_id}/resolve", json={"resolved": True},
                                  headers=auth_headers(dispatcher))
    assert resolved.json()["resolved"] is True
    after = await client.get("/api/daily-reports/nok", headers=auth_headers(dispatcher))
    assert after.json()["count"] == 0


@pytest.mark.asyncio
async def test_completing_twice_through_api_credits_once(client, make, fetch, dispatcher):
    vehicle = await make(new_vehicle())
    route = await make(new_route(YESTERDAY, vehicle_id=vehicle.id, planned_km=300))
    headers = auth_headers(dispatcher)

    for _ in range(2):
        response = await client.put(f"/api/routes/{route.id}", json={"status": "COMPLETED"}, headers=headers)
        assert response.status_code == 200

    stored = await fetch(Vehicle, vehicle.id)
    assert stored.oil_km == 300


# ─── Balayage / Sweep trigger ───


@pytest.mark.asyncio
async def test_sweep_with_cron_secret(client, make, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")
    vehicle = await make(new_vehicle())
    route = await make(new_route(YESTERDAY, vehicle_id=vehicle.id, planned_km=50))

    wrong = await client.post("/api/routes/auto-complete", headers={"X-Cron-Secret": "nope"})
    assert wrong.status_code == 401

    response = await client.post("/api/routes/auto-complete", headers={"X-Cron-Secret": "s3cret"})
    assert response.status_code == 200
    assert response.json() == {"completed": 1, "failed": 0, "route_ids": [route.id]}


@pytest.mark.asyncio
async def test_sweep_needs_staff_without_secret(client, driver, dispatcher):
    anonymous = await client.post("/api/routes/auto-complete")
    assert anonymous.status_code == 401
    as_driver = await client.post("/api/routes/auto-complete", headers=auth_headers(driver))
    assert as_driver.status_code == 403
    as_staff = await client.post("/api/routes/auto-complete", headers=auth_headers(dispatcher))
    assert as_staff.json()["completed"] == 0


# ─── Magasin / Spare parts ───


@pytest.mark.asyncio
async def test_insufficient_stock_error_body(client, dispatcher):
    headers = auth_headers(dispatcher)
    part = await client.post("/api/spare-parts/", json={"name": "Olejový filtr", "quantity": 10, "min_stock": 5},
                             headers=headers)
    assert part.status_code == 201
    part_id = part.json()["id"]

    rejected = await client.post(f"/api/spare-parts/{part_id}/movements", json={"type": "OUT", "quantity": 12},
                                 headers=headers)
    assert rejected.status_code == 409
    body = rejected.json()
    assert body["error_code"] == "ERR_INSUFFICIENT_STOCK"
    assert body["details"] == {"available": 10, "unit": "pcs"}

    issued = await client.post(f"/api/spare-parts/{part_id}/movements", json={"type": "OUT", "quantity": "6"},
                               headers=headers)
    assert issued.status_code == 201
    assert issued.json()["new_quantity"] == 4

    low = await client.get("/api/spare-parts/?low_stock=true", headers=headers)
    assert [p["id"] for p in low.json()] == [part_id]
    assert len(low.json()[0]["movements"]) == 2


# ─── Avis et disponibilités / Ratings and availability ───


@pytest.mark.asyncio
async def test_review_and_reset(client, dispatcher, driver):
    headers = auth_headers(dispatcher)
    url = f"/api/drivers/{driver.id}/reviews"
    await client.post(url, json={"direction": "up"}, headers=headers)
    response = await client.post(url, json={"direction": "down", "note": "Pozdě"}, headers=headers)
    assert response.status_code == 201
    assert response.json()["rating"] == 0

    reset = await client.delete(url, headers=headers)
    assert reset.json()["rating_up"] == 0
    assert (await client.get(url, headers=headers)).json() == []


@pytest.mark.asyncio
async def test_availability_null_status_clears(client, driver):
    headers = auth_headers(driver)
    created = await client.post("/api/availability/", json={"date": "2025-03-14", "status": "AVAILABLE"},
                                headers=headers)
    assert created.json()["status"] == "AVAILABLE"

    cleared = await client.post("/api/availability/", json={"date": "2025-03-14", "status": None}, headers=headers)
    assert cleared.status_code == 200
    assert cleared.json() is None
    assert (await client.get("/api/availability/", headers=headers)).json() == []


# ─── Statistiques / Statistics ───


@pytest.mark.asyncio
async def test_statistics_export(client, dispatcher, driver):
    headers = auth_headers(dispatcher)
    stats = await client.get("/api/statistics/", headers=headers)
    assert [d["id"] for d in stats.json()["drivers"]] == [driver.id]

    export = await client.get("/api/statistics/export", headers=headers)
    assert export.status_code == 200
    assert export.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )


# ─── Réparations et notes / Repairs and notes ───


@pytest.mark.asyncio
async def test_repair_defaults_to_today(client, dispatcher, vehicle):
    headers = auth_headers(dispatcher)
    created = await client.post("/api/repairs/", json={
        "vehicle_id": vehicle.id, "description": "Výměna spojky", "price": "8900,50",
    }, headers=headers)
    assert created.status_code == 201
    assert created.json()["date"] == date.today().isoformat()
    assert created.json()["price"] == 8900.5

    listed = await client.get(f"/api/repairs/?vehicle_id={vehicle.id}", headers=headers)
    assert len(listed.json()) == 1

    missing = await client.post("/api/repairs/", json={"vehicle_id": 999, "description": "x"}, headers=headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_notes_are_staff_only(client, dispatcher, driver):
    headers = auth_headers(dispatcher)
    category = await client.post("/api/notes/categories", json={"name": "Servis"}, headers=headers)
    assert category.status_code == 201
    note = await client.post("/api/notes/", json={"category_id": category.json()["id"], "text": "Objednat pneu"},
                             headers=headers)
    assert note.status_code == 201

    categories = await client.get("/api/notes/categories", headers=headers)
    assert categories.json()[0]["notes"][0]["text"] == "Objednat pneu"

    denied = await client.get("/api/notes/categories", headers=auth_headers(driver))
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_public_user_list(client, dispatcher, driver):
    response = await client.get("/api/users/")
    assert response.status_code == 200
    assert {u["name"] for u in response.json()} == {"Dispatcher", "Jan Novak"}


@pytest.mark.asyncio
async def test_fractional_movement_quantity_is_rejected(client, dispatcher):
    headers = auth_headers(dispatcher)
    part = await client.post("/api/spare-parts/", json={"name": "Žárovka H7", "quantity": 10}, headers=headers)
    part_id = part.json()["id"]

    for quantity in (2.5, "2.5", "3 ks"):
        response = await client.post(f"/api/spare-parts/{part_id}/movements",
                                      json={"type": "OUT", "quantity": quantity}, headers=headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_VALIDATION"

    stored = await client.get(f"/api/spare-parts/{part_id}", headers=headers)
    assert stored.json()["quantity"] == 10
    assert len(stored.json()["movements"]) == 1


@pytest.mark.asyncio
async def test_only_drivers_submit_reports(client, make, dispatcher, driver):
    route = await make(new_route(YESTERDAY, driver_id=driver.id))
    response = await client.post("/api/daily-reports/", json={"route_id": route.id, "actual_km": 100},
                                 headers=auth_headers(dispatcher))
    assert response.status_code == 403

    negative = await client.post("/api/daily-reports/", json={"route_id": route.id, "actual_km": "-5"},
                                 headers=auth_headers(driver))
    assert negative.status_code == 400
