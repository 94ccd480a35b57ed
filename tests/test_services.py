"""Tests des services métier / Domain service tests."""

from datetime import date, timedelta

import pytest
from sqlalchemy import func, select, update

from factories import new_route, new_user, new_vehicle
from fleetdesk.exceptions import (
    AuthorizationDenied,
    ConflictError,
    InsufficientStock,
    NotFound,
    ValidationError,
)
from fleetdesk.models.audit import AuditLog
from fleetdesk.models.availability import Availability, AvailabilityStatus
from fleetdesk.models.driver_review import DriverReview
from fleetdesk.models.route import Order, Route, RouteStatus
from fleetdesk.models.spare_part import MovementType, SparePart, SparePartMovement
from fleetdesk.models.user import User, UserRole
from fleetdesk.services import availability, ratings, route_lifecycle, spare_parts
from fleetdesk.services.export_service import STATISTICS_FIELDS, ExportService
from fleetdesk.services.statistics import driver_statistics
from fleetdesk.utils.parsing import strict_int
from fleetdesk.utils.seed import seed_dispatcher

YESTERDAY = date.today() - timedelta(days=1)


async def add(db, *objs):
    db.add_all(objs)
    await db.flush()
    return objs if len(objs) > 1 else objs[0]


@pytest.fixture
async def staff(db):
    return await add(db, new_user("Dispatcher", UserRole.DISPATCHER, email="dispatcher@test.local"))


@pytest.fixture
async def jan(db):
    return await add(db, new_user("Jan Novak", UserRole.DRIVER))


# ─── Cycle de vie des trajets / Route lifecycle ───


@pytest.mark.asyncio
async def test_sweep_credits_planned_km_once(db):
    vehicle = await add(db, new_vehicle(oil_km=1000))
    route = await add(db, new_route(YESTERDAY, vehicle_id=vehicle.id, planned_km=250))

    result = await route_lifecycle.auto_complete_routes(db)
    assert result == {"completed": 1, "failed": 0, "route_ids": [route.id]}

    await db.refresh(vehicle)
    await db.refresh(route)
    assert route.status == RouteStatus.COMPLETED
    assert vehicle.oil_km == 1250
    assert vehicle.bearings_km == 250

    again = await route_lifecycle.auto_complete_routes(db)
    assert again["completed"] == 0
    await db.refresh(vehicle)
    assert vehicle.oil_km == 1250


@pytest.mark.asyncio
async def test_sweep_skips_today_and_unassigned(db):
    vehicle = await add(db, new_vehicle())
    await add(
        db,
        new_route(date.today(), vehicle_id=vehicle.id, planned_km=100),
        new_route(YESTERDAY, planned_km=100),
    )
    result = await route_lifecycle.auto_complete_routes(db)
    assert result["completed"] == 0


@pytest.mark.asyncio
async def test_sweep_continues_after_a_failure(db, monkeypatch):
    good, bad = await add(db, new_vehicle("GOOD 1"), new_vehicle("BAD 1"))
    ok_route, broken_route = await add(
        db,
        new_route(YESTERDAY, vehicle_id=good.id, planned_km=100),
        new_route(YESTERDAY, vehicle_id=bad.id, planned_km=100),
    )
    original = route_lifecycle.credit_distance

    def flaky_credit(vehicle, km):
        if vehicle.id == bad.id:
            raise RuntimeError("counter write failed")
        return original(vehicle, km)

    monkeypatch.setattr(route_lifecycle, "credit_distance", flaky_credit)

    result = await route_lifecycle.auto_complete_routes(db)
    assert result["completed"] == 1
    assert result["failed"] == 1
    assert result["route_ids"] == [ok_route.id]

    await db.refresh(broken_route)
    await db.refresh(bad)
    await db.refresh(good)
    assert broken_route.status == RouteStatus.PLANNED
    assert bad.oil_km == 0
    assert good.oil_km == 100


@pytest.mark.asyncio
async def test_manual_completion_credits_once(db, staff):
    vehicle = await add(db, new_vehicle())
    route = await add(db, new_route(YESTERDAY, vehicle_id=vehicle.id, planned_km=80, actual_km=120))

    assert await route_lifecycle.update_route(db, route, {"status": RouteStatus.COMPLETED}, staff) == 120
    assert await route_lifecycle.update_route(db, route, {"status": RouteStatus.COMPLETED}, staff) == 0
    await db.refresh(vehicle)
    assert vehicle.oil_km == 120

    entries = (await db.execute(select(AuditLog).where(AuditLog.action == "COMPLETE"))).scalars().all()
    assert len(entries) == 1
    assert entries[0].user == "dispatcher@test.local"


@pytest.mark.asyncio
async def test_update_route_requires_staff(db, jan):
    route = await add(db, new_route(YESTERDAY, driver_id=jan.id))
    with pytest.raises(AuthorizationDenied):
        await route_lifecycle.update_route(db, route, {"status": RouteStatus.COMPLETED}, jan)


@pytest.mark.asyncio
async def test_orders_reconciled_by_id(db, staff):
    route = await add(db, new_route(YESTERDAY))
    first, second = await add(
        db,
        Order(route_id=route.id, order_number="A-1", price=10),
        Order(route_id=route.id, order_number="A-2", price=20),
    )

    await route_lifecycle.update_route(db, route, {}, staff, orders=[
        {"id": first.id, "order_number": "A-1b", "price": 15},
        {"order_number": "A-3"},
    ])
    await db.refresh(route, attribute_names=["orders"])
    assert [o.order_number for o in route.orders] == ["A-1b", "A-3"]
    assert route.orders[0].id == first.id
    assert route.orders[1].price == 0
    assert await db.get(Order, second.id) is None


@pytest.mark.asyncio
async def test_unknown_order_id_is_rejected(db, staff):
    route = await add(db, new_route(YESTERDAY))
    with pytest.raises(NotFound):
        await route_lifecycle.update_route(db, route, {}, staff, orders=[{"id": 999, "order_number": "X"}])


@pytest.mark.asyncio
async def test_edit_sees_completion_made_by_another_transaction(db, staff):
    vehicle = await add(db, new_vehicle(oil_km=1000))
    route = await add(db, new_route(YESTERDAY, vehicle_id=vehicle.id, planned_km=250))
    assert route.status == RouteStatus.PLANNED

    # Clôture écrite hors de la session, l'objet en mémoire reste PLANNED
    # Completion written behind the session's back, the in-memory object still says PLANNED
    await db.execute(
        update(Route)
        .where(Route.id == route.id)
        .values(status=RouteStatus.COMPLETED)
        .execution_options(synchronize_session=False)
    )
    assert route.status == RouteStatus.PLANNED

    credited = await route_lifecycle.update_route(db, route, {"status": RouteStatus.COMPLETED}, staff)
    assert credited == 0
    await db.refresh(vehicle)
    assert vehicle.oil_km == 1000


# ─── Rapports journaliers / Daily reports ───


@pytest.mark.asyncio
async def test_daily_report_closes_route_and_credits(db, jan):
    vehicle = await add(db, new_vehicle(oil_km=500))
    route = await add(db, new_route(YESTERDAY, driver_id=jan.id, vehicle_id=vehicle.id, planned_km=200))
    assert await route_lifecycle.pending_count(db, jan) == 1

    report = await route_lifecycle.submit_daily_report(db, jan, route.id, 230, fuel_cost=41.5)
    assert report.route_id == route.id
    await db.refresh(route)
    await db.refresh(vehicle)
    assert route.status == RouteStatus.COMPLETED
    assert route.actual_km == 230
    assert vehicle.oil_km == 730
    assert await route_lifecycle.pending_count(db, jan) == 0

    with pytest.raises(ConflictError):
        await route_lifecycle.submit_daily_report(db, jan, route.id, 230)


@pytest.mark.asyncio
async def test_zero_km_report_falls_back_to_planned(db, jan):
    vehicle = await add(db, new_vehicle())
    route = await add(db, new_route(YESTERDAY, driver_id=jan.id, vehicle_id=vehicle.id, planned_km=90))
    await route_lifecycle.submit_daily_report(db, jan, route.id, 0)
    await db.refresh(vehicle)
    assert vehicle.oil_km == 90


@pytest.mark.asyncio
async def test_negative_km_report_is_rejected(db, jan):
    vehicle = await add(db, new_vehicle(oil_km=500))
    route = await add(db, new_route(YESTERDAY, driver_id=jan.id, vehicle_id=vehicle.id, planned_km=90))
    with pytest.raises(ValidationError):
        await route_lifecycle.submit_daily_report(db, jan, route.id, -40)
    await db.refresh(route)
    assert route.status == RouteStatus.PLANNED
    assert route.actual_km is None


@pytest.mark.asyncio
async def test_report_on_foreign_route_is_forbidden(db, jan):
    other = await add(db, new_user("Petr Svoboda", UserRole.DRIVER))
    route = await add(db, new_route(YESTERDAY, driver_id=other.id))
    with pytest.raises(AuthorizationDenied):
        await route_lifecycle.submit_daily_report(db, jan, route.id, 100)
    with pytest.raises(NotFound):
        await route_lifecycle.submit_daily_report(db, jan, 4242, 100)
    with pytest.raises(ValidationError):
        await route_lifecycle.submit_daily_report(db, jan, route.id, None)


@pytest.mark.asyncio
async def test_pending_count_ignores_future_routes(db, jan):
    await add(db, new_route(date.today() + timedelta(days=2), driver_id=jan.id))
    assert await route_lifecycle.pending_count(db, jan) == 0


# ─── Magasin / Spare parts ───


async def _movement_balance(db, part_id: int) -> int:
    rows = (await db.execute(
        select(SparePartMovement).where(SparePartMovement.spare_part_id == part_id)
    )).scalars().all()
    return sum(m.quantity if m.type == MovementType.IN else -m.quantity for m in rows)


@pytest.mark.asyncio
async def test_opening_balance_is_a_movement(db, staff):
    part = await spare_parts.create_part(db, staff, "Olejový filtr", quantity=10, min_stock=5)
    assert part.unit == "pcs"
    movements = (await db.execute(select(SparePartMovement))).scalars().all()
    assert len(movements) == 1
    assert movements[0].note == spare_parts.OPENING_BALANCE_NOTE
    assert await _movement_balance(db, part.id) == 10


@pytest.mark.asyncio
async def test_out_movements_and_low_stock(db, staff):
    part = await spare_parts.create_part(db, staff, "Olejový filtr", quantity=10, min_stock=5)

    with pytest.raises(InsufficientStock) as exc:
        await spare_parts.record_movement(db, staff, part.id, "OUT", 12)
    assert exc.value.details == {"available": 10, "unit": "pcs"}
    await db.refresh(part)
    assert part.quantity == 10

    _, part = await spare_parts.record_movement(db, staff, part.id, "OUT", 4)
    assert part.quantity == 6
    assert not part.low_stock

    _, part = await spare_parts.record_movement(db, staff, part.id, MovementType.OUT, 2)
    assert part.quantity == 4
    assert part.low_stock
    assert [p.id for p in await spare_parts.low_stock(db)] == [part.id]

    await spare_parts.record_movement(db, staff, part.id, "IN", 7, note="Dodávka")
    await db.refresh(part)
    assert part.quantity == 11
    assert await _movement_balance(db, part.id) == part.quantity


@pytest.mark.asyncio
async def test_movement_validation(db, staff, jan):
    part = await spare_parts.create_part(db, staff, "Brzdové destičky", quantity=2)
    with pytest.raises(ValidationError):
        await spare_parts.record_movement(db, staff, part.id, "OUT", 0)
    with pytest.raises(ValidationError):
        await spare_parts.record_movement(db, staff, part.id, "SIDEWAYS", 1)
    with pytest.raises(NotFound):
        await spare_parts.record_movement(db, staff, 999, "IN", 1)
    with pytest.raises(NotFound):
        await spare_parts.record_movement(db, staff, part.id, "OUT", 1, vehicle_id=999)
    with pytest.raises(AuthorizationDenied):
        await spare_parts.record_movement(db, jan, part.id, "IN", 1)
    with pytest.raises(ValidationError):
        await spare_parts.create_part(db, staff, "Kapalina", quantity=-1)


def test_stock_quantities_are_never_truncated():
    assert strict_int("3") == 3
    assert strict_int(" 12 ") == 12
    assert strict_int(4.0) == 4
    for value in (2.5, "2.5", "3 ks", "abc", True):
        with pytest.raises(ValueError):
            strict_int(value)


def test_update_part_never_touches_quantity():
    staff = new_user("Dispatcher", UserRole.DISPATCHER)
    part = SparePart(name="Filtr", unit="pcs", quantity=3, min_stock=1, note="x")
    spare_parts.update_part(part, staff, {"quantity": 99, "min_stock": 2, "note": None})
    assert part.quantity == 3
    assert part.min_stock == 2
    assert part.note is None


# ─── Avis / Ratings ───


@pytest.mark.asyncio
async def test_reviews_update_counters(db, staff, jan):
    await ratings.review(db, staff, jan.id, "up")
    await ratings.review(db, staff, jan.id, "up", note="  Přesný  ")
    await ratings.review(db, staff, jan.id, "down", note="x" * 600)
    assert (jan.rating_up, jan.rating_down, jan.rating) == (2, 1, 1)

    reviews = await ratings.list_reviews(db, jan.id)
    assert len(reviews) == 3
    assert len(reviews[0].note) == ratings.NOTE_MAX_LENGTH
    assert reviews[1].note == "Přesný"
    assert reviews[2].note is None


@pytest.mark.asyncio
async def test_reset_clears_ledger(db, staff, jan):
    await ratings.review(db, staff, jan.id, "down")
    driver = await ratings.reset_ratings(db, staff, jan.id)
    assert (driver.rating_up, driver.rating_down) == (0, 0)
    count = await db.execute(select(func.count(DriverReview.id)))
    assert count.scalar() == 0
    audit = (await db.execute(select(AuditLog).where(AuditLog.action == "RATING_RESET"))).scalar_one()
    assert audit.entity_id == jan.id


@pytest.mark.asyncio
async def test_review_rules(db, staff, jan):
    with pytest.raises(ValidationError):
        await ratings.review(db, staff, jan.id, "sideways")
    with pytest.raises(NotFound):
        await ratings.review(db, staff, staff.id, "up")
    with pytest.raises(AuthorizationDenied):
        await ratings.review(db, jan, jan.id, "up")


# ─── Disponibilités / Availability ───


@pytest.mark.asyncio
async def test_availability_upsert_and_clear(db, jan):
    first = await availability.set_availability(db, jan, "2025-03-14", AvailabilityStatus.AVAILABLE)
    second = await availability.set_availability(
        db, jan, "2025-03-14T09:00:00Z", AvailabilityStatus.PARTIAL, note="Od 12:00"
    )
    assert second.id == first.id
    assert second.status == AvailabilityStatus.PARTIAL
    assert second.note == "Od 12:00"

    assert await availability.set_availability(db, jan, "2025-03-14", None) is None
    count = await db.execute(select(func.count(Availability.id)))
    assert count.scalar() == 0


@pytest.mark.asyncio
async def test_staff_sets_availability_for_driver(db, staff, jan):
    record = await availability.set_availability(
        db, staff, "2025-03-15", AvailabilityStatus.UNAVAILABLE, driver_id=jan.id
    )
    assert record.user_id == jan.id
    with pytest.raises(NotFound):
        await availability.set_availability(db, staff, "2025-03-15", AvailabilityStatus.AVAILABLE, driver_id=999)

    records = await availability.list_availability(db, start="2025-03-01", end="2025-03-31")
    assert [(r.user.name, r.date) for r in records] == [("Jan Novak", "2025-03-15")]


@pytest.mark.asyncio
async def test_availability_requires_a_valid_day(db, jan):
    with pytest.raises(ValidationError):
        await availability.set_availability(db, jan, "", AvailabilityStatus.AVAILABLE)
    with pytest.raises(ValidationError):
        await availability.set_availability(db, jan, "14/03/2025", AvailabilityStatus.AVAILABLE)


# ─── Statistiques / Statistics ───


@pytest.mark.asyncio
async def test_driver_statistics(db, staff, jan):
    petr = await add(db, new_user("Petr Svoboda", UserRole.DRIVER))
    van = await add(db, new_vehicle("2BC 3456", name="Transit"))
    await add(
        db,
        new_route(date(2025, 3, 2), driver_id=jan.id, vehicle_id=van.id, actual_km=100, complaint_count=1),
        new_route(date(2025, 2, 20), driver_id=jan.id, vehicle_id=van.id, actual_km=301),
        new_route(date(2025, 3, 10), driver_id=petr.id, actual_km=500),
    )
    today = date(2025, 3, 14)

    stats = await driver_statistics(db, staff, today=today)
    assert [s["name"] for s in stats] == ["Petr Svoboda", "Jan Novak"]
    jan_stats = stats[1]["stats"]
    assert jan_stats["total_km"] == 401
    assert jan_stats["monthly_km"] == 100
    assert jan_stats["average_km"] == 201
    assert (jan_stats["total_trips"], jan_stats["monthly_trips"]) == (2, 1)
    assert jan_stats["complaint_count"] == 1
    assert jan_stats["vehicles"] == [{"id": van.id, "license_plate": "2BC 3456", "name": "Transit", "trips": 2}]

    own = await driver_statistics(db, jan, today=today)
    assert [s["id"] for s in own] == [jan.id]


def test_statistics_rows_flatten_vehicles():
    rows = ExportService.statistics_rows([{
        "name": "Jan Novak",
        "stats": {
            "total_km": 401, "monthly_km": 100, "average_km": 201, "total_trips": 2,
            "monthly_trips": 1, "complaint_count": 0, "rating": 1, "rating_up": 1, "rating_down": 0,
            "vehicles": [{"id": 1, "license_plate": "2BC 3456", "name": "Transit", "trips": 2}],
        },
    }])
    assert rows[0]["vehicles"] == "2BC 3456 (2)"
    content = ExportService.to_xlsx(rows, STATISTICS_FIELDS)
    assert content[:2] == b"PK"


# ─── Seed ───


@pytest.mark.asyncio
async def test_seed_dispatcher_only_on_empty_table(db):
    created = await seed_dispatcher(db)
    assert created.role == UserRole.DISPATCHER
    assert await seed_dispatcher(db) is None
    count = await db.execute(select(func.count(User.id)))
    assert count.scalar() == 1
