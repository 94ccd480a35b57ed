"""
Cycle de vie des trajets / Route lifecycle accounting.

Le passage d'un trajet à COMPLETED crédite les km au véhicule une seule fois.
Moving a route to COMPLETED credits its km to the vehicle at most once.
"""

import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.exceptions import AuthorizationDenied, ConflictError, NotFound, ValidationError
from fleetdesk.models.daily_report import CarCheck, DailyReport
from fleetdesk.models.route import Order, Route, RouteStatus
from fleetdesk.models.user import User
from fleetdesk.models.vehicle import Vehicle
from fleetdesk.services.audit import log_audit
from fleetdesk.services.maintenance import credit_distance
from fleetdesk.utils.dates import now_iso

logger = logging.getLogger(__name__)

SWEEP_ACTOR = "auto-complete"

ROUTE_FIELDS = (
    "name", "map_url", "date", "driver_id", "vehicle_id", "planned_km", "actual_km",
    "status", "note", "complaint_count", "fuel_cost", "driver_pay",
)
ORDER_FIELDS = ("order_number", "price", "delivery_time", "delivery_time_to", "note")


async def lock_vehicle(db: AsyncSession, vehicle_id: int) -> Vehicle | None:
    """Relire le véhicule sous verrou / Re-read the vehicle under a row lock."""
    result = await db.execute(
        select(Vehicle)
        .where(Vehicle.id == vehicle_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _lock_route(db: AsyncSession, route_id: int) -> Route | None:
    result = await db.execute(
        select(Route)
        .where(Route.id == route_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def km_to_credit(route: Route) -> int:
    """actual_km si > 0, sinon planned_km si > 0, sinon 0."""
    if route.actual_km and route.actual_km > 0:
        return route.actual_km
    if route.planned_km and route.planned_km > 0:
        return route.planned_km
    return 0


async def complete_route(
    db: AsyncSession,
    route: Route,
    previous_status: RouteStatus | None,
    actor: User | str,
) -> int:
    """Créditer le véhicule si le trajet vient de passer à COMPLETED / Credit the vehicle on a fresh completion.

    Le statut du trajet doit déjà être appliqué. Retourne les km crédités.
    The route's new status must already be applied. Returns the credited km.
    """
    if route.status != RouteStatus.COMPLETED or previous_status == RouteStatus.COMPLETED:
        return 0

    credited = 0
    if route.vehicle_id is not None:
        vehicle = await lock_vehicle(db, route.vehicle_id)
        if vehicle is not None:
            credited = credit_distance(vehicle, km_to_credit(route))
            await db.flush()

    await log_audit(db, "route", route.id, "COMPLETE", actor, {
        "vehicle_id": route.vehicle_id,
        "km": credited,
        "previous_status": previous_status.value if previous_status else None,
    })
    return credited


def _apply_order(order: Order, data: dict) -> None:
    for key in ORDER_FIELDS:
        if key in data:
            setattr(order, key, data[key])
    if order.price is None:
        order.price = 0


async def reconcile_orders(db: AsyncSession, route: Route, orders: list[dict]) -> None:
    """Synchroniser les commandes par id / Reconcile a route's orders by id.

    Id connu : mise à jour ; sans id : création ; absent de la liste : suppression.
    Known id: updated; no id: created; missing from the list: deleted.
    """
    await db.refresh(route, attribute_names=["orders"])
    existing = {o.id: o for o in route.orders}
    keep: set[int] = set()
    for data in orders:
        order_id = data.get("id")
        if order_id is None:
            order = Order(route_id=route.id, created_at=now_iso())
            _apply_order(order, data)
            route.orders.append(order)
            continue
        order = existing.get(order_id)
        if order is None:
            raise NotFound("Order", order_id)
        _apply_order(order, data)
        keep.add(order_id)

    for order_id, order in existing.items():
        if order_id not in keep:
            route.orders.remove(order)


async def update_route(
    db: AsyncSession,
    route: Route,
    changes: dict,
    actor: User,
    orders: list[dict] | None = None,
) -> int:
    """Modifier un trajet puis appliquer la règle de complétion / Edit a route, then run the completion guard.

    Retourne les km crédités / Returns the credited km.
    """
    if not actor.is_staff:
        raise AuthorizationDenied()

    # Statut précédent lu sous verrou / Previous status is read under the row lock
    route_id = route.id
    route = await _lock_route(db, route_id)
    if route is None:
        raise NotFound("Route", route_id)
    previous_status = route.status

    if orders is not None:
        await reconcile_orders(db, route, orders)

    for key, value in changes.items():
        if key in ROUTE_FIELDS:
            setattr(route, key, value)
    if route.status is None:
        route.status = previous_status

    await db.flush()
    return await complete_route(db, route, previous_status, actor)


async def submit_daily_report(
    db: AsyncSession,
    actor: User,
    route_id: int,
    actual_km: int | None,
    fuel_cost: float | None = None,
    car_check: CarCheck | None = None,
    car_check_note: str | None = None,
) -> DailyReport:
    """Rapport de fin de trajet par le chauffeur / Driver's end-of-route report.

    Crée le rapport, reporte km et carburant sur le trajet, le clôture et
    crédite le véhicule, dans la transaction de la requête.
    Creates the report, copies km and fuel onto the route, closes it and
    credits the vehicle, all in the request transaction.
    """
    if route_id is None or actual_km is None:
        raise ValidationError("Route and actual km are required")
    if actual_km < 0:
        raise ValidationError("Actual km must not be negative", {"actual_km": actual_km})

    route = await _lock_route(db, route_id)
    if route is None:
        raise NotFound("Route", route_id)
    if route.driver_id != actor.id:
        raise AuthorizationDenied("This route is not assigned to you")

    existing = await db.execute(select(DailyReport.id).where(DailyReport.route_id == route_id))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("A report already exists for this route", {"route_id": route_id})

    car_check = car_check or CarCheck.OK
    report = DailyReport(
        route_id=route_id,
        driver_id=actor.id,
        actual_km=actual_km,
        fuel_cost=fuel_cost or 0,
        car_check=car_check,
        car_check_note=(car_check_note or None) if car_check == CarCheck.NOK else None,
        resolved=False,
        created_at=now_iso(),
    )
    db.add(report)

    previous_status = route.status
    route.actual_km = actual_km
    route.fuel_cost = fuel_cost or 0
    route.status = RouteStatus.COMPLETED
    await db.flush()
    await complete_route(db, route, previous_status, actor)
    return report


async def auto_complete_routes(
    db: AsyncSession,
    today: date | None = None,
    actor: User | str = SWEEP_ACTOR,
) -> dict:
    """Clôturer les trajets passés non terminés / Complete past routes that are still open.

    Chaque trajet dans son propre SAVEPOINT : un échec est journalisé et le
    balayage continue. Une deuxième exécution ne trouve plus rien.
    Each route runs in its own SAVEPOINT: a failure is logged and the sweep
    goes on. A second run finds nothing left to do.
    """
    today = today or date.today()
    result = await db.execute(
        select(Route.id)
        .where(
            Route.date < today.isoformat(),
            Route.status != RouteStatus.COMPLETED,
            Route.vehicle_id.is_not(None),
        )
        .order_by(Route.date, Route.id)
    )
    candidates = list(result.scalars().all())

    completed: list[int] = []
    failed: list[int] = []
    for route_id in candidates:
        try:
            async with db.begin_nested():
                route = await _lock_route(db, route_id)
                if route is None or route.status == RouteStatus.COMPLETED:
                    continue
                previous_status = route.status
                route.status = RouteStatus.COMPLETED
                await db.flush()
                await complete_route(db, route, previous_status, actor)
            completed.append(route_id)
        except Exception:
            logger.exception("Auto-complete failed for route %s", route_id)
            failed.append(route_id)

    logger.info(
        "Auto-complete sweep before %s: %d completed, %d failed",
        today.isoformat(), len(completed), len(failed),
    )
    return {"completed": len(completed), "failed": len(failed), "route_ids": completed}


async def pending_count(db: AsyncSession, actor: User, today: date | None = None) -> int:
    """Trajets du chauffeur jusqu'à aujourd'hui sans rapport / Driver's routes up to today without a report."""
    today = today or date.today()
    result = await db.execute(
        select(func.count(Route.id)).where(
            Route.driver_id == actor.id,
            Route.date <= today.isoformat(),
            ~Route.daily_report.has(),
        )
    )
    return result.scalar() or 0
