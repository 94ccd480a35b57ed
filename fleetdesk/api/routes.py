"""Routes Trajets / Route API routes."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.api.deps import get_current_user, require_staff, require_sweep_trigger
from fleetdesk.database import get_db
from fleetdesk.exceptions import AuthorizationDenied, NotFound
from fleetdesk.models.route import Order, Route, RouteStatus
from fleetdesk.models.user import User
from fleetdesk.models.vehicle import Vehicle
from fleetdesk.schemas.route import RouteCreate, RouteRead, RouteUpdate, SweepResult
from fleetdesk.services import route_lifecycle
from fleetdesk.services.availability import normalize_day
from fleetdesk.utils.dates import now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


def _route_query():
    return select(Route).options(
        selectinload(Route.driver),
        selectinload(Route.vehicle),
        selectinload(Route.orders),
        selectinload(Route.daily_report),
    )


async def _load_route(db: AsyncSession, route_id: int) -> Route:
    result = await db.execute(_route_query().where(Route.id == route_id).execution_options(populate_existing=True))
    route = result.scalar_one_or_none()
    if not route:
        raise NotFound("Route", route_id)
    return route


async def _check_refs(db: AsyncSession, driver_id: int | None, vehicle_id: int | None) -> None:
    if driver_id is not None and await db.get(User, driver_id) is None:
        raise NotFound("Driver", driver_id)
    if vehicle_id is not None and await db.get(Vehicle, vehicle_id) is None:
        raise NotFound("Vehicle", vehicle_id)


@router.get("/", response_model=list[RouteRead])
async def list_routes(
    driver_id: int | None = None,
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Lister les trajets / List routes. Un chauffeur ne voit que les siens."""
    query = _route_query().order_by(Route.date, Route.id)
    if not user.is_staff:
        query = query.where(Route.driver_id == user.id)
    elif driver_id is not None:
        query = query.where(Route.driver_id == driver_id)
    if start and end:
        query = query.where(Route.date >= normalize_day(start), Route.date <= normalize_day(end))
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/pending-count")
async def get_pending_count(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Trajets sans rapport / Routes awaiting a daily report."""
    return {"count": await route_lifecycle.pending_count(db, user)}


@router.post("/auto-complete", response_model=SweepResult)
async def auto_complete(
    db: AsyncSession = Depends(get_db),
    actor: User | str = Depends(require_sweep_trigger),
):
    """Clôturer les trajets passés / Complete past routes still open."""
    return await route_lifecycle.auto_complete_routes(db, actor=actor)


@router.get("/{route_id}", response_model=RouteRead)
async def get_route(
    route_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    route = await _load_route(db, route_id)
    if not user.is_staff and route.driver_id != user.id:
        raise AuthorizationDenied("This route is not assigned to you")
    return route


@router.post("/", response_model=RouteRead, status_code=status.HTTP_201_CREATED)
async def create_route(
    data: RouteCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Créer un trajet (toujours PLANNED) / Create a route (always PLANNED)."""
    await _check_refs(db, data.driver_id, data.vehicle_id)
    now = now_iso()
    route = Route(
        name=data.name,
        map_url=data.map_url or None,
        date=data.date,
        driver_id=data.driver_id,
        vehicle_id=data.vehicle_id,
        planned_km=data.planned_km,
        note=data.note or None,
        complaint_count=data.complaint_count or 0,
        fuel_cost=data.fuel_cost or 0,
        driver_pay=data.driver_pay or 0,
        status=RouteStatus.PLANNED,
        created_at=now,
    )
    route.orders = [
        Order(
            order_number=o.order_number,
            price=o.price or 0,
            delivery_time=o.delivery_time or None,
            delivery_time_to=o.delivery_time_to or None,
            note=o.note or None,
            created_at=now,
        )
        for o in data.orders
    ]
    db.add(route)
    await db.flush()
    return await _load_route(db, route.id)


@router.put("/{route_id}", response_model=RouteRead)
async def update_route(
    route_id: int,
    data: RouteUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Modifier un trajet ; le passage à COMPLETED crédite le véhicule une fois / Edit a route; completion credits once."""
    route = await _load_route(db, route_id)
    changes = data.model_dump(exclude_unset=True, exclude={"orders"})
    for key in ("name", "date", "status", "complaint_count", "fuel_cost", "driver_pay"):
        if key in changes and changes[key] is None:
            del changes[key]
    await _check_refs(db, changes.get("driver_id"), changes.get("vehicle_id"))

    orders = None
    if data.orders is not None:
        orders = [o.model_dump(exclude_unset=True) for o in data.orders]
    await route_lifecycle.update_route(db, route, changes, user, orders=orders)
    return await _load_route(db, route_id)


@router.delete("/{route_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_route(
    route_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    route = await db.get(Route, route_id)
    if not route:
        raise NotFound("Route", route_id)
    await db.delete(route)
