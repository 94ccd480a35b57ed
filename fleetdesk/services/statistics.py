"""
Statistiques chauffeurs / Driver statistics.
Agrégation en mémoire des trajets par chauffeur, triée par km total décroissant.
In-memory aggregation of routes per driver, sorted by total km descending.
"""

import math
from collections import defaultdict
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.models.route import Route
from fleetdesk.models.user import User, UserRole
from fleetdesk.services.ratings import score


def _month_bounds(today: date) -> tuple[str, str]:
    first = today.replace(day=1)
    if first.month == 12:
        following = first.replace(year=first.year + 1, month=1)
    else:
        following = first.replace(month=first.month + 1)
    return first.isoformat(), following.isoformat()


def driver_stats(driver: User, routes: list[Route], today: date) -> dict:
    """Statistiques d'un chauffeur / Statistics of one driver."""
    month_start, next_month = _month_bounds(today)
    monthly = [r for r in routes if month_start <= r.date < next_month]

    with_km = [r.actual_km for r in routes if r.actual_km and r.actual_km > 0]
    average_km = math.floor(sum(with_km) / len(with_km) + 0.5) if with_km else 0

    vehicles: dict[int, dict] = {}
    for route in routes:
        if route.vehicle is None:
            continue
        entry = vehicles.setdefault(route.vehicle.id, {
            "id": route.vehicle.id,
            "license_plate": route.vehicle.license_plate,
            "name": route.vehicle.name,
            "trips": 0,
        })
        entry["trips"] += 1

    return {
        "id": driver.id,
        "name": driver.name,
        "email": driver.email,
        "color": driver.color,
        "stats": {
            "total_km": sum(r.actual_km or 0 for r in routes),
            "average_km": average_km,
            "monthly_km": sum(r.actual_km or 0 for r in monthly),
            "total_trips": len(routes),
            "monthly_trips": len(monthly),
            "vehicles": sorted(vehicles.values(), key=lambda v: v["trips"], reverse=True),
            "complaint_count": sum(r.complaint_count or 0 for r in routes),
            "rating": score(driver),
            "rating_up": driver.rating_up or 0,
            "rating_down": driver.rating_down or 0,
        },
    }


async def driver_statistics(db: AsyncSession, actor: User, today: date | None = None) -> list[dict]:
    """Un chauffeur ne voit que lui-même / A driver only sees themself."""
    today = today or date.today()

    query = select(User).where(User.role == UserRole.DRIVER).order_by(User.name)
    if not actor.is_staff:
        query = query.where(User.id == actor.id)
    drivers = list((await db.execute(query)).scalars().all())

    routes_by_driver: dict[int, list[Route]] = defaultdict(list)
    if drivers:
        result = await db.execute(
            select(Route)
            .where(Route.driver_id.in_([d.id for d in drivers]))
            .options(selectinload(Route.vehicle))
        )
        for route in result.scalars().all():
            routes_by_driver[route.driver_id].append(route)

    stats = [driver_stats(d, routes_by_driver[d.id], today) for d in drivers]
    stats.sort(key=lambda s: s["stats"]["total_km"], reverse=True)
    return stats
