"""Routes API / API routes."""

from fastapi import APIRouter

from fleetdesk.api import (
    auth,
    users,
    drivers,
    vehicles,
    routes,
    daily_reports,
    availability,
    spare_parts,
    repairs,
    notes,
    statistics,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(drivers.router, prefix="/drivers", tags=["drivers"])
api_router.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(routes.router, prefix="/routes", tags=["routes"])
api_router.include_router(daily_reports.router, prefix="/daily-reports", tags=["daily-reports"])
api_router.include_router(availability.router, prefix="/availability", tags=["availability"])
api_router.include_router(spare_parts.router, prefix="/spare-parts", tags=["spare-parts"])
api_router.include_router(repairs.router, prefix="/repairs", tags=["repairs"])
api_router.include_router(notes.router, prefix="/notes", tags=["notes"])
api_router.include_router(statistics.router, prefix="/statistics", tags=["statistics"])
