"""Routes Disponibilités / Availability API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.api.deps import get_current_user
from fleetdesk.database import get_db
from fleetdesk.models.user import User
from fleetdesk.schemas.availability import AvailabilityRead, AvailabilitySet, AvailabilityWithUser
from fleetdesk.services import availability as availability_service

router = APIRouter()


@router.get("/", response_model=list[AvailabilityRead])
async def my_availability(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await availability_service.list_availability(db, user_id=user.id)


@router.get("/all", response_model=list[AvailabilityWithUser])
async def all_availability(
    start: str | None = None,
    end: str | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Disponibilités de tous (tout utilisateur connecté) / Everyone's availability (any signed-in user)."""
    return await availability_service.list_availability(db, start=start, end=end)


@router.post("/", response_model=AvailabilityRead | None)
async def set_availability(
    data: AvailabilitySet,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Créer, écraser ou effacer (status nul) / Create, overwrite or clear (null status)."""
    return await availability_service.set_availability(
        db, user, data.date, data.status, note=data.note, driver_id=data.driver_id
    )
