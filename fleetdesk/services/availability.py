"""Disponibilités des chauffeurs / Driver availability upsert."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.exceptions import NotFound, ValidationError
from fleetdesk.models.availability import Availability, AvailabilityStatus
from fleetdesk.models.user import User
from fleetdesk.utils.dates import parse_day


def normalize_day(value: str | date | None) -> str:
    """Jour canonique 'YYYY-MM-DD' / Canonical 'YYYY-MM-DD' day key."""
    if value in (None, ""):
        raise ValidationError("Date is required")
    try:
        return parse_day(value).isoformat()
    except ValueError:
        raise ValidationError(f"Invalid date: {value}", {"date": str(value)})


async def set_availability(
    db: AsyncSession,
    actor: User,
    day: str | date | None,
    status: AvailabilityStatus | None,
    note: str | None = None,
    driver_id: int | None = None,
) -> Availability | None:
    """Créer, écraser ou effacer la disponibilité d'un jour / Create, overwrite or clear one day's availability.

    Un statut nul supprime l'enregistrement et retourne None.
    A null status deletes the record and returns None.
    """
    key = normalize_day(day)

    user_id = actor.id
    if driver_id and actor.is_staff:
        if await db.get(User, driver_id) is None:
            raise NotFound("User", driver_id)
        user_id = driver_id

    result = await db.execute(
        select(Availability).where(Availability.user_id == user_id, Availability.date == key)
    )
    record = result.scalar_one_or_none()

    if status is None:
        if record is not None:
            await db.delete(record)
            await db.flush()
        return None

    if record is None:
        record = Availability(user_id=user_id, date=key, status=status, note=note or None)
        db.add(record)
    else:
        record.status = status
        record.note = note or None
    await db.flush()
    return record


async def list_availability(
    db: AsyncSession,
    user_id: int | None = None,
    start: str | date | None = None,
    end: str | date | None = None,
) -> list[Availability]:
    query = (
        select(Availability)
        .options(selectinload(Availability.user))
        .order_by(Availability.date, Availability.user_id)
    )
    if user_id is not None:
        query = query.where(Availability.user_id == user_id)
    if start and end:
        query = query.where(Availability.date >= normalize_day(start), Availability.date <= normalize_day(end))
    result = await db.execute(query)
    return list(result.scalars().all())
