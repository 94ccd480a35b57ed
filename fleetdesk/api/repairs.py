"""Routes Réparations / Repair API routes."""

from datetime import date

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.api.deps import get_current_user, require_staff
from fleetdesk.database import get_db
from fleetdesk.exceptions import NotFound
from fleetdesk.models.repair import Repair
from fleetdesk.models.user import User
from fleetdesk.models.vehicle import Vehicle
from fleetdesk.schemas.repair import RepairCreate, RepairRead, RepairUpdate

router = APIRouter()


@router.get("/", response_model=list[RepairRead])
async def list_repairs(
    vehicle_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    query = select(Repair).order_by(Repair.date.desc(), Repair.id.desc())
    if vehicle_id is not None:
        query = query.where(Repair.vehicle_id == vehicle_id)
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/", response_model=RepairRead, status_code=status.HTTP_201_CREATED)
async def create_repair(
    data: RepairCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    if await db.get(Vehicle, data.vehicle_id) is None:
        raise NotFound("Vehicle", data.vehicle_id)
    repair = Repair(
        vehicle_id=data.vehicle_id,
        description=data.description.strip(),
        price=data.price,
        note=data.note or None,
        date=data.date or date.today().isoformat(),
    )
    db.add(repair)
    await db.flush()
    await db.refresh(repair)
    return repair


@router.put("/{repair_id}", response_model=RepairRead)
async def update_repair(
    repair_id: int,
    data: RepairUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    repair = await db.get(Repair, repair_id)
    if not repair:
        raise NotFound("Repair", repair_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key in ("description", "date"):
            continue
        setattr(repair, key, value)
    await db.flush()
    await db.refresh(repair)
    return repair


@router.delete("/{repair_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_repair(
    repair_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    repair = await db.get(Repair, repair_id)
    if not repair:
        raise NotFound("Repair", repair_id)
    await db.delete(repair)
