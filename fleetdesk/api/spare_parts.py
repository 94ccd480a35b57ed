"""Routes Magasin pièces / Spare parts API routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.api.deps import require_staff
from fleetdesk.database import get_db
from fleetdesk.exceptions import NotFound
from fleetdesk.models.spare_part import SparePart, SparePartMovement
from fleetdesk.models.user import User
from fleetdesk.schemas.spare_part import (
    MovementCreate,
    MovementRead,
    MovementResult,
    SparePartCreate,
    SparePartRead,
    SparePartUpdate,
    SparePartWithMovements,
)
from fleetdesk.services import spare_parts
from fleetdesk.services.audit import log_audit

router = APIRouter()

LATEST_MOVEMENTS = 10


async def _movements(db: AsyncSession, part_id: int, limit: int | None = None) -> list[SparePartMovement]:
    query = (
        select(SparePartMovement)
        .where(SparePartMovement.spare_part_id == part_id)
        .options(selectinload(SparePartMovement.vehicle))
        .order_by(SparePartMovement.id.desc())
    )
    if limit:
        query = query.limit(limit)
    return list((await db.execute(query)).scalars().all())


async def _with_movements(db: AsyncSession, part: SparePart) -> SparePartWithMovements:
    movements = await _movements(db, part.id, LATEST_MOVEMENTS)
    return SparePartWithMovements(
        **SparePartRead.model_validate(part).model_dump(),
        movements=[MovementRead.model_validate(m) for m in movements],
    )


@router.get("/", response_model=list[SparePartWithMovements])
async def list_parts(
    low_stock: bool = False,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Pièces avec leurs 10 derniers mouvements / Parts with their 10 latest movements."""
    if low_stock:
        parts = await spare_parts.low_stock(db)
    else:
        parts = (await db.execute(select(SparePart).order_by(SparePart.name))).scalars().all()
    return [await _with_movements(db, p) for p in parts]


@router.post("/", response_model=SparePartRead, status_code=status.HTTP_201_CREATED)
async def create_part(
    data: SparePartCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Créer une pièce ; le stock initial est journalisé / Create a part; opening stock is logged as IN."""
    return await spare_parts.create_part(
        db, user, data.name, quantity=data.quantity, unit=data.unit, min_stock=data.min_stock, note=data.note
    )


@router.get("/{part_id}", response_model=SparePartWithMovements)
async def get_part(
    part_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    part = await db.get(SparePart, part_id)
    if not part:
        raise NotFound("Spare part", part_id)
    return await _with_movements(db, part)


@router.put("/{part_id}", response_model=SparePartRead)
async def update_part(
    part_id: int,
    data: SparePartUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    part = await db.get(SparePart, part_id)
    if not part:
        raise NotFound("Spare part", part_id)
    spare_parts.update_part(part, user, data.model_dump(exclude_unset=True))
    await db.flush()
    await db.refresh(part)
    return part


@router.delete("/{part_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_part(
    part_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Supprimer la pièce et son historique / Delete the part and its movement history."""
    part = await db.get(SparePart, part_id)
    if not part:
        raise NotFound("Spare part", part_id)
    await log_audit(db, "spare_part", part.id, "DELETE", user, {"name": part.name, "quantity": part.quantity})
    await db.delete(part)


# ─── Mouvements / Movements ───


@router.get("/{part_id}/movements", response_model=list[MovementRead])
async def list_movements(
    part_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Historique complet / Full movement history."""
    if await db.get(SparePart, part_id) is None:
        raise NotFound("Spare part", part_id)
    return await _movements(db, part_id)


@router.post("/{part_id}/movements", response_model=MovementResult, status_code=status.HTTP_201_CREATED)
async def post_movement(
    part_id: int,
    data: MovementCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Entrée ou sortie de stock / Stock receipt or issue."""
    movement, part = await spare_parts.record_movement(
        db, user, part_id, data.type, data.quantity, note=data.note, vehicle_id=data.vehicle_id
    )
    result = await db.execute(
        select(SparePartMovement)
        .where(SparePartMovement.id == movement.id)
        .options(selectinload(SparePartMovement.vehicle))
        .execution_options(populate_existing=True)
    )
    return MovementResult(movement=MovementRead.model_validate(result.scalar_one()), new_quantity=part.quantity)
