"""
Magasin de pièces détachées / Spare-parts ledger.

Chaque mouvement IN/OUT est ajouté au journal en même temps que la quantité
du stock est ajustée, sous verrou de ligne sur la pièce.
Every IN/OUT movement is appended together with the quantity adjustment,
under a row lock on the part.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.config import settings
from fleetdesk.exceptions import AuthorizationDenied, InsufficientStock, NotFound, ValidationError
from fleetdesk.models.spare_part import MovementType, SparePart, SparePartMovement
from fleetdesk.models.user import User
from fleetdesk.models.vehicle import Vehicle
from fleetdesk.utils.dates import now_iso

logger = logging.getLogger(__name__)

OPENING_BALANCE_NOTE = "Opening balance"


def _require_staff(actor: User) -> None:
    if not actor.is_staff:
        raise AuthorizationDenied()


async def lock_part(db: AsyncSession, part_id: int) -> SparePart | None:
    result = await db.execute(
        select(SparePart)
        .where(SparePart.id == part_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_part(
    db: AsyncSession,
    actor: User,
    name: str,
    quantity: int | None = 0,
    unit: str | None = None,
    min_stock: int | None = 0,
    note: str | None = None,
) -> SparePart:
    """Créer une pièce ; le stock initial devient un mouvement IN / Create a part; opening stock becomes an IN movement."""
    _require_staff(actor)
    if not name or not name.strip():
        raise ValidationError("Name is required")
    quantity = quantity or 0
    if quantity < 0:
        raise ValidationError("Quantity must not be negative", {"quantity": quantity})

    part = SparePart(
        name=name.strip(),
        unit=unit or settings.DEFAULT_PART_UNIT,
        quantity=quantity,
        min_stock=min_stock or 0,
        note=note or None,
    )
    db.add(part)
    await db.flush()

    if quantity > 0:
        db.add(SparePartMovement(
            spare_part_id=part.id,
            type=MovementType.IN,
            quantity=quantity,
            note=OPENING_BALANCE_NOTE,
            created_at=now_iso(),
        ))
        await db.flush()
    return part


async def record_movement(
    db: AsyncSession,
    actor: User,
    part_id: int,
    movement_type: MovementType | str | None,
    quantity: int | None,
    note: str | None = None,
    vehicle_id: int | None = None,
) -> tuple[SparePartMovement, SparePart]:
    """Enregistrer un mouvement et ajuster le stock / Record a movement and adjust the stock.

    Une sortie supérieure au stock est refusée, la quantité reste inchangée.
    An OUT larger than the stock on hand is rejected and the quantity is left unchanged.
    """
    _require_staff(actor)
    try:
        movement_type = MovementType(movement_type)
    except ValueError:
        raise ValidationError("Type must be IN or OUT", {"type": movement_type})
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer", {"quantity": quantity})

    part = await lock_part(db, part_id)
    if part is None:
        raise NotFound("Spare part", part_id)
    if vehicle_id is not None and await db.get(Vehicle, vehicle_id) is None:
        raise NotFound("Vehicle", vehicle_id)

    if movement_type == MovementType.OUT and quantity > part.quantity:
        logger.info(
            "Rejected OUT of %s %s for part %s, available %s",
            quantity, part.unit, part.id, part.quantity,
        )
        raise InsufficientStock(part.quantity, part.unit)

    movement = SparePartMovement(
        spare_part_id=part.id,
        type=movement_type,
        quantity=quantity,
        vehicle_id=vehicle_id,
        note=note or None,
        created_at=now_iso(),
    )
    db.add(movement)
    part.quantity += quantity if movement_type == MovementType.IN else -quantity
    await db.flush()
    return movement, part


def update_part(part: SparePart, actor: User, changes: dict) -> SparePart:
    """Modifier les attributs descriptifs ; jamais la quantité / Edit descriptive fields; never the quantity."""
    _require_staff(actor)
    for key in ("name", "unit", "min_stock", "note"):
        if key in changes and (changes[key] is not None or key == "note"):
            setattr(part, key, changes[key])
    return part


async def low_stock(db: AsyncSession) -> list[SparePart]:
    result = await db.execute(
        select(SparePart)
        .where(SparePart.min_stock > 0, SparePart.quantity <= SparePart.min_stock)
        .order_by(SparePart.name)
    )
    return list(result.scalars().all())
