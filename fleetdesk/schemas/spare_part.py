"""Schémas magasin pièces / Spare parts schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fleetdesk.models.spare_part import MovementType
from fleetdesk.schemas.vehicle import VehicleBrief
from fleetdesk.utils.parsing import LooseInt, WholeInt


class SparePartCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    quantity: WholeInt = None
    unit: str | None = Field(default=None, max_length=20)
    min_stock: LooseInt = None
    note: str | None = None


class SparePartUpdate(BaseModel):
    """La quantité ne se modifie que par mouvement / Quantity only changes through movements."""
    name: str | None = Field(default=None, min_length=1, max_length=150)
    unit: str | None = Field(default=None, min_length=1, max_length=20)
    min_stock: LooseInt = None
    note: str | None = None


class MovementCreate(BaseModel):
    type: MovementType
    quantity: WholeInt = None
    note: str | None = None
    vehicle_id: int | None = None


class MovementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    spare_part_id: int
    type: MovementType
    quantity: int
    vehicle_id: int | None
    note: str | None
    created_at: str
    vehicle: VehicleBrief | None = None


class SparePartRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    unit: str
    quantity: int
    min_stock: int
    note: str | None
    low_stock: bool


class SparePartWithMovements(SparePartRead):
    movements: list[MovementRead] = []


class MovementResult(BaseModel):
    movement: MovementRead
    new_quantity: int
