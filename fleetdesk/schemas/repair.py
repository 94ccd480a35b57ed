"""Schémas Réparation / Repair schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fleetdesk.utils.parsing import DayStr, LooseFloat


class RepairCreate(BaseModel):
    vehicle_id: int
    description: str = Field(min_length=1)
    price: LooseFloat = None
    note: str | None = None
    date: DayStr | None = None  # aujourd'hui par défaut / defaults to today


class RepairUpdate(BaseModel):
    description: str | None = Field(default=None, min_length=1)
    price: LooseFloat = None
    note: str | None = None
    date: DayStr | None = None


class RepairRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    vehicle_id: int
    description: str
    price: float | None
    note: str | None
    date: str
