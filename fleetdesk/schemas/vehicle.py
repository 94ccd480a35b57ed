"""Schémas Véhicule et entretien / Vehicle and maintenance schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from fleetdesk.services.maintenance import CounterState, DateState
from fleetdesk.utils.parsing import DayStr, LooseInt


class VehicleBase(BaseModel):
    license_plate: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=150)
    current_km: LooseInt = None


class VehicleCreate(VehicleBase):
    oil_limit_km: LooseInt = None
    adblue_limit_km: LooseInt = None
    brakes_limit_km: LooseInt = None
    bearings_limit_km: LooseInt = None
    brake_fluid_last_change: DayStr | None = None
    brake_fluid_limit_months: LooseInt = None
    green_card_date: DayStr | None = None
    green_card_limit_months: LooseInt = None
    coolant_last_change: DayStr | None = None
    coolant_limit_months: LooseInt = None
    technical_inspection_date: DayStr | None = None


class VehicleUpdate(BaseModel):
    license_plate: str | None = Field(default=None, min_length=1, max_length=20)
    name: str | None = Field(default=None, min_length=1, max_length=150)
    current_km: LooseInt = None
    oil_limit_km: LooseInt = None
    adblue_limit_km: LooseInt = None
    brakes_limit_km: LooseInt = None
    bearings_limit_km: LooseInt = None
    brake_fluid_limit_months: LooseInt = None
    green_card_limit_months: LooseInt = None
    coolant_limit_months: LooseInt = None


class VehicleRead(VehicleBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    oil_km: int
    oil_limit_km: int
    oil_last_reset: str | None
    adblue_km: int
    adblue_limit_km: int
    adblue_last_reset: str | None
    brakes_km: int
    brakes_limit_km: int
    brakes_last_reset: str | None
    bearings_km: int
    bearings_limit_km: int
    bearings_last_reset: str | None
    brake_fluid_last_change: str | None
    brake_fluid_limit_months: int
    green_card_date: str | None
    green_card_limit_months: int
    coolant_last_change: str | None
    coolant_limit_months: int
    technical_inspection_date: str | None


class VehicleBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    license_plate: str
    name: str


# --- Entretien / Maintenance ---
class MaintenanceAction(BaseModel):
    """add : créditer km ; reset : remettre un compteur à zéro ; setDate : saisir une date."""
    action: Literal["add", "reset", "setDate"]
    type: str | None = None
    km: LooseInt = None
    date: str | None = None


class CounterViewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    name: str
    km: int
    limit_km: int
    percent: float
    status: CounterState
    last_reset: str | None


class DateViewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    name: str
    date: str | None
    next_due: str | None
    limit_months: int
    percent: float
    days_remaining: int | None
    status: DateState


class MaintenanceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    vehicle_id: int
    counters: list[CounterViewRead]
    dates: list[DateViewRead]
    needs_attention: bool


class MaintenanceAlert(BaseModel):
    vehicle: VehicleBrief
    maintenance: MaintenanceRead
