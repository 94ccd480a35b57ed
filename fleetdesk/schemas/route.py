"""Schémas Trajet et Commande / Route and order schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fleetdesk.models.route import RouteStatus
from fleetdesk.schemas.daily_report import DailyReportBrief
from fleetdesk.schemas.vehicle import VehicleBrief
from fleetdesk.utils.parsing import DayStr, LooseFloat, LooseInt


class DriverBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    color: str | None = None


# --- Commandes / Orders ---
class OrderInput(BaseModel):
    """Sans id : nouvelle commande / Without id: new order."""
    id: int | None = None
    order_number: str = Field(min_length=1, max_length=50)
    price: LooseFloat = None
    delivery_time: str | None = Field(default=None, max_length=5)
    delivery_time_to: str | None = Field(default=None, max_length=5)
    note: str | None = None


class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    order_number: str
    price: float
    delivery_time: str | None
    delivery_time_to: str | None
    note: str | None
    created_at: str | None


# --- Trajets / Routes ---
class RouteCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    date: DayStr
    map_url: str | None = None
    driver_id: int | None = None
    vehicle_id: int | None = None
    planned_km: LooseInt = None
    note: str | None = None
    complaint_count: LooseInt = None
    fuel_cost: LooseFloat = None
    driver_pay: LooseFloat = None
    orders: list[OrderInput] = []


class RouteUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    date: DayStr | None = None
    map_url: str | None = None
    driver_id: int | None = None
    vehicle_id: int | None = None
    planned_km: LooseInt = None
    actual_km: LooseInt = None
    status: RouteStatus | None = None
    note: str | None = None
    complaint_count: LooseInt = None
    fuel_cost: LooseFloat = None
    driver_pay: LooseFloat = None
    orders: list[OrderInput] | None = None


class RouteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    map_url: str | None
    date: str
    status: RouteStatus
    driver_id: int | None
    vehicle_id: int | None
    planned_km: int | None
    actual_km: int | None
    note: str | None
    complaint_count: int
    fuel_cost: float
    driver_pay: float
    driver: DriverBrief | None = None
    vehicle: VehicleBrief | None = None
    orders: list[OrderRead] = []
    daily_report: DailyReportBrief | None = None


class SweepResult(BaseModel):
    completed: int
    failed: int
    route_ids: list[int]
