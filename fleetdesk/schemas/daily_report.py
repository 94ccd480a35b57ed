"""Schémas rapport journalier / Daily report schemas."""

from pydantic import BaseModel, ConfigDict

from fleetdesk.models.daily_report import CarCheck
from fleetdesk.utils.parsing import LooseFloat, LooseInt


class DailyReportCreate(BaseModel):
    route_id: int | None = None
    actual_km: LooseInt = None
    fuel_cost: LooseFloat = None
    car_check: CarCheck = CarCheck.OK
    car_check_note: str | None = None


class DailyReportBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    actual_km: int
    fuel_cost: float
    car_check: CarCheck
    car_check_note: str | None
    resolved: bool
    created_at: str


class ReportRouteBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    date: str
    planned_km: int | None
    vehicle_id: int | None


class DailyReportRead(DailyReportBrief):
    route_id: int
    driver_id: int
    route: ReportRouteBrief | None = None


class NokReportList(BaseModel):
    reports: list[DailyReportRead]
    count: int  # NOK non résolus / unresolved NOK


class ResolveRequest(BaseModel):
    resolved: bool = True
