"""Schémas statistiques / Statistics schemas."""

from pydantic import BaseModel


class VehicleUsage(BaseModel):
    id: int
    license_plate: str
    name: str
    trips: int


class DriverStats(BaseModel):
    total_km: int
    average_km: int
    monthly_km: int
    total_trips: int
    monthly_trips: int
    vehicles: list[VehicleUsage]
    complaint_count: int
    rating: int
    rating_up: int
    rating_down: int


class DriverStatistics(BaseModel):
    id: int
    name: str
    email: str
    color: str | None
    stats: DriverStats


class StatisticsRead(BaseModel):
    drivers: list[DriverStatistics]
