"""Schémas disponibilité / Availability schemas."""

from pydantic import BaseModel, ConfigDict

from fleetdesk.models.availability import AvailabilityStatus


class AvailabilitySet(BaseModel):
    """status nul : effacer le jour / null status: clear the day."""
    date: str
    status: AvailabilityStatus | None = None
    note: str | None = None
    driver_id: int | None = None


class AvailabilityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    date: str
    status: AvailabilityStatus
    note: str | None


class AvailabilityUserBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    email: str


class AvailabilityWithUser(AvailabilityRead):
    user: AvailabilityUserBrief
