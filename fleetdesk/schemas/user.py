"""
Schémas Utilisateur, Chauffeur et Avis / User, driver and review schemas.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from fleetdesk.models.driver_review import ReviewDirection
from fleetdesk.models.user import UserRole


class UserBrief(BaseModel):
    """Liste publique pour l'écran de connexion / Public list for the login screen."""
    id: int
    name: str
    role: UserRole
    model_config = {"from_attributes": True}


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    color: str | None
    is_active: bool
    rating_up: int
    rating_down: int
    rating: int
    created_at: datetime | None = None
    model_config = {"from_attributes": True}


# --- Chauffeurs / Drivers ---
class DriverCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=200)
    color: str | None = Field(default=None, max_length=20)


class DriverUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    password: str | None = Field(default=None, min_length=1, max_length=200)
    color: str | None = Field(default=None, max_length=20)
    is_active: bool | None = None


# --- Avis / Reviews ---
class ReviewCreate(BaseModel):
    direction: ReviewDirection
    note: str | None = None


class ReviewRead(BaseModel):
    id: int
    driver_id: int
    direction: ReviewDirection
    note: str | None
    author_id: int | None
    created_at: str
    model_config = {"from_attributes": True}


class RatingRead(BaseModel):
    """Compteurs après avis ou remise à zéro / Counters after a review or a reset."""
    id: int
    name: str
    rating_up: int
    rating_down: int
    rating: int
    model_config = {"from_attributes": True}
