"""
Modèle Utilisateur / User model.
Dispatchers, administrateurs et chauffeurs partagent la meme table.
Dispatchers, admins and drivers share one table.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class UserRole(str, enum.Enum):
    """Role de l'utilisateur / User role."""
    DRIVER = "DRIVER"
    DISPATCHER = "DISPATCHER"
    ADMIN = "ADMIN"


STAFF_ROLES = (UserRole.DISPATCHER, UserRole.ADMIN)


class User(Base):
    """Utilisateur de l'application / Application user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False, default=UserRole.DRIVER)
    color: Mapped[str | None] = mapped_column(String(20))  # #RRGGBB pour le calendrier / calendar color
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Compteurs materialises des avis / Materialized review counters
    rating_up: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rating_down: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    # Relations
    reviews: Mapped[list["DriverReview"]] = relationship(
        back_populates="driver",
        cascade="all, delete-orphan",
        passive_deletes=True,
        foreign_keys="DriverReview.driver_id",
    )
    availability: Mapped[list["Availability"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def rating(self) -> int:
        """Solde des avis / Review balance (never stored)."""
        return (self.rating_up or 0) - (self.rating_down or 0)

    def __repr__(self) -> str:
        return f"<User {self.name} ({self.role.value})>"
