"""Modèle disponibilite chauffeur / Driver availability model."""

import enum

from sqlalchemy import Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class AvailabilityStatus(str, enum.Enum):
    """Disponibilite du jour / Day availability."""
    AVAILABLE = "AVAILABLE"
    PARTIAL = "PARTIAL"
    UNAVAILABLE = "UNAVAILABLE"


class Availability(Base):
    __tablename__ = "availability"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_availability_user_date"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD (jour UTC / UTC day)
    status: Mapped[AvailabilityStatus] = mapped_column(Enum(AvailabilityStatus), nullable=False)
    note: Mapped[str | None] = mapped_column(Text)

    user: Mapped["User"] = relationship(back_populates="availability")

    def __repr__(self) -> str:
        return f"<Availability user {self.user_id} {self.date} {self.status.value}>"
