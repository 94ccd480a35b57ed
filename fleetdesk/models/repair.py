"""Modèle reparation / Repair model."""

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class Repair(Base):
    __tablename__ = "repairs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float | None] = mapped_column(Numeric(10, 2))
    note: Mapped[str | None] = mapped_column(Text)
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD

    vehicle: Mapped["Vehicle"] = relationship(back_populates="repairs")

    def __repr__(self) -> str:
        return f"<Repair vehicle {self.vehicle_id} - {self.date}>"
