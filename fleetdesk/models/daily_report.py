"""Modèle rapport journalier chauffeur / Driver daily report model."""

import enum

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class CarCheck(str, enum.Enum):
    """Resultat du controle vehicule / Vehicle check outcome."""
    OK = "OK"
    NOK = "NOK"


class DailyReport(Base):
    """Rapport de fin de trajet / End-of-route report. Au plus un par trajet / at most one per route."""
    __tablename__ = "daily_reports"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    route_id: Mapped[int] = mapped_column(
        ForeignKey("routes.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    driver_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    actual_km: Mapped[int] = mapped_column(Integer, nullable=False)
    fuel_cost: Mapped[float] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    car_check: Mapped[CarCheck] = mapped_column(Enum(CarCheck), default=CarCheck.OK, nullable=False)
    car_check_note: Mapped[str | None] = mapped_column(Text)
    resolved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601

    # Relations
    route: Mapped["Route"] = relationship(back_populates="daily_report")
    driver: Mapped["User"] = relationship()

    def __repr__(self) -> str:
        return f"<DailyReport route {self.route_id} - {self.car_check.value}>"
