"""Modèle Véhicule / Vehicle model.

Quatre compteurs d'usure en km (huile, AdBlue, freins, roulements) et quatre
echeances datees (liquide de frein, carte verte, liquide de refroidissement,
controle technique).
Four km wear counters and four date-based maintenance facts.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class Vehicle(Base):
    """Véhicule du parc / Fleet vehicle."""
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # --- Identification ---
    license_plate: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)

    # --- Kilometrage / Mileage ---
    current_km: Mapped[int | None] = mapped_column(Integer)

    # --- Compteurs d'usure / Usage counters (km since last reset) ---
    oil_km: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    oil_limit_km: Mapped[int] = mapped_column(Integer, default=15000, nullable=False)
    oil_last_reset: Mapped[str | None] = mapped_column(String(32))  # ISO 8601

    adblue_km: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    adblue_limit_km: Mapped[int] = mapped_column(Integer, default=10000, nullable=False)
    adblue_last_reset: Mapped[str | None] = mapped_column(String(32))

    brakes_km: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    brakes_limit_km: Mapped[int] = mapped_column(Integer, default=60000, nullable=False)
    brakes_last_reset: Mapped[str | None] = mapped_column(String(32))

    bearings_km: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    bearings_limit_km: Mapped[int] = mapped_column(Integer, default=100000, nullable=False)
    bearings_last_reset: Mapped[str | None] = mapped_column(String(32))

    # --- Echeances datees / Date-based facts ---
    brake_fluid_last_change: Mapped[str | None] = mapped_column(String(10))  # YYYY-MM-DD
    brake_fluid_limit_months: Mapped[int] = mapped_column(Integer, default=24, nullable=False)
    green_card_date: Mapped[str | None] = mapped_column(String(10))  # date d'expiration / expiry
    green_card_limit_months: Mapped[int] = mapped_column(Integer, default=12, nullable=False)
    coolant_last_change: Mapped[str | None] = mapped_column(String(10))
    coolant_limit_months: Mapped[int] = mapped_column(Integer, default=24, nullable=False)
    technical_inspection_date: Mapped[str | None] = mapped_column(String(10))  # expiry

    # --- Relations ---
    repairs: Mapped[list["Repair"]] = relationship(
        back_populates="vehicle", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Vehicle {self.license_plate} - {self.name}>"
