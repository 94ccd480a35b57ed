"""Modèle Trajet et commandes / Route and order models."""

import enum

from sqlalchemy import Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class RouteStatus(str, enum.Enum):
    """Statut du trajet / Route status."""
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class Route(Base):
    """Trajet journalier / Daily route."""
    __tablename__ = "routes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    map_url: Mapped[str | None] = mapped_column(String(500))
    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    status: Mapped[RouteStatus] = mapped_column(Enum(RouteStatus), default=RouteStatus.PLANNED, nullable=False)

    driver_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    vehicle_id: Mapped[int | None] = mapped_column(ForeignKey("vehicles.id", ondelete="SET NULL"))

    planned_km: Mapped[int | None] = mapped_column(Integer)
    actual_km: Mapped[int | None] = mapped_column(Integer)

    note: Mapped[str | None] = mapped_column(Text)
    complaint_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    fuel_cost: Mapped[float] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    driver_pay: Mapped[float] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    created_at: Mapped[str | None] = mapped_column(String(32))  # ISO 8601

    # Relations
    driver: Mapped["User | None"] = relationship(foreign_keys=[driver_id])
    vehicle: Mapped["Vehicle | None"] = relationship(foreign_keys=[vehicle_id])
    orders: Mapped[list["Order"]] = relationship(
        back_populates="route",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Order.id",
    )
    daily_report: Mapped["DailyReport | None"] = relationship(
        back_populates="route", cascade="all, delete-orphan", passive_deletes=True, uselist=False
    )

    def __repr__(self) -> str:
        return f"<Route {self.name} - {self.date}>"


class Order(Base):
    """Commande livree sur un trajet / Order delivered on a route."""
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    route_id: Mapped[int] = mapped_column(ForeignKey("routes.id", ondelete="CASCADE"), nullable=False)
    order_number: Mapped[str] = mapped_column(String(50), nullable=False)
    price: Mapped[float] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    delivery_time: Mapped[str | None] = mapped_column(String(5))  # HH:MM
    delivery_time_to: Mapped[str | None] = mapped_column(String(5))  # HH:MM
    note: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[str | None] = mapped_column(String(32))

    route: Mapped["Route"] = relationship(back_populates="orders")

    def __repr__(self) -> str:
        return f"<Order {self.order_number} - route {self.route_id}>"
