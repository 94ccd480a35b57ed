"""Modèle magasin pieces détachées / Spare parts store model.

La quantite du stock est une projection des mouvements.
Part quantity is a materialized projection over its movements.
"""

import enum

from sqlalchemy import Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class MovementType(str, enum.Enum):
    """Sens du mouvement / Movement direction."""
    IN = "IN"
    OUT = "OUT"


class SparePart(Base):
    """Pièce détachée / Spare part."""
    __tablename__ = "spare_parts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="pcs")
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    min_stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    note: Mapped[str | None] = mapped_column(Text)

    movements: Mapped[list["SparePartMovement"]] = relationship(
        back_populates="spare_part",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SparePartMovement.id.desc()",
    )

    @property
    def low_stock(self) -> bool:
        return self.min_stock > 0 and self.quantity <= self.min_stock

    def __repr__(self) -> str:
        return f"<SparePart {self.name} {self.quantity} {self.unit}>"


class SparePartMovement(Base):
    """Mouvement de stock (journal append-only) / Stock movement (append-only ledger)."""
    __tablename__ = "spare_part_movements"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    spare_part_id: Mapped[int] = mapped_column(
        ForeignKey("spare_parts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[MovementType] = mapped_column(Enum(MovementType), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    vehicle_id: Mapped[int | None] = mapped_column(ForeignKey("vehicles.id", ondelete="SET NULL"))
    note: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601

    spare_part: Mapped["SparePart"] = relationship(back_populates="movements")
    vehicle: Mapped["Vehicle | None"] = relationship()

    def __repr__(self) -> str:
        return f"<Movement {self.type.value} {self.quantity} - part {self.spare_part_id}>"
