"""Modèle avis chauffeur / Driver review model.

Journal append-only ; User.rating_up / rating_down en sont la projection.
Append-only ledger; User.rating_up / rating_down are its projection.
"""

import enum

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class ReviewDirection(str, enum.Enum):
    UP = "up"
    DOWN = "down"


class DriverReview(Base):
    __tablename__ = "driver_reviews"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    driver_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    direction: Mapped[ReviewDirection] = mapped_column(Enum(ReviewDirection), nullable=False)
    note: Mapped[str | None] = mapped_column(String(500))
    author_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601

    driver: Mapped["User"] = relationship(back_populates="reviews", foreign_keys=[driver_id])

    def __repr__(self) -> str:
        return f"<DriverReview {self.direction.value} - driver {self.driver_id}>"
