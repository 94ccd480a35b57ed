"""Modèle Historique / Audit log model."""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fleetdesk.database import Base


class AuditLog(Base):
    """Journal append-only des actions sensibles / Append-only log of sensitive actions."""
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)  # route, user, spare_part...
    entity_id: Mapped[int | None] = mapped_column(Integer)
    action: Mapped[str] = mapped_column(String(30), nullable=False)  # LOGIN, LOGIN_FAILED, COMPLETE, RESET, DELETE
    changes: Mapped[str | None] = mapped_column(Text)  # JSON
    user: Mapped[str | None] = mapped_column(String(150))
    timestamp: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} {self.entity_type}:{self.entity_id}>"
