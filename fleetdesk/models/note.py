"""Modèles notes dispatcher / Dispatcher notes models."""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class NoteCategory(Base):
    __tablename__ = "note_categories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[str | None] = mapped_column(String(32))

    notes: Mapped[list["Note"]] = relationship(
        back_populates="category", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<NoteCategory {self.name}>"


class Note(Base):
    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("note_categories.id", ondelete="CASCADE"), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str | None] = mapped_column(String(32))

    category: Mapped["NoteCategory"] = relationship(back_populates="notes")

    def __repr__(self) -> str:
        return f"<Note {self.id} - category {self.category_id}>"
