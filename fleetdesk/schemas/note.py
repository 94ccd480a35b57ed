"""Schémas notes / Notes schemas."""

from pydantic import BaseModel, ConfigDict, Field


class NoteCategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class NoteCreate(BaseModel):
    category_id: int
    text: str = Field(min_length=1)


class NoteUpdate(BaseModel):
    text: str | None = Field(default=None, min_length=1)
    category_id: int | None = None


class NoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    category_id: int
    text: str
    created_at: str | None


class NoteCategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    created_at: str | None
    notes: list[NoteRead] = []
