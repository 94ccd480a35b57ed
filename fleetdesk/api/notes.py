"""Routes Notes dispatcher / Dispatcher notes API routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.api.deps import require_staff
from fleetdesk.database import get_db
from fleetdesk.exceptions import NotFound
from fleetdesk.models.note import Note, NoteCategory
from fleetdesk.models.user import User
from fleetdesk.schemas.note import NoteCategoryCreate, NoteCategoryRead, NoteCreate, NoteRead, NoteUpdate
from fleetdesk.utils.dates import now_iso

router = APIRouter()


# ─── Catégories / Categories ───


@router.get("/categories", response_model=list[NoteCategoryRead])
async def list_categories(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    result = await db.execute(
        select(NoteCategory).options(selectinload(NoteCategory.notes)).order_by(NoteCategory.name)
    )
    return result.scalars().all()


@router.post("/categories", response_model=NoteCategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: NoteCategoryCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    category = NoteCategory(name=data.name.strip(), created_at=now_iso())
    category.notes = []
    db.add(category)
    await db.flush()
    return category


@router.put("/categories/{category_id}", response_model=NoteCategoryRead)
async def rename_category(
    category_id: int,
    data: NoteCategoryCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    result = await db.execute(
        select(NoteCategory).where(NoteCategory.id == category_id).options(selectinload(NoteCategory.notes))
    )
    category = result.scalar_one_or_none()
    if not category:
        raise NotFound("Note category", category_id)
    category.name = data.name.strip()
    await db.flush()
    return category


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Supprime aussi les notes / Also deletes its notes."""
    category = await db.get(NoteCategory, category_id)
    if not category:
        raise NotFound("Note category", category_id)
    await db.delete(category)


# ─── Notes ───


@router.get("/", response_model=list[NoteRead])
async def list_notes(
    category_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    query = select(Note).order_by(Note.id.desc())
    if category_id is not None:
        query = query.where(Note.category_id == category_id)
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def create_note(
    data: NoteCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    if await db.get(NoteCategory, data.category_id) is None:
        raise NotFound("Note category", data.category_id)
    note = Note(category_id=data.category_id, text=data.text.strip(), created_at=now_iso())
    db.add(note)
    await db.flush()
    return note


@router.put("/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: int,
    data: NoteUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    note = await db.get(Note, note_id)
    if not note:
        raise NotFound("Note", note_id)
    if data.category_id is not None:
        if await db.get(NoteCategory, data.category_id) is None:
            raise NotFound("Note category", data.category_id)
        note.category_id = data.category_id
    if data.text is not None:
        note.text = data.text.strip()
    await db.flush()
    return note


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    note = await db.get(Note, note_id)
    if not note:
        raise NotFound("Note", note_id)
    await db.delete(note)
