"""Routes Chauffeurs et avis / Driver and review API routes."""

import re
import time
import unicodedata

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.api.deps import get_current_user, require_staff
from fleetdesk.database import get_db
from fleetdesk.exceptions import NotFound, ValidationError
from fleetdesk.models.user import User, UserRole
from fleetdesk.schemas.user import (
    DriverCreate,
    DriverUpdate,
    RatingRead,
    ReviewCreate,
    ReviewRead,
    UserRead,
)
from fleetdesk.services import ratings
from fleetdesk.services.audit import log_audit
from fleetdesk.utils.auth import hash_password

router = APIRouter()

DRIVER_EMAIL_DOMAIN = "drivers.fleetdesk.app"


def driver_email(name: str) -> str:
    """E-mail interne généré / Generated internal e-mail: <slug>-<epoch-ms>@drivers.fleetdesk.app."""
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_name.lower()).strip("-") or "driver"
    return f"{slug}-{int(time.time() * 1000)}@{DRIVER_EMAIL_DOMAIN}"


async def _get_driver(db: AsyncSession, driver_id: int) -> User:
    user = await db.get(User, driver_id)
    if not user:
        raise NotFound("Driver", driver_id)
    if user.role != UserRole.DRIVER:
        raise ValidationError("Only drivers can be managed here", {"id": driver_id})
    return user


@router.get("/", response_model=list[UserRead])
async def list_drivers(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(select(User).where(User.role == UserRole.DRIVER).order_by(User.name))
    return result.scalars().all()


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_driver(
    data: DriverCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    driver = User(
        name=data.name.strip(),
        email=driver_email(data.name),
        hashed_password=hash_password(data.password),
        role=UserRole.DRIVER,
        color=data.color,
        is_active=True,
        rating_up=0,
        rating_down=0,
    )
    db.add(driver)
    await db.flush()
    await db.refresh(driver)
    return driver


@router.put("/{driver_id}", response_model=UserRead)
async def update_driver(
    driver_id: int,
    data: DriverUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    driver = await _get_driver(db, driver_id)
    changes = data.model_dump(exclude_unset=True)
    password = changes.pop("password", None)
    for key, value in changes.items():
        if value is not None or key == "color":
            setattr(driver, key, value)
    if password:
        driver.hashed_password = hash_password(password)
    await db.flush()
    await db.refresh(driver)
    return driver


@router.delete("/{driver_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_driver(
    driver_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    driver = await _get_driver(db, driver_id)
    await log_audit(db, "user", driver.id, "DELETE", user, {"name": driver.name})
    await db.delete(driver)


# ─── Avis / Reviews ───


@router.get("/{driver_id}/reviews", response_model=list[ReviewRead])
async def list_reviews(
    driver_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    await _get_driver(db, driver_id)
    return await ratings.list_reviews(db, driver_id)


@router.post("/{driver_id}/reviews", response_model=RatingRead, status_code=status.HTTP_201_CREATED)
async def post_review(
    driver_id: int,
    data: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    review = await ratings.review(db, user, driver_id, data.direction, data.note)
    return await db.get(User, review.driver_id)


@router.delete("/{driver_id}/reviews", response_model=RatingRead)
async def reset_reviews(
    driver_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    return await ratings.reset_ratings(db, user, driver_id)
