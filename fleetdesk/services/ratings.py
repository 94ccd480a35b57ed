"""
Avis sur les chauffeurs / Driver rating ledger.

Les compteurs User.rating_up / rating_down sont tenus à jour avec le journal
DriverReview dans la même transaction.
User.rating_up / rating_down are kept in step with the DriverReview ledger
in the same transaction.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.exceptions import AuthorizationDenied, NotFound, ValidationError
from fleetdesk.models.driver_review import DriverReview, ReviewDirection
from fleetdesk.models.user import User, UserRole
from fleetdesk.services.audit import log_audit
from fleetdesk.utils.dates import now_iso

NOTE_MAX_LENGTH = 500


async def _lock_driver(db: AsyncSession, driver_id: int) -> User:
    result = await db.execute(
        select(User)
        .where(User.id == driver_id, User.role == UserRole.DRIVER)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    driver = result.scalar_one_or_none()
    if driver is None:
        raise NotFound("Driver", driver_id)
    return driver


def clean_note(note: str | None) -> str | None:
    """Note nettoyée, tronquée à 500, vide -> None / Trimmed, capped at 500 chars, empty -> None."""
    if note is None:
        return None
    note = note.strip()[:NOTE_MAX_LENGTH].strip()
    return note or None


def score(driver: User) -> int:
    return (driver.rating_up or 0) - (driver.rating_down or 0)


async def review(
    db: AsyncSession,
    actor: User,
    driver_id: int,
    direction: ReviewDirection | str,
    note: str | None = None,
) -> DriverReview:
    """Ajouter un avis et incrémenter le compteur / Append a review and bump its counter."""
    if not actor.is_staff:
        raise AuthorizationDenied()
    try:
        direction = ReviewDirection(direction)
    except ValueError:
        raise ValidationError('Direction must be "up" or "down"', {"direction": direction})

    driver = await _lock_driver(db, driver_id)
    entry = DriverReview(
        driver_id=driver.id,
        direction=direction,
        note=clean_note(note),
        author_id=actor.id,
        created_at=now_iso(),
    )
    db.add(entry)
    if direction == ReviewDirection.UP:
        driver.rating_up = (driver.rating_up or 0) + 1
    else:
        driver.rating_down = (driver.rating_down or 0) + 1
    await db.flush()
    return entry


async def reset_ratings(db: AsyncSession, actor: User, driver_id: int) -> User:
    """Effacer le journal et remettre les compteurs à zéro / Clear the ledger and zero both counters."""
    if not actor.is_staff:
        raise AuthorizationDenied()

    driver = await _lock_driver(db, driver_id)
    result = await db.execute(delete(DriverReview).where(DriverReview.driver_id == driver.id))
    driver.rating_up = 0
    driver.rating_down = 0
    await log_audit(db, "user", driver.id, "RATING_RESET", actor, {"reviews_deleted": result.rowcount})
    await db.flush()
    return driver


async def list_reviews(db: AsyncSession, driver_id: int) -> list[DriverReview]:
    result = await db.execute(
        select(DriverReview)
        .where(DriverReview.driver_id == driver_id)
        .order_by(DriverReview.id.desc())
    )
    return list(result.scalars().all())
