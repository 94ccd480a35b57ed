"""
Seed du premier dispatcher / First dispatcher seeding.
Crée le compte dispatcher par défaut au premier démarrage si aucun utilisateur n'existe.
Creates the default dispatcher account on first startup if no users exist.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.config import settings
from fleetdesk.models.user import User, UserRole
from fleetdesk.utils.auth import hash_password

logger = logging.getLogger(__name__)


async def seed_dispatcher(session: AsyncSession) -> User | None:
    """Créer le dispatcher si la table est vide / Create the dispatcher if the user table is empty."""
    result = await session.execute(select(func.count(User.id)))
    count = result.scalar()

    if count:
        logger.info("%s existing user(s), seed skipped", count)
        return None

    dispatcher = User(
        name="Dispatcher",
        email=settings.SEED_DISPATCHER_EMAIL.lower(),
        hashed_password=hash_password(settings.SEED_DISPATCHER_PASSWORD),
        role=UserRole.DISPATCHER,
        is_active=True,
    )
    session.add(dispatcher)
    await session.commit()
    logger.info("Dispatcher created: %s", settings.SEED_DISPATCHER_EMAIL)
    return dispatcher
