"""Routes Utilisateurs / User API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.database import get_db
from fleetdesk.models.user import User
from fleetdesk.schemas.user import UserBrief

router = APIRouter()


@router.get("/", response_model=list[UserBrief])
async def list_users(db: AsyncSession = Depends(get_db)):
    """Liste publique pour l'écran de connexion / Public list for the login screen."""
    result = await db.execute(select(User).where(User.is_active.is_(True)).order_by(User.role, User.name))
    return result.scalars().all()
