"""
Dépendances d'authentification et d'autorisation / Authentication and authorization dependencies.
Injectées dans les routes via Depends().
"""

import hmac

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.config import settings
from fleetdesk.database import get_db
from fleetdesk.exceptions import AuthenticationRequired, AuthorizationDenied
from fleetdesk.models.user import STAFF_ROLES, User, UserRole
from fleetdesk.utils.auth import TOKEN_ACCESS, decode_token

security = HTTPBearer(auto_error=False)


async def _user_from_credentials(
    credentials: HTTPAuthorizationCredentials | None, db: AsyncSession
) -> User:
    if credentials is None:
        raise AuthenticationRequired()
    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != TOKEN_ACCESS:
        raise AuthenticationRequired("Invalid or expired token")

    result = await db.execute(select(User).where(User.id == int(payload["sub"])))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise AuthenticationRequired("User not found or inactive")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Extraire et valider l'utilisateur depuis le JWT / Extract and validate user from JWT."""
    return await _user_from_credentials(credentials, db)


def require_role(*roles: UserRole):
    """Factory de dépendance qui vérifie le rôle / Dependency factory that checks the role."""

    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise AuthorizationDenied()
        return user

    return _check


require_staff = require_role(*STAFF_ROLES)
require_driver = require_role(UserRole.DRIVER)


async def require_sweep_trigger(
    x_cron_secret: str | None = Header(None, alias="X-Cron-Secret"),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User | str:
    """Secret cron ou token staff / Cron secret or staff token.

    Retourne le nom de l'acteur pour l'historique / Returns the acting principal for the audit log.
    """
    if x_cron_secret is not None and settings.CRON_SECRET:
        if hmac.compare_digest(x_cron_secret, settings.CRON_SECRET):
            return "cron"
        raise AuthenticationRequired("Invalid cron secret")

    user = await _user_from_credentials(credentials, db)
    if not user.is_staff:
        raise AuthorizationDenied()
    return user
