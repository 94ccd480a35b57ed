"""
Routes d'authentification / Authentication routes.
Login, refresh token, profil utilisateur.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.api.deps import get_current_user
from fleetdesk.config import settings
from fleetdesk.database import get_db
from fleetdesk.exceptions import AuthenticationRequired
from fleetdesk.models.user import User, UserRole
from fleetdesk.rate_limit import client_ip, limiter
from fleetdesk.schemas.auth import LoginRequest, RefreshRequest, TokenResponse
from fleetdesk.schemas.user import UserRead
from fleetdesk.services.audit import log_audit
from fleetdesk.utils.auth import (
    TOKEN_REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_password,
)

router = APIRouter()


async def _find_login(db: AsyncSession, login: str) -> User | None:
    """E-mail pour les dispatchers, nom pour les chauffeurs / E-mail for dispatchers, name for drivers."""
    login = login.strip()
    if "@" in login:
        query = select(User).where(User.email == login.lower())
    else:
        query = select(User).where(User.name == login, User.role == UserRole.DRIVER).order_by(User.id)
    result = await db.execute(query)
    return result.scalars().first()


def _tokens(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.id, user.role.value),
        refresh_token=create_refresh_token(user.id, user.role.value),
    )


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def login(request: Request, data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Connexion par identifiants / Login with credentials."""
    user = await _find_login(db, data.login)
    ip = client_ip(request)

    if user is None or not verify_password(data.password, user.hashed_password):
        # Journal de tentative échouée, validé avant l'erreur / Failed attempt, committed before raising
        await log_audit(db, "auth", None, "LOGIN_FAILED", data.login, {"ip": ip})
        await db.commit()
        raise AuthenticationRequired("Invalid credentials")

    if not user.is_active:
        await log_audit(db, "auth", user.id, "LOGIN_DISABLED", user, {"ip": ip})
        await db.commit()
        raise AuthenticationRequired("Account disabled")

    await log_audit(db, "auth", user.id, "LOGIN", user, {"ip": ip})
    return _tokens(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(data: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Rafraîchir les tokens / Refresh tokens."""
    payload = decode_token(data.refresh_token)
    if payload is None or payload.get("type") != TOKEN_REFRESH:
        raise AuthenticationRequired("Invalid refresh token")

    user = await db.get(User, int(payload["sub"]))
    if user is None or not user.is_active:
        raise AuthenticationRequired("User not found or inactive")
    return _tokens(user)


@router.get("/me", response_model=UserRead)
async def me(user: User = Depends(get_current_user)):
    """Profil de l'utilisateur connecté / Current user profile."""
    return user
