"""
Utilitaires d'authentification / Authentication utilities.
Hashing bcrypt des mots de passe et tokens JWT porteurs du principal {id, role}.
bcrypt password hashing and JWT tokens carrying the principal {id, role}.
"""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from fleetdesk.config import settings

TOKEN_ACCESS = "access"
TOKEN_REFRESH = "refresh"


def hash_password(password: str) -> str:
    """Hasher un mot de passe / Hash a password."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Vérifier un mot de passe / Verify a password. Un hash vide ne correspond jamais / an empty hash never matches."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Hash corrompu en base / Malformed stored hash
        return False


def _encode(user_id: int, role: str, token_type: str, lifetime: timedelta) -> str:
    payload = {
        "sub": str(user_id),
        "role": role,
        "type": token_type,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: int, role: str) -> str:
    """Créer un access token JWT / Create a JWT access token."""
    return _encode(user_id, role, TOKEN_ACCESS, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(user_id: int, role: str) -> str:
    """Créer un refresh token JWT / Create a JWT refresh token."""
    return _encode(user_id, role, TOKEN_REFRESH, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def decode_token(token: str) -> dict | None:
    """Décoder un token JWT / Decode a JWT token. Returns None if invalid."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
