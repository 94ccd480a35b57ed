"""Limitation de débit / Rate limiting.

slowapi, clé = IP du client, y compris derrière un proxy (X-Forwarded-For).
slowapi keyed on the client IP, proxy-aware through X-Forwarded-For.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request


def client_ip(request: Request) -> str:
    """Premier hop de X-Forwarded-For, sinon l'adresse du socket / First X-Forwarded-For hop, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(key_func=client_ip)
