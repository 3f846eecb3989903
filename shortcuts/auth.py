"""Bearer-token verification for protected endpoints."""

from __future__ import annotations

from fastapi import Request

from .errors import AuthenticationError
from .store import AuthUser, SupabaseStore


def extract_bearer_token(header: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header."""

    if not header:
        return None
    scheme, _, rest = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = rest.strip()
    return token or None


def authenticate(request: Request, store: SupabaseStore) -> AuthUser:
    """Resolve the calling user or raise :class:`AuthenticationError`."""

    header = request.headers.get("authorization")
    if not header:
        raise AuthenticationError("Missing authorization")
    token = extract_bearer_token(header)
    if not token:
        raise AuthenticationError("Unauthorized")
    user = store.get_user(token)
    if user is None:
        raise AuthenticationError("Unauthorized")
    request.state.user = user
    return user


__all__ = ["authenticate", "extract_bearer_token"]
