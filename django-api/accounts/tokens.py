"""Session and guest token issuing (JWT)."""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from django.conf import settings

SESSION = "session"
GUEST = "guest"


def _encode(claims: dict[str, Any], hours: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + timedelta(hours=hours)}
    return jwt.encode(payload, settings.PHARMIA_JWT_SECRET, algorithm=settings.PHARMIA_JWT_ALGORITHM)


def issue_session_token(user_id: str, role: str) -> str:
    """Sign a full session token."""
    return _encode({"sub": user_id, "role": role, "kind": SESSION}, settings.PHARMIA_SESSION_TOKEN_HOURS)


def issue_guest_token(user_id: str, webinar_id: str) -> str:
    """Sign a short-lived token for a guest whose payment is still pending.

    It carries no role and only lets its holder submit a payment proof for
    the named webinar.
    """
    return _encode({"sub": user_id, "kind": GUEST, "webinar_id": webinar_id}, settings.PHARMIA_GUEST_TOKEN_HOURS)


def decode_token(token: str) -> dict[str, Any] | None:
    """Return the token claims, or None if the token is invalid or expired."""
    try:
        return jwt.decode(
            token,
            settings.PHARMIA_JWT_SECRET,
            algorithms=[settings.PHARMIA_JWT_ALGORITHM],
        )
    except jwt.PyJWTError:
        return None
