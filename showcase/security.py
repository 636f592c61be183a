"""Admin session tokens (HS256 JWT via python-jose)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt

from showcase.config import settings
from showcase.utils.time import utc_now

SESSION_COOKIE = "session_token"


@dataclass(frozen=True)
class Principal:
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class InvalidToken(Exception):
    pass


def create_access_token(email: str, role: str = "admin", expires_minutes: Optional[int] = None) -> str:
    minutes = expires_minutes if expires_minutes is not None else settings.jwt_expire_minutes
    payload = {
        "sub": email,
        "email": email,
        "role": role,
        "exp": utc_now() + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    email = payload.get("email") or payload.get("sub")
    role = payload.get("role")
    if not isinstance(email, str) or not email or not isinstance(role, str):
        raise InvalidToken("token is missing identity claims")
    return Principal(email=email.lower(), role=role)


def principal_from_token(token: Optional[str]) -> Optional[Principal]:
    """Lenient variant for middleware: any bad token reads as anonymous."""
    if not token:
        return None
    try:
        return decode_access_token(token)
    except InvalidToken:
        return None
