"""Admin authentication — credential login issuing JWT session tokens.

A single bootstrap admin is configured through ADMIN_EMAIL/ADMIN_PASSWORD.
Tokens are accepted as a Bearer header (API clients) or the session cookie
(browser pages, which the maintenance gate also reads).
"""

from __future__ import annotations

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from showcase.config import settings
from showcase.security import (
    SESSION_COOKIE,
    InvalidToken,
    Principal,
    create_access_token,
    decode_access_token,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger("showcase.auth")

security = HTTPBearer(auto_error=False)


class LoginRequest(BaseModel):
    email: str
    password: str


def _credentials_match(email: str, password: str) -> bool:
    if not settings.admin_email or not settings.admin_password:
        return False
    email_ok = hmac.compare_digest(email.strip().lower().encode(), settings.admin_email.strip().lower().encode())
    password_ok = hmac.compare_digest(password.encode(), settings.admin_password.encode())
    return email_ok and password_ok


# ── Dependency: get current principal ─────────────────────────

async def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Principal]:
    """Resolve the caller from a Bearer token or session cookie.

    Returns None if no token is provided (allows optional auth).
    """
    token = credentials.credentials if credentials is not None else request.cookies.get(SESSION_COOKIE)
    if not token:
        return None
    try:
        return decode_access_token(token)
    except InvalidToken:
        raise HTTPException(status_code=401, detail="Invalid or expired token")


async def require_auth(
    principal: Optional[Principal] = Depends(get_current_principal),
) -> Principal:
    """Strict auth dependency — rejects unauthenticated requests."""
    if principal is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return principal


async def require_admin(principal: Principal = Depends(require_auth)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=403, detail="Admin role required")
    return principal


# ── Endpoints ─────────────────────────────────────────────────

@router.post("/login")
async def login(body: LoginRequest, response: Response):
    if not _credentials_match(body.email, body.password):
        logger.warning("Failed admin login for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(body.email.strip().lower(), role="admin")
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.jwt_expire_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )
    logger.info("Admin %s signed in", body.email)
    return {"access_token": token, "token_type": "bearer"}


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return {"success": True}


@router.get("/me")
async def get_me(principal: Principal = Depends(require_auth)):
    return {"email": principal.email, "role": principal.role}
