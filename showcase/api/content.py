"""Public content API with deduplicated view and like counters."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.config import settings
from showcase.database import get_session
from showcase.engagement import CookieSpec, EngagementGuard, client_ip
from showcase.models.content import ContentItem, ContentResponse

logger = logging.getLogger("showcase.content")
router = APIRouter(prefix="/api/content", tags=["content"])


def get_engagement_guard(request: Request) -> EngagementGuard:
    return request.app.state.engagement_guard


def _apply_cookie(response: Response, cookie: CookieSpec) -> None:
    response.set_cookie(
        cookie.name,
        cookie.value,
        max_age=cookie.max_age,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )


async def _get_published(session: AsyncSession, content_id: str) -> ContentItem:
    item = await session.get(ContentItem, content_id)
    if item is None or not item.published:
        raise HTTPException(status_code=404, detail="Content not found")
    return item


@router.get("/{content_id}", response_model=ContentResponse)
async def get_content(content_id: str, session: AsyncSession = Depends(get_session)):
    return await _get_published(session, content_id)


@router.post("/{content_id}/view")
async def count_view(
    content_id: str,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_session),
    guard: EngagementGuard = Depends(get_engagement_guard),
):
    item = await _get_published(session, content_id)
    decision = guard.should_count_view(request.cookies, client_ip(request.headers), content_id)
    if not decision.allow:
        return {"success": True, "counted": False, "views": item.views}

    item.views += 1
    await session.commit()
    if decision.set_cookie is not None:
        _apply_cookie(response, decision.set_cookie)
    return {"success": True, "counted": True, "views": item.views}


@router.post("/{content_id}/like")
async def toggle_like(
    content_id: str,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_session),
    guard: EngagementGuard = Depends(get_engagement_guard),
):
    item = await _get_published(session, content_id)
    decision = guard.should_toggle_like(request.cookies, client_ip(request.headers), content_id)
    if decision.changed:
        item.likes = max(0, item.likes + (1 if decision.like else -1))
        await session.commit()
    if decision.set_cookie is not None:
        _apply_cookie(response, decision.set_cookie)
    if decision.clear_cookie is not None:
        response.delete_cookie(decision.clear_cookie, samesite="lax", secure=settings.secure_cookies)
    return {"success": True, "liked": decision.like, "changed": decision.changed, "likes": item.likes}
