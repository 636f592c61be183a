"""Admin settings persistence (maintenance switch)."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.config import settings
from showcase.database import async_session
from showcase.maintenance import MaintenanceStatus
from showcase.models.admin_setting import (
    DEFAULT_MAINTENANCE_MESSAGE,
    MAINTENANCE_EMAILS_KEY,
    MAINTENANCE_MESSAGE_KEY,
    MAINTENANCE_MODE_KEY,
    AdminSetting,
)

logger = logging.getLogger("showcase.site_settings")

_DESCRIPTIONS = {
    MAINTENANCE_MODE_KEY: "Controls whether the website is in maintenance mode",
    MAINTENANCE_MESSAGE_KEY: "Message shown on the maintenance page",
    MAINTENANCE_EMAILS_KEY: "Comma-separated list of emails allowed during maintenance",
}


async def _get_values(session: AsyncSession, *keys: str) -> dict[str, str]:
    result = await session.execute(select(AdminSetting).where(AdminSetting.key.in_(keys)))
    return {row.key: row.value for row in result.scalars()}


async def read_maintenance_status(session: AsyncSession) -> MaintenanceStatus:
    values = await _get_values(
        session, MAINTENANCE_MODE_KEY, MAINTENANCE_MESSAGE_KEY, MAINTENANCE_EMAILS_KEY
    )
    return MaintenanceStatus(
        enabled=values.get(MAINTENANCE_MODE_KEY) == "true",
        message=values.get(MAINTENANCE_MESSAGE_KEY) or DEFAULT_MAINTENANCE_MESSAGE,
        allowed_emails=values.get(MAINTENANCE_EMAILS_KEY) or settings.admin_email,
    )


async def _upsert(session: AsyncSession, key: str, value: str) -> None:
    row = await session.get(AdminSetting, key)
    if row is None:
        session.add(AdminSetting(key=key, value=value, description=_DESCRIPTIONS.get(key)))
    else:
        row.value = value


async def write_maintenance_status(
    session: AsyncSession,
    enabled: bool,
    allowed_emails: Optional[str] = None,
    message: Optional[str] = None,
) -> None:
    await _upsert(session, MAINTENANCE_MODE_KEY, "true" if enabled else "false")
    if allowed_emails is not None:
        await _upsert(session, MAINTENANCE_EMAILS_KEY, allowed_emails)
    if message is not None:
        await _upsert(session, MAINTENANCE_MESSAGE_KEY, message)
    await session.commit()
    logger.info("Maintenance mode %s", "enabled" if enabled else "disabled")


async def load_maintenance_status() -> MaintenanceStatus:
    """Gate loader: opens its own session outside any request scope."""
    async with async_session() as session:
        return await read_maintenance_status(session)
