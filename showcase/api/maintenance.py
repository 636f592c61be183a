"""Maintenance mode API — public status and admin toggle."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.api.auth import require_admin
from showcase.config import settings
from showcase.database import get_session
from showcase.maintenance import MaintenanceStatus
from showcase.models.admin_setting import MaintenanceStatusResponse, MaintenanceToggle
from showcase.security import Principal
from showcase.services.site_settings import read_maintenance_status, write_maintenance_status

logger = logging.getLogger("showcase.maintenance")
router = APIRouter(tags=["maintenance"])


@router.get("/api/maintenance-status", response_model=MaintenanceStatusResponse)
async def maintenance_status(session: AsyncSession = Depends(get_session)):
    try:
        status = await read_maintenance_status(session)
    except SQLAlchemyError:
        logger.exception("Error reading maintenance status")
        # Fail open on storage errors.
        status = MaintenanceStatus(enabled=False, allowed_emails=settings.admin_email)
    return MaintenanceStatusResponse(
        maintenanceMode=status.enabled,
        message=status.message,
        allowedEmails=status.allowed_emails,
    )


@router.post("/api/admin/toggle-maintenance")
async def toggle_maintenance(
    body: MaintenanceToggle,
    request: Request,
    session: AsyncSession = Depends(get_session),
    _admin: Principal = Depends(require_admin),
):
    try:
        await write_maintenance_status(session, body.enabled, body.allowedEmails, body.message)
    except SQLAlchemyError:
        logger.exception("Error updating maintenance mode")
        raise HTTPException(status_code=500, detail="Failed to update maintenance mode settings")

    gate = getattr(request.app.state, "maintenance_gate", None)
    if gate is not None:
        gate.invalidate()

    return {
        "success": True,
        "message": f"Maintenance mode {'enabled' if body.enabled else 'disabled'} successfully!",
    }
