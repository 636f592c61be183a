"""Key/value admin settings (maintenance mode and friends)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from pydantic import BaseModel, Field

from showcase.database import Base

MAINTENANCE_MODE_KEY = "maintenanceMode"
MAINTENANCE_MESSAGE_KEY = "maintenanceMessage"
MAINTENANCE_EMAILS_KEY = "allowedMaintenanceEmails"

DEFAULT_MAINTENANCE_MESSAGE = (
    "The Literary Showcase is currently undergoing maintenance. Please check back soon!"
)


class AdminSetting(Base):
    __tablename__ = "admin_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


# ── Pydantic Schemas ─────────────────────────────────────────

class MaintenanceStatusResponse(BaseModel):
    maintenanceMode: bool
    message: str
    allowedEmails: str


class MaintenanceToggle(BaseModel):
    enabled: bool
    allowedEmails: Optional[str] = Field(default=None, max_length=2000)
    message: Optional[str] = Field(default=None, max_length=2000)
