"""Endpoints for viewing and updating site-wide settings."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from therapy_portal.database import get_session
from therapy_portal.models import User
from therapy_portal.auth import require_role
from therapy_portal.schemas import SettingsRead, SettingsUpdate
from therapy_portal.crud import get_settings, save_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/", response_model=SettingsRead)
async def read_settings(db: AsyncSession = Depends(get_session)):
    """Retrieve the current configuration values."""
    return await get_settings(db)


@router.put("/", response_model=SettingsRead)
async def update_settings(
    data: SettingsUpdate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("admin")),
):
    """Update settings; only admins may change configuration."""
    settings = await get_settings(db)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(settings, field, value)
    updated = await save_settings(db, settings)
    logger.info("Settings updated by user %s", current_user.id)
    return updated
