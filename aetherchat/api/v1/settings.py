# ============================================================================
# aetherchat/api/v1/settings.py
# Global venue settings (scheduling defaults, reminders)
# ============================================================================
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aetherchat.api.dependencies import http_error
from aetherchat.config.database import get_db
from aetherchat.schemas.settings import UpdateSettingsRequest
from aetherchat.services.settings.settings_service import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("")
async def get_settings(db: Session = Depends(get_db)):
    return SettingsService.get_settings(db).to_dict()


@router.patch("")
async def update_settings(request: UpdateSettingsRequest, db: Session = Depends(get_db)):
    try:
        settings = SettingsService.update_settings(db, request.model_dump(exclude_unset=True))
    except ValueError as e:
        raise http_error(e)
    return settings.to_dict()
