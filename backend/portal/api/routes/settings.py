"""Notification settings for the logged-in user (sound, polling, email, per-type toggles)."""
import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.api.deps import current_session
from portal.core.errors import internal_error
from portal.db.session import get_db
from portal.schemas.settings import NotificationSettings
from portal.services.auth import SessionInfo
from portal.services.user_settings import get_notification_settings, save_notification_settings

router = APIRouter()
logger = logging.getLogger(__name__)


class SettingsBody(BaseModel):
    notifications: NotificationSettings


@router.get("/settings")
def get_settings(db: Session = Depends(get_db), auth: SessionInfo = Depends(current_session)) -> dict[str, Any]:
    try:
        prefs = get_notification_settings(db, auth.user_id)
    except Exception:
        logger.exception("Failed to load settings for user %s", auth.user_id)
        raise internal_error()
    return {"success": True, "data": {"notifications": prefs.model_dump()}}


@router.put("/settings")
def put_settings(
    body: SettingsBody, db: Session = Depends(get_db), auth: SessionInfo = Depends(current_session)
) -> dict[str, Any]:
    try:
        prefs = save_notification_settings(db, auth.user_id, body.notifications)
    except Exception:
        logger.exception("Failed to save settings for user %s", auth.user_id)
        raise internal_error()
    return {"success": True, "data": {"notifications": prefs.model_dump()}}
