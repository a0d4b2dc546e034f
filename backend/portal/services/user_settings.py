"""Per-user notification settings stored as JSON in user_settings; missing keys fall back to defaults."""
import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from portal.db.session import retry_transient
from portal.models.user_setting import UserSetting
from portal.schemas.settings import SETTINGS_KEY_NOTIFICATIONS, NotificationSettings

logger = logging.getLogger(__name__)


def _merge(defaults: dict[str, Any], stored: dict[str, Any]) -> dict[str, Any]:
    merged = dict(defaults)
    for key, value in stored.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        elif key in merged:
            merged[key] = value
    return merged


@retry_transient
def get_notification_settings(db: Session, user_id: int) -> NotificationSettings:
    row = db.scalar(
        select(UserSetting).where(UserSetting.user_id == user_id, UserSetting.setting_key == SETTINGS_KEY_NOTIFICATIONS)
    )
    if row is None or not isinstance(row.setting_value, dict):
        return NotificationSettings()
    merged = _merge(NotificationSettings().model_dump(), row.setting_value)
    try:
        return NotificationSettings.model_validate(merged)
    except ValidationError as e:
        logger.warning("Stored notification settings for user %s are invalid (%s); using defaults", user_id, e.error_count())
        return NotificationSettings()


@retry_transient
def save_notification_settings(db: Session, user_id: int, prefs: NotificationSettings) -> NotificationSettings:
    value = prefs.model_dump()
    row = db.scalar(
        select(UserSetting).where(UserSetting.user_id == user_id, UserSetting.setting_key == SETTINGS_KEY_NOTIFICATIONS)
    )
    if row:
        row.setting_value = value
    else:
        db.add(UserSetting(user_id=user_id, setting_key=SETTINGS_KEY_NOTIFICATIONS, setting_value=value))
    db.commit()
    logger.info("Saved notification settings for user %s", user_id)
    return prefs
