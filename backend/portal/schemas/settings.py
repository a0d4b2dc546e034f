"""Per-user notification settings (user_settings row with setting_key='notifications')."""
from typing import Literal

from pydantic import BaseModel, Field

SETTINGS_KEY_NOTIFICATIONS = "notifications"


class NotificationTypeSettings(BaseModel):
    document_requests: bool = True
    payments: bool = True
    user_registrations: bool = True
    system_updates: bool = True


class NotificationSettings(BaseModel):
    sound_enabled: bool = True
    sound_volume: float = Field(0.6, ge=0.0, le=1.0)
    sound_type: Literal["bell", "classic", "modern", "sweep", "pop"] = "bell"
    # Off disables the dropdown's background polling
    browser_notifications: bool = True
    email_notifications: bool = True
    notification_types: NotificationTypeSettings = Field(default_factory=NotificationTypeSettings)
