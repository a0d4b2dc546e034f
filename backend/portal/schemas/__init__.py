from portal.schemas.notification import (
    AdminNotificationOut,
    AdminNotificationPage,
    NotificationOut,
    PaginatedNotificationsOut,
    PaginationOut,
)
from portal.schemas.settings import NotificationSettings, NotificationTypeSettings

__all__ = [
    "AdminNotificationOut",
    "AdminNotificationPage",
    "NotificationOut",
    "PaginatedNotificationsOut",
    "PaginationOut",
    "NotificationSettings",
    "NotificationTypeSettings",
]
