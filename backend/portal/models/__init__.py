from portal.models.admin_notification import AdminNotification, AdminNotificationRead
from portal.models.auth_session import AuthSession
from portal.models.document_request import DocumentRequest
from portal.models.notification import Notification
from portal.models.user import User
from portal.models.user_setting import UserSetting

__all__ = [
    "AdminNotification",
    "AdminNotificationRead",
    "AuthSession",
    "DocumentRequest",
    "Notification",
    "User",
    "UserSetting",
]
