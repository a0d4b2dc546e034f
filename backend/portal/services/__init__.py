from portal.services.document_requests import create_document_request, update_request_status
from portal.services.notification_helpers import notify_admins_new_document_request, notify_user_document_request_update

__all__ = [
    "create_document_request",
    "update_request_status",
    "notify_admins_new_document_request",
    "notify_user_document_request_update",
]
