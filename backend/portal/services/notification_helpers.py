"""
Fan-out: turn domain events into notification rows.

Each call stores exactly one row (no retries beyond the store's own, no queue). Toasts and sounds are
pulled by the client poller; email is a separate best-effort channel. Callers that must not fail
because of a notification (document request creation) catch and log the exception themselves.
"""
import logging
from typing import Any, Mapping

from sqlalchemy.orm import Session

from portal.config import settings
from portal.core.constants import (
    RELATED_DOCUMENT_REQUEST,
    RELATED_DOCUMENT_REQUESTS,
    TYPE_DOCUMENT_REQUEST,
    TYPE_DOCUMENT_REQUEST_UPDATE,
    UPDATE_RESPONSE_ADDED,
    UPDATE_STATUS_UPDATED,
)
from portal.models.user import User
from portal.schemas.notification import AdminNotificationOut, NotificationOut
from portal.services import notifications
from portal.services.email_notify import send_new_request_email
from portal.services.user_settings import get_notification_settings

logger = logging.getLogger(__name__)


def _field(request: Any, name: str, default: Any = None) -> Any:
    """Document requests arrive as ORM rows or plain dicts."""
    if isinstance(request, Mapping):
        return request.get(name, default)
    return getattr(request, name, default)


def notify_admins_new_document_request(db: Session, request: Any) -> AdminNotificationOut:
    """
    One broadcast notification for a new document request. data carries document_type, user_id and
    user_name so the toast action and dropdown click can open the client's profile directly.
    """
    user_name = _field(request, "user_name")
    try:
        return notifications.create_admin_notification(
            db,
            TYPE_DOCUMENT_REQUEST,
            "New document request",
            f"{user_name or 'User'} requested: {_field(request, 'title')}",
            related_id=_field(request, "id"),
            related_type=RELATED_DOCUMENT_REQUESTS,
            data={
                "document_type": _field(request, "document_type"),
                "user_id": _field(request, "user_id"),
                "user_name": user_name,
            },
        )
    except Exception as e:
        logger.error("Failed to notify admins about document request %s: %s", _field(request, "id"), e)
        raise


def _update_template(request: Any, update_type: str) -> tuple[str, str]:
    title = _field(request, "title")
    if update_type == UPDATE_STATUS_UPDATED:
        return "Request updated", f'Your request "{title}" was updated to: {_field(request, "status")}'
    if update_type == UPDATE_RESPONSE_ADDED:
        return "New response", f'You received a response to your request "{title}"'
    return "Request updated", f'Your request "{title}" was updated'


def notify_user_document_request_update(
    db: Session, user_id: int, request: Any, update_type: str
) -> NotificationOut:
    title, message = _update_template(request, update_type)
    try:
        return notifications.create_user_notification(
            db,
            user_id,
            TYPE_DOCUMENT_REQUEST_UPDATE,
            title,
            message,
            related_id=_field(request, "id"),
            related_type=RELATED_DOCUMENT_REQUEST,
        )
    except Exception as e:
        logger.error("Failed to notify user %s about request %s: %s", user_id, _field(request, "id"), e)
        raise


def email_admins_new_document_request(db: Session, request: Any) -> int:
    """
    Out-of-band email to every admin whose settings allow email for document requests.
    Best-effort: returns the number of emails sent and never raises.
    """
    if not settings.notify_admins_by_email:
        return 0
    sent = 0
    try:
        admin_ids = notifications.get_all_admin_ids(db)
    except Exception as e:
        logger.warning("Could not list admins for request email: %s", e)
        return 0
    for admin_id in admin_ids:
        try:
            prefs = get_notification_settings(db, admin_id)
            if not (prefs.email_notifications and prefs.notification_types.document_requests):
                continue
            admin = db.get(User, admin_id)
            if admin is None or not admin.email:
                continue
            if send_new_request_email(
                admin.email,
                user_name=_field(request, "user_name"),
                title=_field(request, "title"),
                user_id=_field(request, "user_id"),
            ):
                sent += 1
        except Exception as e:
            logger.warning("Request email to admin %s failed: %s", admin_id, e)
    logger.info("Emailed %s admin(s) about document request %s", sent, _field(request, "id"))
    return sent
