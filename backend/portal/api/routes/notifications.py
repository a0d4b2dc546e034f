"""
Admin notifications API: paginated list, legacy list, mark one read, mark all read.
Plus the per-user inbox (a client's own notifications).

The caller is identified by the session cookie. Store failures become a generic 500; the list
endpoints send no-cache headers so no proxy ever serves a stale unread count.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from portal.api.deps import current_session
from portal.core.constants import DEFAULT_LIST_LIMIT, DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from portal.core.errors import (
    MSG_NOTIFICATION_ID_INVALID,
    MSG_NOTIFICATION_ID_REQUIRED,
    NO_CACHE_HEADERS,
    STATUS_BAD_REQUEST,
    ApiError,
    internal_error,
)
from portal.db.session import get_db
from portal.schemas.notification import PaginatedNotificationsOut, PaginationOut
from portal.services import notifications
from portal.services.auth import SessionInfo

router = APIRouter()
logger = logging.getLogger(__name__)


def _positive_int(raw: str | None, default: int) -> int:
    """Query params that are missing, non-numeric or < 1 fall back to the default."""
    try:
        value = int(raw) if raw is not None else default
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def _notification_id(raw: str) -> int:
    if not raw or not raw.strip():
        raise ApiError(STATUS_BAD_REQUEST, MSG_NOTIFICATION_ID_REQUIRED)
    try:
        return int(raw)
    except ValueError:
        raise ApiError(STATUS_BAD_REQUEST, MSG_NOTIFICATION_ID_INVALID)


# --- Paginated list ---


@router.get("/notifications/paginated")
def list_notifications_paginated(
    response: Response,
    page: str | None = Query(None),
    limit: str | None = Query(None),
    db: Session = Depends(get_db),
    auth: SessionInfo = Depends(current_session),
) -> dict[str, Any]:
    """
    One page of admin notifications, newest first, with this admin's read flags.
    unreadCount is counted separately over all notifications, not just this page.
    """
    response.headers.update(NO_CACHE_HEADERS)
    page_n = _positive_int(page, DEFAULT_PAGE)
    limit_n = min(_positive_int(limit, DEFAULT_PAGE_LIMIT), MAX_PAGE_LIMIT)
    offset = (page_n - 1) * limit_n
    try:
        result = notifications.get_admin_notifications_paginated(db, auth.user_id, limit_n, offset)
        unread_count = notifications.get_unread_admin_notification_count(db, auth.user_id)
    except Exception:
        logger.exception("Failed to load paginated notifications for admin %s", auth.user_id)
        raise internal_error()
    data = PaginatedNotificationsOut(
        notifications=result.notifications,
        unread_count=unread_count,
        pagination=PaginationOut.build(page_n, limit_n, result.total),
    )
    return {"success": True, "data": data.to_wire()}


# --- Legacy list ---


@router.get("/notifications")
def list_notifications(
    response: Response,
    db: Session = Depends(get_db),
    auth: SessionInfo = Depends(current_session),
) -> dict[str, Any]:
    """Latest notifications (no pagination). unreadCount covers only the returned items."""
    response.headers.update(NO_CACHE_HEADERS)
    try:
        rows = notifications.get_admin_notifications(db, auth.user_id, DEFAULT_LIST_LIMIT)
    except Exception:
        logger.exception("Failed to load notifications for admin %s", auth.user_id)
        raise internal_error()
    return {
        "success": True,
        "data": {
            "notifications": [n.model_dump(mode="json") for n in rows],
            "unreadCount": sum(1 for n in rows if not n.is_read),
            "userId": auth.user_id,
        },
    }


# --- Mark one read ---


@router.post("/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    auth: SessionInfo = Depends(current_session),
) -> dict[str, Any]:
    """Idempotent: marking an already-read notification succeeds without a second receipt."""
    nid = _notification_id(notification_id)
    try:
        notifications.mark_admin_notification_as_read(db, nid, auth.user_id)
    except Exception:
        logger.exception("Failed to mark notification %s read for admin %s", nid, auth.user_id)
        raise internal_error()
    return {"success": True, "message": "Notification marked as read"}


# --- Mark all read ---


@router.post("/notifications/mark-all-read")
def mark_all_read(
    db: Session = Depends(get_db),
    auth: SessionInfo = Depends(current_session),
) -> dict[str, Any]:
    try:
        notifications.mark_all_admin_notifications_as_read(db, auth.user_id)
    except Exception:
        logger.exception("Failed to mark all notifications read for admin %s", auth.user_id)
        raise internal_error()
    return {"success": True, "message": "All notifications marked as read"}


# --- Per-user inbox ---


@router.get("/notifications/user")
def list_user_notifications(
    response: Response,
    limit: str | None = Query(None),
    db: Session = Depends(get_db),
    auth: SessionInfo = Depends(current_session),
) -> dict[str, Any]:
    response.headers.update(NO_CACHE_HEADERS)
    limit_n = min(_positive_int(limit, DEFAULT_LIST_LIMIT), MAX_PAGE_LIMIT)
    try:
        rows = notifications.get_user_notifications(db, auth.user_id, limit_n)
        unread_count = notifications.get_unread_user_notification_count(db, auth.user_id)
    except Exception:
        logger.exception("Failed to load notifications for user %s", auth.user_id)
        raise internal_error()
    return {
        "success": True,
        "data": {"notifications": [n.model_dump(mode="json") for n in rows], "unreadCount": unread_count},
    }


@router.post("/notifications/user/{notification_id}/read")
def mark_user_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    auth: SessionInfo = Depends(current_session),
) -> dict[str, Any]:
    nid = _notification_id(notification_id)
    try:
        notifications.mark_user_notification_as_read(db, nid, auth.user_id)
    except Exception:
        logger.exception("Failed to mark user notification %s read for user %s", nid, auth.user_id)
        raise internal_error()
    return {"success": True, "message": "Notification marked as read"}
