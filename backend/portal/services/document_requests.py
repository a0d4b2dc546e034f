"""
Document requests: the event source for admin notifications.

Creating a request fans out one admin notification (best-effort: a notification failure is logged and
the request is still returned). Updating a request's status notifies its owner, again best-effort.
Reads go through TTL caches (30s detail, 60s list) that every write invalidates.
"""
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from portal.core.constants import (
    REQUEST_DETAIL_CACHE_TTL_SECONDS,
    REQUEST_LIST_CACHE_TTL_SECONDS,
    REQUEST_STATUSES,
    UPDATE_RESPONSE_ADDED,
    UPDATE_STATUS_UPDATED,
)
from portal.core.errors import CreationFailed
from portal.core.ttl_cache import TTLCache
from portal.db.session import retry_transient
from portal.models.document_request import DocumentRequest
from portal.models.user import User
from portal.services.email_notify import send_request_update_email
from portal.services.notification_helpers import (
    email_admins_new_document_request,
    notify_admins_new_document_request,
    notify_user_document_request_update,
)

logger = logging.getLogger(__name__)

detail_cache: TTLCache[int, dict[str, Any] | None] = TTLCache(REQUEST_DETAIL_CACHE_TTL_SECONDS)
list_cache: TTLCache[tuple, dict[str, Any]] = TTLCache(REQUEST_LIST_CACHE_TTL_SECONDS)


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _request_dict(row: DocumentRequest, user: User | None) -> dict[str, Any]:
    return {
        "id": row.id,
        "user_id": row.user_id,
        "title": row.title,
        "message": row.message,
        "document_type": row.document_type,
        "status": row.status,
        "admin_message": row.admin_message,
        "responded_by": row.responded_by,
        "responded_by_name": row.responded_by_name,
        "responded_at": _iso(row.responded_at),
        "created_at": _iso(row.created_at),
        "updated_at": _iso(row.updated_at),
        "first_name": user.first_name if user else None,
        "last_name": user.last_name if user else None,
        "email": user.email if user else None,
    }


def invalidate_request_cache(request_id: int | None = None) -> None:
    """Drop the detail entry (when given) and every list page."""
    if request_id is not None:
        detail_cache.invalidate(request_id)
    list_cache.clear()


# ---------------------------------------------------------------------------
# Store access
# ---------------------------------------------------------------------------


@retry_transient
def _insert_request(
    db: Session, user_id: int, title: str, message: str | None, document_type: str | None
) -> tuple[DocumentRequest, User]:
    user = db.get(User, user_id)
    if user is None:
        raise LookupError(f"User {user_id} does not exist")
    row = DocumentRequest(
        user_id=user_id, title=title, message=message or None, document_type=document_type or None, status="pending"
    )
    db.add(row)
    db.commit()
    if not row.id:
        raise CreationFailed("Document request insert returned no id")
    db.refresh(row)
    return row, user


@retry_transient
def _apply_status(
    db: Session,
    request_id: int,
    status: str,
    admin_message: str | None,
    responded_by: int | None,
    responded_by_name: str | None,
) -> tuple[DocumentRequest, User | None]:
    row = db.get(DocumentRequest, request_id)
    if row is None:
        raise LookupError(f"Document request {request_id} not found")
    row.status = status
    row.admin_message = admin_message or None
    row.responded_by = responded_by
    row.responded_by_name = responded_by_name or None
    row.responded_at = func.now()
    db.commit()
    db.refresh(row)
    return row, db.get(User, row.user_id)


@retry_transient
def _load_detail(db: Session, request_id: int) -> dict[str, Any] | None:
    row = db.execute(
        select(DocumentRequest, User).join(User, User.id == DocumentRequest.user_id).where(DocumentRequest.id == request_id)
    ).first()
    return _request_dict(*row) if row else None


@retry_transient
def _load_page(
    db: Session, page: int, limit: int, status: str | None, user_id: int | None, newest_first: bool
) -> dict[str, Any]:
    q = select(DocumentRequest, User).join(User, User.id == DocumentRequest.user_id)
    count_q = select(func.count(DocumentRequest.id))
    if status and status != "all":
        q = q.where(DocumentRequest.status == status)
        count_q = count_q.where(DocumentRequest.status == status)
    if user_id is not None:
        q = q.where(DocumentRequest.user_id == user_id)
        count_q = count_q.where(DocumentRequest.user_id == user_id)
    order = DocumentRequest.created_at.desc() if newest_first else DocumentRequest.created_at.asc()
    tiebreak = DocumentRequest.id.desc() if newest_first else DocumentRequest.id.asc()
    rows = db.execute(q.order_by(order, tiebreak).limit(limit).offset((page - 1) * limit)).all()
    total = db.scalar(count_q) or 0
    return {"requests": [_request_dict(r, u) for r, u in rows], "totalRequests": int(total)}


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def create_document_request(
    db: Session, user_id: int, title: str, message: str | None = None, document_type: str | None = None
) -> dict[str, Any]:
    row, user = _insert_request(db, user_id, title, message, document_type)
    invalidate_request_cache(row.id)
    event = {
        "id": row.id,
        "title": title,
        "document_type": document_type,
        "user_id": user_id,
        "user_name": user.display_name,
        "user_email": user.email,
        "message": message,
    }
    try:
        notify_admins_new_document_request(db, event)
    except Exception as e:
        # The request itself is saved; a missing notification must not fail it
        logger.error("Admin notification for document request %s failed: %s", row.id, e)
    email_admins_new_document_request(db, event)
    return _request_dict(row, user)


def update_request_status(
    db: Session,
    request_id: int,
    status: str,
    admin_message: str | None = None,
    responded_by: int | None = None,
    responded_by_name: str | None = None,
) -> dict[str, Any]:
    if status not in REQUEST_STATUSES:
        raise ValueError(f"Invalid status {status!r}")
    row, owner = _apply_status(db, request_id, status, admin_message, responded_by, responded_by_name)
    invalidate_request_cache(request_id)
    result = _request_dict(row, owner)
    update_type = UPDATE_RESPONSE_ADDED if admin_message else UPDATE_STATUS_UPDATED
    try:
        notify_user_document_request_update(db, row.user_id, result, update_type)
    except Exception as e:
        logger.error("User notification for document request %s failed: %s", request_id, e)
    if owner is not None and owner.email:
        send_request_update_email(owner.email, title=row.title, status=status, admin_message=admin_message)
    return result


def get_request_details(db: Session, request_id: int, *, use_cache: bool = True) -> dict[str, Any] | None:
    if not use_cache:
        return _load_detail(db, request_id)
    return detail_cache.get_or_load(request_id, lambda: _load_detail(db, request_id))


def list_document_requests(
    db: Session,
    page: int = 1,
    limit: int = 10,
    *,
    status: str | None = None,
    user_id: int | None = None,
    newest_first: bool = True,
    use_cache: bool = True,
) -> dict[str, Any]:
    key = (page, limit, status, user_id, newest_first)

    def load() -> dict[str, Any]:
        return _load_page(db, page, limit, status, user_id, newest_first)

    if not use_cache:
        return load()
    return list_cache.get_or_load(key, load)
