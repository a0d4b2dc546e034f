"""
Document requests API (server-to-server, Bearer token).

Creating a request triggers the admin notification fan-out; updating its status notifies the owner.
Lists and details are served from short TTL caches unless nocache is set.
"""
import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from portal.api.deps import require_api_token
from portal.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from portal.core.errors import MSG_REQUEST_NOT_FOUND, STATUS_BAD_REQUEST, STATUS_NOT_FOUND, ApiError, internal_error
from portal.db.session import get_db
from portal.services import document_requests

router = APIRouter(dependencies=[Depends(require_api_token)])
logger = logging.getLogger(__name__)


class CreateDocumentRequestBody(BaseModel):
    user_id: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=255)
    message: str | None = None
    document_type: str | None = Field(None, max_length=50)


class UpdateDocumentRequestBody(BaseModel):
    status: Literal["pending", "in_progress", "completed", "rejected"]
    admin_message: str | None = None
    responded_by: int | None = None
    responded_by_name: str | None = Field(None, max_length=255)


@router.post("/document-requests", status_code=201)
def create_document_request(body: CreateDocumentRequestBody, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Create a request; admins are notified best-effort (a notification failure does not fail this call)."""
    try:
        created = document_requests.create_document_request(
            db, body.user_id, body.title.strip(), body.message, body.document_type
        )
    except LookupError:
        raise ApiError(STATUS_BAD_REQUEST, "Unknown user")
    except Exception:
        logger.exception("Failed to create document request for user %s", body.user_id)
        raise internal_error()
    return {"success": True, "data": created}


@router.get("/document-requests")
def list_document_requests(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    status: str | None = Query(None),
    user_id: int | None = Query(None, alias="userId"),
    sort_by: Literal["newest", "oldest"] = Query("newest", alias="sortBy"),
    nocache: bool = Query(False),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    try:
        data = document_requests.list_document_requests(
            db,
            page,
            limit,
            status=status,
            user_id=user_id,
            newest_first=sort_by == "newest",
            use_cache=not nocache,
        )
    except Exception:
        logger.exception("Failed to list document requests")
        raise internal_error()
    return {"success": True, "data": data}


@router.get("/document-requests/{request_id}")
def get_document_request(request_id: int, nocache: bool = Query(False), db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        data = document_requests.get_request_details(db, request_id, use_cache=not nocache)
    except Exception:
        logger.exception("Failed to load document request %s", request_id)
        raise internal_error()
    if data is None:
        raise ApiError(STATUS_NOT_FOUND, MSG_REQUEST_NOT_FOUND)
    return {"success": True, "data": {"request": data}}


@router.put("/document-requests/{request_id}")
def update_document_request(
    request_id: int, body: UpdateDocumentRequestBody, db: Session = Depends(get_db)
) -> dict[str, Any]:
    """Change status (and optionally answer); the owner gets a notification and an email."""
    try:
        updated = document_requests.update_request_status(
            db, request_id, body.status, body.admin_message, body.responded_by, body.responded_by_name
        )
    except LookupError:
        raise ApiError(STATUS_NOT_FOUND, MSG_REQUEST_NOT_FOUND)
    except Exception:
        logger.exception("Failed to update document request %s", request_id)
        raise internal_error()
    return {"success": True, "data": updated}
