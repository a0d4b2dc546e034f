"""Request dependencies shared by the routers: cookie session and API token checks."""
import logging
import secrets

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from portal.config import settings
from portal.core.errors import (
    MSG_INVALID_TOKEN,
    MSG_NOT_AUTHENTICATED,
    STATUS_FORBIDDEN,
    STATUS_UNAUTHORIZED,
    ApiError,
    internal_error,
)
from portal.db.session import get_db
from portal.services.auth import SessionInfo, validate_session

logger = logging.getLogger(__name__)


def current_session(request: Request, db: Session = Depends(get_db)) -> SessionInfo:
    """Validate the session cookie; 401 when missing, unknown or expired."""
    session_id = request.cookies.get(settings.session_cookie_name)
    try:
        info = validate_session(db, session_id)
    except Exception:
        logger.exception("Session validation failed")
        raise internal_error()
    if info is None:
        raise ApiError(STATUS_UNAUTHORIZED, MSG_NOT_AUTHENTICATED)
    return info


def require_api_token(authorization: str | None = Header(None)) -> None:
    """Bearer token for the document-request API (called by the portal frontend server)."""
    token = (authorization or "").partition("Bearer ")[2].strip()
    if not settings.api_token or not token or not secrets.compare_digest(token, settings.api_token):
        raise ApiError(STATUS_FORBIDDEN, MSG_INVALID_TOKEN)
