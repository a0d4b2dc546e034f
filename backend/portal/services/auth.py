"""
Cookie session validation (collaborator of the notification endpoints).

Sessions slide: once a session is within SESSION_EXTEND_WITHIN_DAYS of expiring it is pushed out to
now + SESSION_TTL_DAYS. Expired sessions are deleted on sight.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from portal.config import settings
from portal.core.constants import ROLE_ADMIN
from portal.db.session import retry_transient
from portal.models.auth_session import AuthSession
from portal.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionInfo:
    id: str
    user_id: int
    role: str
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@retry_transient
def create_session(db: Session, user_id: int, now: datetime | None = None) -> SessionInfo:
    user = db.get(User, user_id)
    if user is None:
        raise LookupError(f"User {user_id} does not exist")
    now = now or datetime.now(timezone.utc)
    session_id = secrets.token_hex(32)
    expires_at = now + timedelta(days=settings.session_ttl_days)
    db.add(AuthSession(id=session_id, user_id=user_id, expires_at=expires_at))
    db.commit()
    return SessionInfo(id=session_id, user_id=user_id, role=user.role, expires_at=expires_at)


@retry_transient
def validate_session(db: Session, session_id: str | None, now: datetime | None = None) -> SessionInfo | None:
    """Return the session (with the user's role) if it exists and has not expired, else None."""
    if not session_id:
        return None
    row = db.execute(
        select(AuthSession, User.role).join(User, User.id == AuthSession.user_id).where(AuthSession.id == session_id)
    ).first()
    if row is None:
        return None
    auth_session, role = row
    now = now or datetime.now(timezone.utc)
    expires_at = _aware(auth_session.expires_at)
    if now >= expires_at:
        db.delete(auth_session)
        db.commit()
        logger.debug("Session for user %s expired; deleted", auth_session.user_id)
        return None
    if now >= expires_at - timedelta(days=settings.session_extend_within_days):
        expires_at = now + timedelta(days=settings.session_ttl_days)
        auth_session.expires_at = expires_at
        db.commit()
    return SessionInfo(id=auth_session.id, user_id=auth_session.user_id, role=role, expires_at=expires_at)


@retry_transient
def destroy_session(db: Session, session_id: str) -> None:
    db.execute(delete(AuthSession).where(AuthSession.id == session_id))
    db.commit()
