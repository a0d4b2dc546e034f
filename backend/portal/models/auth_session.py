"""Cookie session: random id -> user, with a sliding expiry (see portal.services.auth)."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from portal.db.base import Base


class AuthSession(Base):
    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
