"""Portal account. role 'admin' receives broadcast admin notifications; 'user' owns document requests."""
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from portal.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(120), nullable=True)
    last_name = Column(String(120), nullable=True)
    role = Column(String(16), nullable=False, server_default="user", index=True)  # 'admin' | 'user'
    status = Column(String(16), nullable=False, server_default="active")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def display_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or "User"
