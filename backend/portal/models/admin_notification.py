"""Admin broadcast notifications and per-admin read receipts.

One admin_notifications row is shared by every admin; fan-out happens at read time by joining
admin_notification_reads (at most one row per notification/admin pair). Adding an admin never
requires backfilling notification rows.

data is the raw JSON text (JSON column in MySQL); it is decoded by portal.core.payload so a
malformed value degrades to null instead of failing the query.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from portal.db.base import Base


class AdminNotification(Base):
    __tablename__ = "admin_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(50), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    related_id = Column(Integer, nullable=True, index=True)
    related_type = Column(String(50), nullable=True, index=True)
    # JSON in the migration (MySQL validates on write); mapped as Text because PyMySQL returns JSON columns
    # as str, and the raw value must reach portal.core.payload undecoded so a bad row degrades to null
    data = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


class AdminNotificationRead(Base):
    __tablename__ = "admin_notification_reads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    notification_id = Column(
        Integer, ForeignKey("admin_notifications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    admin_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    read_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("notification_id", "admin_id", name="unique_admin_notification"),
    )
