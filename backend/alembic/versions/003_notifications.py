"""Notifications: per-user rows, admin broadcasts with per-admin read receipts, user settings.

- notifications: one recipient per row, read state on the row (is_read, read_at).
- admin_notifications: one row shared by all admins; data is JSON (type-specific payload).
- admin_notification_reads: at most one receipt per (notification_id, admin_id); the unique key
  makes mark-as-read idempotent. Cascades with both the notification and the admin user.
- user_settings: JSON value per (user_id, setting_key).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("related_id", sa.Integer(), nullable=True),
        sa.Column("related_type", sa.String(50), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"], unique=False)
    op.create_index("ix_notifications_type", "notifications", ["type"], unique=False)
    op.create_index("ix_notifications_is_read", "notifications", ["is_read"], unique=False)
    op.create_index("ix_notifications_related_id", "notifications", ["related_id"], unique=False)
    op.create_index("ix_notifications_related_type", "notifications", ["related_type"], unique=False)

    op.create_table(
        "admin_notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("related_id", sa.Integer(), nullable=True),
        sa.Column("related_type", sa.String(50), nullable=True),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_admin_notifications_type", "admin_notifications", ["type"], unique=False)
    op.create_index("ix_admin_notifications_related_id", "admin_notifications", ["related_id"], unique=False)
    op.create_index("ix_admin_notifications_related_type", "admin_notifications", ["related_type"], unique=False)
    op.create_index("ix_admin_notifications_created_at", "admin_notifications", ["created_at"], unique=False)

    op.create_table(
        "admin_notification_reads",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "notification_id",
            sa.Integer(),
            sa.ForeignKey("admin_notifications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("notification_id", "admin_id", name="unique_admin_notification"),
    )
    op.create_index(
        "ix_admin_notification_reads_notification_id", "admin_notification_reads", ["notification_id"], unique=False
    )
    op.create_index("ix_admin_notification_reads_admin_id", "admin_notification_reads", ["admin_id"], unique=False)

    op.create_table(
        "user_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("setting_key", sa.String(100), nullable=False),
        sa.Column("setting_value", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "setting_key", name="unique_user_setting"),
    )
    op.create_index("ix_user_settings_user_id", "user_settings", ["user_id"], unique=False)
    op.create_index("ix_user_settings_setting_key", "user_settings", ["setting_key"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_user_settings_setting_key", table_name="user_settings")
    op.drop_index("ix_user_settings_user_id", table_name="user_settings")
    op.drop_table("user_settings")
    op.drop_index("ix_admin_notification_reads_admin_id", table_name="admin_notification_reads")
    op.drop_index("ix_admin_notification_reads_notification_id", table_name="admin_notification_reads")
    op.drop_table("admin_notification_reads")
    op.drop_index("ix_admin_notifications_created_at", table_name="admin_notifications")
    op.drop_index("ix_admin_notifications_related_type", table_name="admin_notifications")
    op.drop_index("ix_admin_notifications_related_id", table_name="admin_notifications")
    op.drop_index("ix_admin_notifications_type", table_name="admin_notifications")
    op.drop_table("admin_notifications")
    op.drop_index("ix_notifications_related_type", table_name="notifications")
    op.drop_index("ix_notifications_related_id", table_name="notifications")
    op.drop_index("ix_notifications_is_read", table_name="notifications")
    op.drop_index("ix_notifications_type", table_name="notifications")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
