"""Document requests (source of admin and user notifications)

Revision ID: 002
Revises: 001
Create Date: (run alembic upgrade head)

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "document_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("document_type", sa.String(50), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("admin_message", sa.Text(), nullable=True),
        sa.Column("responded_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("responded_by_name", sa.String(255), nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_document_requests_user_id", "document_requests", ["user_id"], unique=False)
    op.create_index("ix_document_requests_status", "document_requests", ["status"], unique=False)
    op.create_index("ix_document_requests_document_type", "document_requests", ["document_type"], unique=False)
    op.create_index("ix_document_requests_created_at", "document_requests", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_document_requests_created_at", table_name="document_requests")
    op.drop_index("ix_document_requests_document_type", table_name="document_requests")
    op.drop_index("ix_document_requests_status", table_name="document_requests")
    op.drop_index("ix_document_requests_user_id", table_name="document_requests")
    op.drop_table("document_requests")
