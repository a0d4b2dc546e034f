"""
Single source of truth for database tables that exist after migrations.

Use these names when writing raw SQL (e.g. TRUNCATE in scripts). alembic/env.py asserts that
the registered models match this list.
"""
ALL_TABLE_NAMES = (
    "users",
    "sessions",
    "document_requests",
    "notifications",
    "admin_notifications",
    "admin_notification_reads",
    "user_settings",
)

# Tables holding notification state only (cleared by scripts/reset_notifications.py). Children first.
NOTIFICATION_TABLE_NAMES = (
    "admin_notification_reads",
    "admin_notifications",
    "notifications",
)
