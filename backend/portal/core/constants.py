"""
Centralized constants for notifications, pagination, caches and the client poller.

Change intervals and windows here instead of scattering literals across services and routes.
"""

# Notification type tags (consumers pick icon/routing from these)
TYPE_DOCUMENT_REQUEST = "document_request"
TYPE_DOCUMENT_REQUEST_UPDATE = "document_request_update"

# related_type discriminators (weak references, lookup only)
RELATED_DOCUMENT_REQUESTS = "document_requests"
RELATED_DOCUMENT_REQUEST = "document_request"

# Update kinds accepted by notify_user_document_request_update
UPDATE_STATUS_UPDATED = "status_updated"
UPDATE_RESPONSE_ADDED = "response_added"

# Document request lifecycle
REQUEST_STATUSES = ("pending", "in_progress", "completed", "rejected")

ROLE_ADMIN = "admin"
ROLE_USER = "user"

# Pagination for GET /notifications/paginated
DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100
# Legacy non-paginated list and per-user list
DEFAULT_LIST_LIMIT = 50

# Document request caches (seconds)
REQUEST_DETAIL_CACHE_TTL_SECONDS = 30
REQUEST_LIST_CACHE_TTL_SECONDS = 60

# Client poller
POLL_INTERVAL_SECONDS = 30
# Only unread items created within this window trigger a toast
ALERT_RECENCY_WINDOW_SECONDS = 30
# Processed-id set is pruned to ids seen among notifications newer than this
PROCESSED_PRUNE_WINDOW_SECONDS = 5 * 60
PROCESSED_PRUNE_INTERVAL_SECONDS = 5 * 60
TOAST_AUTO_CLOSE_MS = 5000
POLL_JOB_ID = "notifications_poll"
PRUNE_JOB_ID = "notifications_prune"
