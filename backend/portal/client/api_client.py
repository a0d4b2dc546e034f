"""Notifications API client (httpx): lowest level, sends requests and parses the wire shapes."""
from typing import Any

import httpx

from portal.core.constants import DEFAULT_PAGE_LIMIT
from portal.schemas.notification import PaginatedNotificationsOut
from portal.schemas.settings import NotificationSettings

DEFAULT_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_COOKIE_NAME = "auth_session"


class NotificationsApiError(Exception):
    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(f"Notifications API error: {status_code}" + (f" ({message})" if message else ""))
        self.status_code = status_code
        self.message = message


class SessionExpired(NotificationsApiError):
    """401 from the API: the session cookie is missing, unknown or expired."""


class NotificationsApiClient:
    """Cookie-authenticated client for /api/notifications and /api/settings."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session_id: str | None = None,
        *,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)
        if session_id:
            self._http.cookies.set(cookie_name, session_id)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        r = self._http.request(method, path, headers={"Content-Type": "application/json"}, **kwargs)
        if r.status_code == 401:
            raise SessionExpired(401)
        if not r.is_success:
            raise NotificationsApiError(r.status_code, r.text[:200] if r.text else None)
        try:
            body = r.json() if r.content else {}
        except ValueError:
            raise NotificationsApiError(r.status_code, "response is not JSON")
        if not body.get("success"):
            raise NotificationsApiError(r.status_code, body.get("message"))
        return body

    def fetch_page(self, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> PaginatedNotificationsOut:
        body = self._request("GET", "/api/notifications/paginated", params={"page": page, "limit": limit})
        return PaginatedNotificationsOut.model_validate(body.get("data") or {})

    def mark_read(self, notification_id: int) -> bool:
        return bool(self._request("POST", f"/api/notifications/{notification_id}/read").get("success"))

    def mark_all_read(self) -> bool:
        return bool(self._request("POST", "/api/notifications/mark-all-read").get("success"))

    def get_settings(self) -> NotificationSettings:
        body = self._request("GET", "/api/settings")
        return NotificationSettings.model_validate((body.get("data") or {}).get("notifications") or {})
