"""
Decoding of the structured `data` payload stored on admin notifications.

parse_notification_data never raises: it returns a PayloadResult. decode_notification_data maps the
error side to None plus a warning, so one malformed row can't hide the rest of the list.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from portal.core.constants import TYPE_DOCUMENT_REQUEST

logger = logging.getLogger(__name__)


class DocumentRequestPayload(BaseModel):
    """What the toast action and dropdown click need to navigate without a second fetch."""

    model_config = ConfigDict(extra="allow")

    document_type: str | None = None
    user_id: int | None = None
    user_name: str | None = None


# Per-type schemas; types not listed here accept any JSON object
PAYLOAD_SCHEMAS: dict[str, type[BaseModel]] = {
    TYPE_DOCUMENT_REQUEST: DocumentRequestPayload,
}


@dataclass(frozen=True)
class PayloadResult:
    value: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def encode_notification_data(data: dict[str, Any] | None) -> str | None:
    if data is None:
        return None
    return json.dumps(data, default=str)


def parse_notification_data(raw: Any, notification_type: str | None = None) -> PayloadResult:
    if raw is None:
        return PayloadResult()
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            return PayloadResult(error=f"not utf-8: {e}")
    if isinstance(raw, dict):
        value = raw
    elif isinstance(raw, str):
        if not raw.strip():
            return PayloadResult()
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            return PayloadResult(error=f"invalid JSON: {e}")
    else:
        return PayloadResult(error=f"unsupported payload type {type(raw).__name__}")
    if value is None:
        return PayloadResult()
    if not isinstance(value, dict):
        return PayloadResult(error=f"payload is a {type(value).__name__}, expected an object")
    schema = PAYLOAD_SCHEMAS.get(notification_type or "")
    if schema is not None:
        try:
            value = schema.model_validate(value).model_dump(exclude_unset=True)
        except ValidationError as e:
            return PayloadResult(error=f"schema mismatch for {notification_type}: {e.error_count()} error(s)")
    return PayloadResult(value=value)


def decode_notification_data(raw: Any, notification_id: int | None = None, notification_type: str | None = None) -> dict[str, Any] | None:
    result = parse_notification_data(raw, notification_type)
    if result.ok:
        return result.value
    logger.warning("Malformed data for notification %s (%s); returning null payload", notification_id, result.error)
    logger.debug("Original payload for notification %s: %r", notification_id, raw)
    return None
