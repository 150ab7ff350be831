"""Webhook event decoding."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from diffcheck_service.models.event import EVENT_TYPES
from diffcheck_service.utils.logging import get_logger

if TYPE_CHECKING:
    from diffcheck_service.models.event import Event

logger = get_logger("webhook.handler")


class WebhookParseError(Exception):
    """Raised when a supported event's payload cannot be decoded."""

    pass


class UnsupportedEventError(Exception):
    """Raised for an X-GitHub-Event value outside the supported set."""

    def __init__(self, event_type: str) -> None:
        """Initialize the UnsupportedEventError.

        Args:
            event_type: The rejected header value.
        """
        supported = "', '".join(sorted(EVENT_TYPES))
        super().__init__(f"Event type '{event_type}' not supported, only '{supported}'")
        self.event_type = event_type


def decode_event(event_type: str, body: bytes) -> Event:
    """Decode a webhook body into the event named by its header.

    The variant comes from ``event_type`` alone; the body's shape is never
    used to guess it. Unknown JSON fields are ignored and missing ones take
    empty defaults.

    Args:
        event_type: The X-GitHub-Event header value.
        body: The raw, already authenticated, request body.

    Returns:
        PingEvent or PushEvent.

    Raises:
        UnsupportedEventError: If the event type is not supported.
        WebhookParseError: If the body is not valid JSON or has a field of
            the wrong type.
    """
    event_cls = EVENT_TYPES.get(event_type)
    if event_cls is None:
        raise UnsupportedEventError(event_type)

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise WebhookParseError(f"Invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise WebhookParseError(
            f"Payload must be a JSON object, got {type(payload).__name__}"
        )

    try:
        event = event_cls.from_webhook_payload(payload)
    except TypeError as e:
        raise WebhookParseError(f"Invalid field value: {e}") from e

    logger.debug("Decoded webhook event", extra={"event_type": event_type})
    return event
